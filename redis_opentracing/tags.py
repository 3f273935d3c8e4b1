"""
Tags and span names for traced redis commands.

Every function here is pure: tag dicts are built fresh on each call and no
module level template is shared between spans.
"""
from typing import Any  # noqa:F401
from typing import Dict  # noqa:F401
from typing import Iterable  # noqa:F401
from typing import List  # noqa:F401
from typing import Optional  # noqa:F401
from typing import Sequence  # noqa:F401
from typing import Text  # noqa:F401

from opentracing.ext import tags

from . import ext
from .internal.compat import ensure_text


VALUE_PLACEHOLDER = "?"


def _format_token(token):
    # type: (Any) -> Text
    if isinstance(token, (bytes, str)):
        return ensure_text(token, errors="backslashreplace")
    return str(token)


def format_command(args):
    # type: (Sequence[Any]) -> Text
    """Convert the arguments of a redis command into a space separated statement.

    The command name is lower-cased, arguments are kept as given::

        >>> format_command(("SET", "foo", b"bar"))
        'set foo bar'
    """
    out = []  # type: List[Text]
    for arg in args:
        try:
            token = _format_token(arg)
        except Exception:
            out.append(VALUE_PLACEHOLDER)
            break
        out.append(token.lower() if not out else token)
    return " ".join(out)


def format_pipeline(commands):
    # type: (Iterable[Sequence[Any]]) -> Text
    return ", ".join(format_command(args) for args in commands)


def truncate(statement, max_length=None):
    # type: (Text, Optional[int]) -> Text
    if max_length is None:
        return statement
    return statement[:max_length]


def command_span_name(args):
    # type: (Sequence[Any]) -> str
    if not args:
        return ext.DEFAULT_CMD
    try:
        name = _format_token(args[0])
    except Exception:
        return ext.DEFAULT_CMD
    return ext.CMD_PREFIX + name.lower()


def pipeline_commands(instance):
    # type: (Any) -> List[Sequence[Any]]
    """Return the commands a redis pipeline is about to send, in order.

    Transactions are framed with ``MULTI``/``EXEC`` the way the client sends
    them. An empty pipeline sends nothing.
    """
    stack = getattr(instance, "command_stack", None) or []
    commands = [entry[0] if _is_stack_entry(entry) else entry for entry in stack]
    if commands and (getattr(instance, "transaction", False) or getattr(instance, "explicit_transaction", False)):
        commands = [(ext.MULTI,)] + commands + [(ext.EXEC,)]
    return commands


def _is_stack_entry(entry):
    # redis-py stacks (args, options) pairs
    return isinstance(entry, tuple) and len(entry) == 2 and isinstance(entry[1], dict)


def connection_tags(instance):
    # type: (Any) -> Dict[str, Any]
    """Transform redis connection info into span tags"""
    try:
        conn_kwargs = instance.connection_pool.connection_kwargs
    except AttributeError:
        return {}
    conn_tags = {tags.DATABASE_INSTANCE: conn_kwargs.get("db") or 0}
    host, port = conn_kwargs.get("host"), conn_kwargs.get("port")
    if host is not None and port is not None:
        conn_tags[tags.PEER_ADDRESS] = ext.PEER_ADDRESS_FORMAT.format(host=host, port=port)
    return conn_tags


def _base_tags(statement, instance, max_length):
    # type: (Text, Any, Optional[int]) -> Dict[str, Any]
    span_tags = {
        tags.SPAN_KIND: tags.SPAN_KIND_RPC_CLIENT,
        tags.COMPONENT: ext.COMPONENT,
        tags.DATABASE_TYPE: ext.TYPE,
        tags.DATABASE_STATEMENT: truncate(statement, max_length),
    }
    span_tags.update(connection_tags(instance))
    return span_tags


def build_command_tags(args, instance, max_length=None):
    # type: (Sequence[Any], Any, Optional[int]) -> Dict[str, Any]
    return _base_tags(format_command(args), instance, max_length)


def build_batch_tags(commands, instance, max_length=None):
    # type: (Iterable[Sequence[Any]], Any, Optional[int]) -> Dict[str, Any]
    return _base_tags(format_pipeline(commands), instance, max_length)
