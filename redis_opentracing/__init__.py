"""
Trace redis-py commands and pipelines with an OpenTracing tracer.

Enabling
~~~~~~~~

Call :func:`instrument` once the tracer is set up::

    import opentracing
    import redis_opentracing

    redis_opentracing.instrument(tracer=opentracing.global_tracer())

    client = redis.Redis(host="localhost", port=6379)
    client.set("foo", "bar")  # reported as a ``redis.set`` span

Every command produces one span named ``redis.<command>`` and every
pipeline, transactional or not, one ``redis.pipelined`` span. Both carry the
``span.kind``, ``component``, ``db.type``, ``db.statement``, ``db.instance``
and ``peer.address`` tags. Failed calls are tagged ``error`` and logged with
the error kind, message and stack before the exception is re-raised.

Clients from ``redis.asyncio`` are traced too. Their spans stay active across
the awaited call, so the tracer must use a context-local scope manager for
concurrent commands to get separate spans::

    from opentracing.scope_managers.contextvars import ContextVarsScopeManager

    tracer = MyTracer(scope_manager=ContextVarsScopeManager())

Configuration
~~~~~~~~~~~~~

``instrument`` can be called again at any time to switch tracers or change
``db_statement_length``, the maximum number of characters kept in the
``db.statement`` tag. The redis client is only patched once.

The initial statement length can also be set with the
``REDIS_OPENTRACING_DB_STATEMENT_LENGTH`` environment variable.

Default: unbounded
"""
from typing import Optional  # noqa:F401

import opentracing  # noqa:F401

from .patch import get_version
from .patch import patch
from .patch import unpatch
from .settings import config
from .version import __version__


def instrument(tracer=None, db_statement_length=None):
    # type: (Optional[opentracing.Tracer], Optional[int]) -> None
    """Configure tracing and patch redis if it is installed.

    :param tracer: tracer to report spans to. Defaults to
        ``opentracing.global_tracer()``, looked up on every call.
    :param db_statement_length: maximum length of the ``db.statement`` tag.
    """
    config.configure(tracer=tracer, db_statement_length=db_statement_length)
    patch()


def uninstrument():
    # type: () -> None
    unpatch()


__all__ = ["instrument", "uninstrument", "patch", "unpatch", "get_version", "config", "__version__"]
