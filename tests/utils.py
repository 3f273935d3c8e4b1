import contextlib
import os

from redis.backoff import NoBackoff
from redis.connection import Connection
from redis.retry import Retry

from redis_opentracing.internal.utils.wrappers import iswrapped


@contextlib.contextmanager
def override_env(env, replace_os_env=False):
    """
    Temporarily override ``os.environ`` with provided values::

        >>> with override_env(dict(REDIS_OPENTRACING_DB_STATEMENT_LENGTH="5")):
            # Your test
    """
    # Copy the full original environment
    original = dict(os.environ)

    # We allow callers to clear out the environment to prevent leaking variables into the test
    if replace_os_env:
        os.environ.clear()

    for k in list(os.environ.keys()):
        if k.startswith("REDIS_OPENTRACING_"):
            del os.environ[k]

    # Update based on the passed in arguments
    os.environ.update(env)
    try:
        yield
    finally:
        # Full clear the environment out and reset back to the original
        os.environ.clear()
        os.environ.update(original)


def is_wrapped(obj):
    return iswrapped(obj)


def assert_wrapped(obj):
    """
    Helper to assert that a given object is properly wrapped by wrapt.
    """
    assert is_wrapped(obj), "{} is not wrapped".format(obj)


def assert_not_wrapped(obj):
    """
    Helper to assert that a given object is not wrapped by wrapt.
    """
    assert not is_wrapped(obj), "{} is wrapped".format(obj)


def assert_not_double_wrapped(obj):
    """
    Helper to assert that a given already wrapped object is not wrapped twice.

    This is useful for asserting idempotence.
    """
    assert_wrapped(obj)
    assert_not_wrapped(obj.__wrapped__)


class FakeConnection(Connection):
    """``redis.connection.Connection`` with its socket I/O kept in memory.

    Responses are handed out in order by ``read_response``. When ``error`` is
    set, it is raised as soon as anything is sent.
    """

    def __init__(self, responses=None, error=None):
        super(FakeConnection, self).__init__(host="localhost", port=6379, db=0, retry=Retry(NoBackoff(), 0))
        self.responses = list(responses or [])
        self.error = error
        self.sent = []
        self.disconnects = 0

    def _send(self, payload):
        if self.error is not None:
            raise self.error
        self.sent.append(payload)

    def connect(self, *args, **kwargs):
        pass

    def send_command(self, *args, **kwargs):
        self._send(args)

    def pack_commands(self, commands):
        return list(commands)

    def send_packed_command(self, command, check_health=True):
        self._send(command)

    def read_response(self, *args, **kwargs):
        return self.responses.pop(0)

    def disconnect(self, *args, **kwargs):
        self.disconnects += 1


def span_tags(span):
    return dict(span.tags)


def error_log(span):
    """Return the key/values of the last ``error`` event logged on the span."""
    for log in reversed(span.logs):
        if log.key_values.get("event") == "error":
            return log.key_values
    return None
