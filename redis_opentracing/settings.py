from collections import namedtuple
import threading
import typing as t

from envier import En
import opentracing


class RedisOpenTracingConfig(En):
    __prefix__ = "redis_opentracing"

    db_statement_length = En.v(
        t.Optional[int],
        "db_statement_length",
        default=None,
        help_type="Integer",
        help="Maximum number of characters kept in the ``db.statement`` span tag. Unset means no truncation",
    )

    logging_rate = En.v(
        int,
        "logging_rate",
        default=60,
        help_type="Integer",
        help="Minimum number of seconds between two identical internal log records. ``0`` disables rate limiting",
    )


env_config = RedisOpenTracingConfig()


TracerConfig = namedtuple("TracerConfig", ["tracer", "db_statement_length"])


def _validate_db_statement_length(value):
    if value is None:
        return
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError("db_statement_length must be a positive integer, got %r" % (value,))


class TracerRegistry(object):
    """Process-wide tracer and statement length used by the redis wrappers.

    The current ``TracerConfig`` is immutable and replaced as a whole by
    :meth:`configure`, so a reader that takes :attr:`current` once gets a
    consistent pair for the whole traced call.
    """

    def __init__(self, db_statement_length=None):
        _validate_db_statement_length(db_statement_length)
        self._lock = threading.Lock()
        self._default_db_statement_length = db_statement_length
        self._current = TracerConfig(None, db_statement_length)

    @property
    def current(self):
        # type: () -> TracerConfig
        return self._current

    def configure(self, tracer=None, db_statement_length=None):
        # type: (t.Optional[opentracing.Tracer], t.Optional[int]) -> TracerConfig
        """Replace the active configuration. Last write wins.

        ``tracer=None`` selects ``opentracing.global_tracer()`` at call time and
        ``db_statement_length=None`` falls back to the environment default.
        """
        _validate_db_statement_length(db_statement_length)
        if db_statement_length is None:
            db_statement_length = self._default_db_statement_length
        with self._lock:
            self._current = TracerConfig(tracer, db_statement_length)
            return self._current

    def get_tracer(self, tracer_config=None):
        # type: (t.Optional[TracerConfig]) -> opentracing.Tracer
        tracer_config = tracer_config or self._current
        if tracer_config.tracer is not None:
            return tracer_config.tracer
        return opentracing.global_tracer()


def _db_statement_length_from_env(env):
    # type: (RedisOpenTracingConfig) -> t.Optional[int]
    """Initial statement length, or unbounded when the environment value is invalid."""
    try:
        _validate_db_statement_length(env.db_statement_length)
    except ValueError:
        from .internal.logger import get_logger

        get_logger(__name__).warning(
            "ignoring REDIS_OPENTRACING_DB_STATEMENT_LENGTH=%r, statements are not truncated", env.db_statement_length
        )
        return None
    return env.db_statement_length


config = TracerRegistry(db_statement_length=_db_statement_length_from_env(env_config))
