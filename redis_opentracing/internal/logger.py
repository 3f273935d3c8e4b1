"""
Logging utilities for internal use.
Usage:
    from redis_opentracing.internal.logger import get_logger
    log = get_logger(__name__)

    log.debug("failed to start span %r", name, exc_info=True)

Records are rate limited per (filename, line number): one record every
``REDIS_OPENTRACING_LOGGING_RATE`` seconds (60 by default), with the number of
skipped records reported on the next emitted one. ``0`` disables rate limiting,
and loggers set to ``DEBUG`` are never limited.
"""

import collections
import logging
import time
from typing import DefaultDict
from typing import Tuple

from redis_opentracing.settings import env_config


def get_logger(name: str) -> logging.Logger:
    """
    Retrieve or create a ``Logger`` instance with consistent behavior for internal use.

    Configure all loggers with a rate limiter filter to prevent excessive logging.
    """
    logger = logging.getLogger(name)
    # addFilter will only add the filter if it is not already present
    logger.addFilter(log_filter)
    return logger


# Class used for keeping track of a log lines current time bucket and the number of log lines skipped
class LoggingBucket:
    def __init__(self, bucket: float, skipped: int):
        self.bucket = bucket
        self.skipped = skipped

    def __repr__(self):
        return f"LoggingBucket({self.bucket}, {self.skipped})"

    def is_sampled(self, record: logging.LogRecord, rate: float) -> bool:
        """
        Determine if the log line should be sampled based on the rate limit.
        """
        current = time.monotonic()
        if current - self.bucket >= rate:
            self.bucket = current
            record.skipped = self.skipped
            self.skipped = 0
            return True
        self.skipped += 1
        return False


_MINF = float("-inf")

_buckets: DefaultDict[Tuple[str, int], LoggingBucket] = collections.defaultdict(lambda: LoggingBucket(_MINF, 0))


def _rate_limit() -> int:
    return env_config.logging_rate


def log_filter(record: logging.LogRecord) -> bool:
    """
    Function used to determine if a log record should be outputted or not (True = output, False = skip).

    This function will:
      - Rate limit log records based on the record filename and line number
    """
    logger = logging.getLogger(record.name)
    rate = _rate_limit()
    if not rate or logger.getEffectiveLevel() == logging.DEBUG:
        return True
    return _buckets[(record.pathname, record.lineno)].is_sampled(record, rate)


class RateLimitedFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        skipped = getattr(record, "skipped", 0)
        skip_str = f" [{skipped} skipped]" if skipped else ""
        return f"{record.levelname} {super().format(record)}{skip_str}"


# setup the default formatter for all package loggers
root_logger = logging.getLogger("redis_opentracing")
_handler = logging.StreamHandler()
_handler.setFormatter(RateLimitedFormatter())
root_logger.addHandler(_handler)
