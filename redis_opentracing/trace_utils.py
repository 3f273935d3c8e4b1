"""
Span scoping shared by the sync and asyncio redis wrappers.
"""
from contextlib import contextmanager
import traceback

from opentracing import logs
from opentracing.ext import tags as ot_tags

from . import ext
from . import tags
from .internal.logger import get_logger
from .settings import config


log = get_logger(__name__)


def _start_active_span(tracer_config, build_span):
    """Open an active span, or return ``None`` if the tags or the tracer fail."""
    name = None
    try:
        name, span_tags = build_span(tracer_config)
        tracer = config.get_tracer(tracer_config)
        return tracer.start_active_span(name, tags=span_tags)
    except Exception:
        log.debug("failed to start span %s", name, exc_info=True)
        return None


def _record_error(scope, exc):
    span = getattr(scope, "span", None)
    if span is None:
        return
    try:
        span.set_tag(ot_tags.ERROR, True)
        span.log_kv(
            {
                logs.EVENT: ot_tags.ERROR,
                logs.ERROR_KIND: type(exc).__name__,
                logs.ERROR_OBJECT: exc,
                logs.MESSAGE: str(exc),
                logs.STACK: "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            }
        )
    except Exception:
        log.debug("failed to record error on span", exc_info=True)


def _close(scope):
    try:
        scope.close()
    except Exception:
        log.debug("failed to close span", exc_info=True)


@contextmanager
def _trace(build_span):
    # one read of the configuration per traced call
    tracer_config = config.current
    scope = _start_active_span(tracer_config, build_span)
    if scope is None:
        yield None
        return
    try:
        yield scope
    # KeyboardInterrupt or task cancellation closes the span without an error mark
    except Exception as e:
        _record_error(scope, e)
        raise
    finally:
        _close(scope)


@contextmanager
def trace_redis_cmd(instance, args):
    """Trace a single redis command for the duration of the block."""

    def build_span(tracer_config):
        span_tags = tags.build_command_tags(args, instance, tracer_config.db_statement_length)
        return tags.command_span_name(args), span_tags

    with _trace(build_span) as scope:
        yield scope


@contextmanager
def trace_redis_pipeline(instance):
    """Trace a whole pipeline, transaction framing included, as one span."""

    def build_span(tracer_config):
        commands = tags.pipeline_commands(instance)
        return ext.PIPELINE, tags.build_batch_tags(commands, instance, tracer_config.db_statement_length)

    with _trace(build_span) as scope:
        yield scope
