import threading

import wrapt

from .internal.logger import get_logger
from .internal.utils.wrappers import NotWrappedError
from .internal.utils.wrappers import unwrap as _u
from .trace_utils import trace_redis_cmd
from .trace_utils import trace_redis_pipeline


log = get_logger(__name__)

_patch_lock = threading.Lock()


def get_version():
    # type: () -> str
    import redis

    return getattr(redis, "__version__", "")


def _sync_targets():
    return [
        ("redis", "Redis.execute_command", traced_execute_command),
        ("redis.client", "Pipeline.execute", traced_execute_pipeline),
        ("redis.client", "Pipeline.immediate_execute_command", traced_execute_command),
    ]


def _async_targets():
    from .asyncio_patch import traced_async_execute_command
    from .asyncio_patch import traced_async_execute_pipeline

    return [
        ("redis.asyncio.client", "Redis.execute_command", traced_async_execute_command),
        ("redis.asyncio.client", "Pipeline.execute", traced_async_execute_pipeline),
        ("redis.asyncio.client", "Pipeline.immediate_execute_command", traced_async_execute_command),
    ]


def _has_asyncio():
    try:
        import redis.asyncio.client  # noqa:F401
    except ImportError:
        return False
    return True


def _targets():
    targets = _sync_targets()
    if _has_asyncio():
        targets += _async_targets()
    return targets


def _unwrap_target(module, name):
    owner, attr, _ = wrapt.resolve_path(module, name)
    _u(owner, attr)


def patch():
    # type: () -> bool
    """Wrap the redis client entry points. Safe to call any number of times.

    Returns whether redis is instrumented after the call. When redis cannot be
    imported nothing is patched and ``False`` is returned. If wrapping fails
    part way, the entry points already wrapped are restored before the error
    is raised.
    """
    try:
        import redis
        import redis.client  # noqa:F401
    except ImportError:
        log.debug("redis is not installed, skipping instrumentation")
        return False

    with _patch_lock:
        if getattr(redis, "_opentracing_patch", False):
            return True

        wrapped = []
        try:
            for module, name, wrapper in _targets():
                wrapt.wrap_function_wrapper(module, name, wrapper)
                wrapped.append((module, name))
        except Exception:
            for module, name in reversed(wrapped):
                _unwrap_target(module, name)
            raise

        redis._opentracing_patch = True
    log.debug("instrumented redis %s", get_version())
    return True


def unpatch():
    # type: () -> None
    """Restore the original redis client entry points."""
    try:
        import redis
        import redis.client  # noqa:F401
    except ImportError:
        return

    with _patch_lock:
        if not getattr(redis, "_opentracing_patch", False):
            return

        for module, name, _ in _targets():
            try:
                _unwrap_target(module, name)
            except NotWrappedError:
                log.debug("%s.%s was not wrapped", module, name)

        redis._opentracing_patch = False


#
# tracing functions
#
def traced_execute_command(func, instance, args, kwargs):
    with trace_redis_cmd(instance, args):
        return func(*args, **kwargs)


def traced_execute_pipeline(func, instance, args, kwargs):
    with trace_redis_pipeline(instance):
        return func(*args, **kwargs)
