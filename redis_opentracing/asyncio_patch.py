from .trace_utils import trace_redis_cmd
from .trace_utils import trace_redis_pipeline


#
# tracing async functions
#
async def traced_async_execute_command(func, instance, args, kwargs):
    with trace_redis_cmd(instance, args):
        return await func(*args, **kwargs)


async def traced_async_execute_pipeline(func, instance, args, kwargs):
    with trace_redis_pipeline(instance):
        return await func(*args, **kwargs)
