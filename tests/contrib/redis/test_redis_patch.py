import sys
import threading
from unittest import mock

from opentracing.mocktracer import MockTracer
import pytest
import redis
import redis.asyncio.client
import redis.client
import wrapt

import redis_opentracing
from redis_opentracing.patch import patch
from redis_opentracing.patch import unpatch
from tests.utils import FakeConnection
from tests.utils import assert_not_double_wrapped
from tests.utils import assert_not_wrapped


def patched_methods():
    return [
        redis.Redis.__dict__["execute_command"],
        redis.client.Pipeline.__dict__["execute"],
        redis.client.Pipeline.__dict__["immediate_execute_command"],
        redis.asyncio.client.Redis.__dict__["execute_command"],
        redis.asyncio.client.Pipeline.__dict__["execute"],
        redis.asyncio.client.Pipeline.__dict__["immediate_execute_command"],
    ]


@pytest.fixture(autouse=True)
def restore():
    yield
    unpatch()
    redis_opentracing.config.configure()


class TestPatch(object):
    def test_patch(self):
        assert patch() is True
        assert redis._opentracing_patch is True
        for method in patched_methods():
            assert_not_double_wrapped(method)

    def test_patch_idempotent(self):
        patch()
        originals = [method.__wrapped__ for method in patched_methods()]
        patch()
        redis_opentracing.instrument(tracer=MockTracer())
        redis_opentracing.instrument(tracer=MockTracer(), db_statement_length=5)

        for method, original in zip(patched_methods(), originals):
            assert_not_double_wrapped(method)
            assert method.__wrapped__ is original

    def test_queueing_is_not_wrapped(self):
        patch()
        assert_not_wrapped(redis.client.Pipeline.__dict__["execute_command"])

    def test_unpatch(self):
        patch()
        unpatch()
        assert redis._opentracing_patch is False
        for method in patched_methods():
            assert_not_wrapped(method)

    def test_unpatch_is_idempotent(self):
        unpatch()
        patch()
        unpatch()
        unpatch()
        for method in patched_methods():
            assert_not_wrapped(method)

    def test_patch_after_unpatch(self):
        patch()
        unpatch()
        patch()
        for method in patched_methods():
            assert_not_double_wrapped(method)

    def test_reinstrument_traces_once(self):
        tracer = MockTracer()
        redis_opentracing.instrument(tracer=tracer)
        redis_opentracing.uninstrument()
        redis_opentracing.instrument(tracer=tracer)

        client = redis.Redis(host="localhost", port=6379)
        client.connection = FakeConnection(responses=[b"bar", b"bar"])
        client.get("foo")
        client.get("foo")

        assert [span.operation_name for span in tracer.finished_spans()] == ["redis.get", "redis.get"]

    def test_failed_patch_is_rolled_back(self):
        real_wrap = wrapt.wrap_function_wrapper
        calls = []

        def wrap_function_wrapper(module, name, wrapper):
            calls.append(name)
            if len(calls) == 3:
                raise RuntimeError("cannot wrap {}".format(name))
            return real_wrap(module, name, wrapper)

        with mock.patch.object(wrapt, "wrap_function_wrapper", wrap_function_wrapper):
            with pytest.raises(RuntimeError):
                patch()

        assert not getattr(redis, "_opentracing_patch", False)
        for method in patched_methods():
            assert_not_wrapped(method)

        assert patch() is True
        for method in patched_methods():
            assert_not_double_wrapped(method)

    def test_concurrent_instrument(self):
        barrier = threading.Barrier(8)

        def run():
            barrier.wait()
            redis_opentracing.instrument(tracer=MockTracer())

        threads = [threading.Thread(target=run) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for method in patched_methods():
            assert_not_double_wrapped(method)

    def test_redis_not_installed(self):
        with mock.patch.dict(sys.modules, {"redis": None, "redis.client": None}):
            assert patch() is False
            # configuring still works without redis
            tracer = MockTracer()
            redis_opentracing.instrument(tracer=tracer)
            assert redis_opentracing.config.get_tracer() is tracer
        assert not getattr(redis, "_opentracing_patch", False)
        assert_not_wrapped(redis.Redis.__dict__["execute_command"])

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            redis_opentracing.instrument(tracer=MockTracer(), db_statement_length=0)
        assert not getattr(redis, "_opentracing_patch", False)

    def test_get_version(self):
        assert redis_opentracing.get_version() == redis.__version__
