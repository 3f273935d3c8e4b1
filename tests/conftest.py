from opentracing.mocktracer import MockTracer
import pytest

import redis_opentracing


@pytest.fixture
def tracer():
    return MockTracer()


@pytest.fixture
def instrumented(tracer):
    """Instrument redis with a mock tracer for the duration of the test."""
    redis_opentracing.instrument(tracer=tracer)
    yield tracer
    redis_opentracing.uninstrument()
    redis_opentracing.config.configure()
