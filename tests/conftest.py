import fakeredis
import pytest

from helpers import FakeClock, load_event
from sentinel.models.jobs import JobOptions
from sentinel.models.queue import SecurityAnalysisQueue


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def queue(redis_client, clock):
    return SecurityAnalysisQueue(redis_client, name="test-analysis", clock=clock)


@pytest.fixture
def small_history_queue(redis_client, clock):
    options = JobOptions(remove_on_complete=2, remove_on_fail=2)
    return SecurityAnalysisQueue(redis_client, name="test-history",
                                 default_options=options, clock=clock)


@pytest.fixture
def push_payload():
    return load_event("push_event")


@pytest.fixture
def pull_request_payload():
    return load_event("pull_request_event")
