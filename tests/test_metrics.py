"""Tests for queue health reporting."""

from unittest.mock import Mock

import pytest
import redis

from helpers import sha
from sentinel.common import MetricsUnavailable
from sentinel.models import JobDescriptor, QueueMetricsSnapshot
from sentinel.webhook_ingest.metrics import QueueMetricsReporter


def test_empty_queue_reports_zeros(queue):
    snapshot = QueueMetricsReporter(queue).report()
    assert snapshot.model_dump() == {"waiting": 0, "active": 0, "completed": 0, "failed": 0}


def test_counts_follow_job_lifecycle(queue):
    reporter = QueueMetricsReporter(queue)
    for n in range(1, 5):
        queue.add(JobDescriptor(repository="acme/widgets", commit_sha=sha(n)))

    first = queue.fetch_next()
    queue.complete(first.job_id)
    queue.fetch_next()
    third = queue.fetch_next()
    queue.fail(third.job_id, "boom")

    # the failed attempt is waiting out its backoff
    assert reporter.report() == QueueMetricsSnapshot(waiting=2, active=1, completed=1, failed=0)


def test_unreachable_store_is_an_error_not_zeros():
    queue = Mock()
    queue.get_job_counts.side_effect = redis.ConnectionError("Connection refused")

    with pytest.raises(MetricsUnavailable) as excinfo:
        QueueMetricsReporter(queue).report()

    assert isinstance(excinfo.value.cause, redis.ConnectionError)
