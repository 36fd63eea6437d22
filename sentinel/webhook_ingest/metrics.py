"""Queue health metrics."""

import logging

import redis

from ..common import MetricsUnavailable
from ..models.jobs import QueueMetricsSnapshot
from ..models.queue import SecurityAnalysisQueue

logger = logging.getLogger(__name__)


class QueueMetricsReporter:
    """Reports live job counts for the security-analysis queue."""

    def __init__(self, queue: SecurityAnalysisQueue):
        self.queue = queue

    def report(self) -> QueueMetricsSnapshot:
        """Count waiting, active, completed and failed jobs.

        The counts are read without a transaction, so concurrent submissions
        may skew them slightly relative to each other.
        """
        try:
            return self.queue.get_job_counts()
        except redis.RedisError as e:
            logger.error(f"Failed to read queue metrics: {e}")
            raise MetricsUnavailable(e) from e
