"""Turns validated GitHub events into security-analysis jobs."""

import logging
from typing import Optional, Union

from ..common import EnqueueFailed, log_event
from ..models.github_events import PullRequestEvent, PushEvent
from ..models.jobs import ANALYZE_COMMIT_JOB, DEFAULT_PRIORITY, EnqueuedJob, JobDescriptor
from ..models.queue import SecurityAnalysisQueue

logger = logging.getLogger(__name__)


class JobProducer:
    """Builds job descriptors and submits them to the queue."""

    def __init__(self, queue: SecurityAnalysisQueue, default_priority: int = DEFAULT_PRIORITY):
        self.queue = queue
        self.default_priority = default_priority

    def build_descriptor(self, event: Union[PushEvent, PullRequestEvent],
                         priority: Optional[int] = None) -> JobDescriptor:
        return JobDescriptor(
            repository=event.repository.full_name,
            commit_sha=event.commit_sha,
            changed_files=event.changed_files(),
            priority=priority or self.default_priority,
        )

    def enqueue(self, event: Union[PushEvent, PullRequestEvent],
                priority: Optional[int] = None) -> EnqueuedJob:
        """Submit the job for ``event``.

        Any failure to build or submit the job is logged and raised as
        ``EnqueueFailed``; the submission itself is never retried here.
        """
        repository = event.repository.full_name
        try:
            descriptor = self.build_descriptor(event, priority)
            job = self.queue.add(descriptor, name=ANALYZE_COMMIT_JOB)
        except Exception as e:
            log_event(logger, logging.ERROR, "Failed to Enqueue Job",
                      error=str(e), repository=repository)
            raise EnqueueFailed(e) from e

        if job.duplicate:
            log_event(logger, logging.INFO, "Duplicate Job Ignored",
                      jobId=job.job_id, repository=repository,
                      commitSha=descriptor.short_sha, state=job.state.value)
        else:
            log_event(logger, logging.INFO, "Job Enqueued Successfully",
                      jobId=job.job_id, repository=repository,
                      commitSha=descriptor.short_sha)
        return job
