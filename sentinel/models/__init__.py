"""Shared models and queue infrastructure for security-analysis work."""

from .github_events import (
    GithubRepository,
    GithubCommit,
    GithubPullRequest,
    GithubPullRequestHead,
    PushEvent,
    PullRequestEvent,
    ValidatedEvent,
    IgnoredEvent,
    InvalidPayload,
)

from .jobs import (
    ANALYZE_COMMIT_JOB,
    DEFAULT_PRIORITY,
    JobState,
    JobOptions,
    JobDescriptor,
    EnqueuedJob,
    QueueMetricsSnapshot,
)

from .queue import (
    DEFAULT_QUEUE_NAME,
    JobNotFound,
    SecurityAnalysisQueue,
    create_redis_client,
)

__all__ = [
    # GitHub event models
    "GithubRepository",
    "GithubCommit",
    "GithubPullRequest",
    "GithubPullRequestHead",
    "PushEvent",
    "PullRequestEvent",
    "ValidatedEvent",
    "IgnoredEvent",
    "InvalidPayload",
    # Job models
    "ANALYZE_COMMIT_JOB",
    "DEFAULT_PRIORITY",
    "JobState",
    "JobOptions",
    "JobDescriptor",
    "EnqueuedJob",
    "QueueMetricsSnapshot",
    # Queue
    "DEFAULT_QUEUE_NAME",
    "JobNotFound",
    "SecurityAnalysisQueue",
    "create_redis_client",
]
