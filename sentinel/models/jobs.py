"""Job models for the security-analysis queue."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

ANALYZE_COMMIT_JOB = "analyze-commit"
DEFAULT_PRIORITY = 5
HIGHEST_PRIORITY = 1
LOWEST_PRIORITY = 10
COMMIT_SHA_PATTERN = r"^[0-9a-f]{40}([0-9a-f]{24})?$"


class JobState(str, Enum):
    """Job lifecycle states."""
    WAITING = "waiting"
    DELAYED = "delayed"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class JobOptions(BaseModel):
    """Retry and retention settings attached to every submitted job."""
    attempts: int = Field(3, ge=1)
    backoff_type: str = "exponential"
    backoff_delay_ms: int = Field(2000, ge=0)
    remove_on_complete: int = Field(100, ge=0)
    remove_on_fail: int = Field(100, ge=0)

    def backoff_delay(self, attempt: int) -> int:
        """Milliseconds to wait before retrying after failed attempt ``attempt`` (1-based)."""
        if attempt < 1:
            raise ValueError("attempt must be >= 1")
        if self.backoff_type == "fixed":
            return self.backoff_delay_ms
        return self.backoff_delay_ms * 2 ** (attempt - 1)


class JobDescriptor(BaseModel):
    """The unit of work handed to the security-analysis queue."""
    model_config = ConfigDict(populate_by_name=True)

    repository: str = Field(..., min_length=1, pattern=r"^[^/\s]+/[^/\s]+$")
    commit_sha: str = Field(..., alias="commitSha", pattern=COMMIT_SHA_PATTERN)
    changed_files: List[str] = Field(default_factory=list, alias="changedFiles")
    priority: int = Field(DEFAULT_PRIORITY, ge=HIGHEST_PRIORITY, le=LOWEST_PRIORITY)

    @property
    def dedup_key(self) -> str:
        return f"{self.repository}-{self.commit_sha}"

    @property
    def short_sha(self) -> str:
        return self.commit_sha[:7]


class EnqueuedJob(BaseModel):
    """The queue's record of a submitted ``JobDescriptor``."""
    job_id: str
    name: str = ANALYZE_COMMIT_JOB
    data: JobDescriptor
    priority: int = DEFAULT_PRIORITY
    state: JobState = JobState.WAITING
    attempts_made: int = 0
    max_attempts: int = 3
    timestamp: int = Field(..., description="Creation time in epoch milliseconds")
    processed_on: Optional[int] = None
    finished_on: Optional[int] = None
    delay_until: Optional[int] = None
    failed_reason: Optional[str] = None
    duplicate: bool = Field(False, description="True when the submission matched an existing job")


class QueueMetricsSnapshot(BaseModel):
    """Point-in-time job counts for the security-analysis queue."""
    waiting: int = 0
    active: int = 0
    completed: int = 0
    failed: int = 0
