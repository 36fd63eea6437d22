"""Redis-based job queue for security-analysis work.

This module provides the durable queue the webhook ingest server submits to:
- Jobs are keyed by their dedup key, so a commit is queued at most once
  while its record is retained
- Waiting jobs are served by priority (1 first) and then by submission order
- Failed attempts are retried with exponential backoff up to the attempt
  ceiling, after which the job is moved to the failed set
- Only the newest completed and failed records are retained

Key layout under ``sentinel:<queue-name>:``::

    job:<id>    hash    job record
    seq         string  insertion counter used to order equal priorities
    wait        zset    waiting jobs, score = priority << 32 | seq
    delayed     zset    jobs waiting out a backoff, score = ready time (ms)
    active      zset    jobs being processed, score = start time (ms)
    completed   zset    finished jobs, score = finish time (ms)
    failed      zset    exhausted jobs, score = finish time (ms)
"""

import logging
import time
from typing import Callable, Dict, Optional

import redis

from .jobs import (
    ANALYZE_COMMIT_JOB,
    DEFAULT_PRIORITY,
    EnqueuedJob,
    JobDescriptor,
    JobOptions,
    JobState,
    QueueMetricsSnapshot,
)

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_NAME = "security-analysis"
KEY_PREFIX = "sentinel"


class JobNotFound(LookupError):
    """Raised when a job id has no record in the queue."""


def create_redis_client(host: str = "localhost", port: int = 6379,
                        password: Optional[str] = None, db: int = 0) -> redis.Redis:
    """Open the pooled Redis client shared by every request."""
    return redis.Redis(
        host=host,
        port=port,
        password=password or None,
        db=db,
        decode_responses=True,
        socket_keepalive=True,
    )


class SecurityAnalysisQueue:
    """Redis-backed queue of security-analysis jobs."""

    def __init__(self, redis_client: redis.Redis, name: str = DEFAULT_QUEUE_NAME,
                 default_options: Optional[JobOptions] = None,
                 clock: Callable[[], float] = time.time):
        self.redis = redis_client
        self.name = name
        self.default_options = default_options or JobOptions()
        self._clock = clock
        self._prefix = f"{KEY_PREFIX}:{name}"

    # Keys

    def _key(self, suffix: str) -> str:
        return f"{self._prefix}:{suffix}"

    def _job_key(self, job_id: str) -> str:
        return self._key(f"job:{job_id}")

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    @staticmethod
    def _wait_score(priority: int, seq: int) -> int:
        return (priority << 32) | (seq & 0xFFFFFFFF)

    # Producer side

    def add(self, descriptor: JobDescriptor, name: str = ANALYZE_COMMIT_JOB,
            options: Optional[JobOptions] = None) -> EnqueuedJob:
        """Submit a job unless one with the same dedup key is already retained.

        Returns the new record, or the existing record with ``duplicate=True``.
        """
        options = options or self.default_options
        job_id = descriptor.dedup_key
        job_key = self._job_key(job_id)
        now = self._now_ms()

        def create(pipe: redis.client.Pipeline) -> bool:
            if pipe.exists(job_key):
                return False
            seq = pipe.incr(self._key("seq"))
            pipe.multi()
            pipe.hset(job_key, mapping={
                "name": name,
                "data": descriptor.model_dump_json(by_alias=True),
                "priority": descriptor.priority,
                "state": JobState.WAITING.value,
                "attempts_made": 0,
                "max_attempts": options.attempts,
                "backoff_type": options.backoff_type,
                "backoff_delay_ms": options.backoff_delay_ms,
                "remove_on_complete": options.remove_on_complete,
                "remove_on_fail": options.remove_on_fail,
                "timestamp": now,
            })
            pipe.zadd(self._key("wait"), {job_id: self._wait_score(descriptor.priority, seq)})
            return True

        created = self.redis.transaction(create, job_key, value_from_callable=True)
        if not created:
            existing = self.get_job(job_id)
            if existing is None:
                # evicted between the existence check and the read
                return self.add(descriptor, name=name, options=options)
            logger.debug(f"Job {job_id} already queued in state {existing.state.value}")
            return existing.model_copy(update={"duplicate": True})

        logger.debug(f"Added job {job_id} to queue '{self.name}' with priority {descriptor.priority}")
        return EnqueuedJob(
            job_id=job_id,
            name=name,
            data=descriptor,
            priority=descriptor.priority,
            state=JobState.WAITING,
            max_attempts=options.attempts,
            timestamp=now,
        )

    def get_job(self, job_id: str) -> Optional[EnqueuedJob]:
        """Return the stored record for ``job_id``, or None once evicted."""
        raw = self.redis.hgetall(self._job_key(job_id))
        if not raw or "data" not in raw:
            return None
        return self._job_from_hash(job_id, raw)

    def _job_from_hash(self, job_id: str, raw: Dict[str, str]) -> EnqueuedJob:
        def optional_int(field: str) -> Optional[int]:
            value = raw.get(field)
            return int(value) if value not in (None, "") else None

        return EnqueuedJob(
            job_id=job_id,
            name=raw.get("name", ANALYZE_COMMIT_JOB),
            data=JobDescriptor.model_validate_json(raw["data"]),
            priority=int(raw.get("priority", DEFAULT_PRIORITY)),
            state=JobState(raw.get("state", JobState.WAITING.value)),
            attempts_made=int(raw.get("attempts_made", 0)),
            max_attempts=int(raw.get("max_attempts", self.default_options.attempts)),
            timestamp=int(raw.get("timestamp", 0)),
            processed_on=optional_int("processed_on"),
            finished_on=optional_int("finished_on"),
            delay_until=optional_int("delay_until"),
            failed_reason=raw.get("failed_reason") or None,
        )

    def _options_from_hash(self, raw: Dict[str, str]) -> JobOptions:
        defaults = self.default_options
        return JobOptions(
            attempts=int(raw.get("max_attempts", defaults.attempts)),
            backoff_type=raw.get("backoff_type", defaults.backoff_type),
            backoff_delay_ms=int(raw.get("backoff_delay_ms", defaults.backoff_delay_ms)),
            remove_on_complete=int(raw.get("remove_on_complete", defaults.remove_on_complete)),
            remove_on_fail=int(raw.get("remove_on_fail", defaults.remove_on_fail)),
        )

    # Consumer side

    def promote_delayed(self) -> int:
        """Move jobs whose backoff has elapsed back to the wait set."""
        now = self._now_ms()
        delayed_key = self._key("delayed")
        promoted = 0
        for job_id in self.redis.zrangebyscore(delayed_key, "-inf", now):
            # zrem succeeds for exactly one caller
            if not self.redis.zrem(delayed_key, job_id):
                continue
            priority = int(self.redis.hget(self._job_key(job_id), "priority") or DEFAULT_PRIORITY)
            seq = self.redis.incr(self._key("seq"))
            pipe = self.redis.pipeline()
            pipe.zadd(self._key("wait"), {job_id: self._wait_score(priority, seq)})
            pipe.hset(self._job_key(job_id), "state", JobState.WAITING.value)
            pipe.execute()
            promoted += 1
        if promoted:
            logger.debug(f"Promoted {promoted} delayed jobs in queue '{self.name}'")
        return promoted

    def fetch_next(self) -> Optional[EnqueuedJob]:
        """Claim the highest-priority waiting job and mark it active."""
        self.promote_delayed()
        popped = self.redis.zpopmin(self._key("wait"), 1)
        if not popped:
            return None
        job_id = popped[0][0]
        now = self._now_ms()
        pipe = self.redis.pipeline()
        pipe.zadd(self._key("active"), {job_id: now})
        pipe.hset(self._job_key(job_id), mapping={
            "state": JobState.ACTIVE.value,
            "processed_on": now,
        })
        pipe.execute()
        job = self.get_job(job_id)
        if job is None:
            raise JobNotFound(job_id)
        return job

    def complete(self, job_id: str) -> EnqueuedJob:
        """Mark an active job as completed."""
        raw = self.redis.hgetall(self._job_key(job_id))
        if not raw:
            raise JobNotFound(job_id)
        options = self._options_from_hash(raw)
        now = self._now_ms()
        pipe = self.redis.pipeline()
        pipe.zrem(self._key("active"), job_id)
        pipe.zadd(self._key("completed"), {job_id: now})
        pipe.hset(self._job_key(job_id), mapping={
            "state": JobState.COMPLETED.value,
            "finished_on": now,
        })
        pipe.execute()
        job = self._job_from_hash(job_id, self.redis.hgetall(self._job_key(job_id)))
        self._trim(self._key("completed"), options.remove_on_complete)
        return job

    def fail(self, job_id: str, reason: str) -> EnqueuedJob:
        """Record a failed attempt, scheduling a retry until attempts run out."""
        job_key = self._job_key(job_id)
        raw = self.redis.hgetall(job_key)
        if not raw:
            raise JobNotFound(job_id)
        options = self._options_from_hash(raw)
        attempts_made = self.redis.hincrby(job_key, "attempts_made", 1)
        now = self._now_ms()

        pipe = self.redis.pipeline()
        pipe.zrem(self._key("active"), job_id)
        if attempts_made < options.attempts:
            ready_at = now + options.backoff_delay(attempts_made)
            pipe.zadd(self._key("delayed"), {job_id: ready_at})
            pipe.hset(job_key, mapping={
                "state": JobState.DELAYED.value,
                "failed_reason": reason,
                "delay_until": ready_at,
            })
            logger.info(f"Job {job_id} failed attempt {attempts_made}/{options.attempts}, "
                        f"retrying in {ready_at - now}ms")
        else:
            pipe.zadd(self._key("failed"), {job_id: now})
            pipe.hset(job_key, mapping={
                "state": JobState.FAILED.value,
                "failed_reason": reason,
                "finished_on": now,
            })
            logger.warning(f"Job {job_id} failed after {attempts_made} attempts: {reason}")
        pipe.execute()

        job = self._job_from_hash(job_id, self.redis.hgetall(job_key))
        if job.state is JobState.FAILED:
            self._trim(self._key("failed"), options.remove_on_fail)
        return job

    def _trim(self, key: str, keep: int) -> int:
        """Evict the oldest entries of a history set beyond ``keep``."""
        excess = self.redis.zcard(key) - keep
        if excess <= 0:
            return 0
        evicted = self.redis.zrange(key, 0, excess - 1)
        if not evicted:
            return 0
        pipe = self.redis.pipeline()
        pipe.zrem(key, *evicted)
        pipe.delete(*(self._job_key(job_id) for job_id in evicted))
        pipe.execute()
        logger.debug(f"Evicted {len(evicted)} jobs from {key}")
        return len(evicted)

    # Counts

    def get_waiting_count(self) -> int:
        """Jobs waiting to run, including those waiting out a retry backoff."""
        return self.redis.zcard(self._key("wait")) + self.redis.zcard(self._key("delayed"))

    def get_active_count(self) -> int:
        return self.redis.zcard(self._key("active"))

    def get_completed_count(self) -> int:
        return self.redis.zcard(self._key("completed"))

    def get_failed_count(self) -> int:
        return self.redis.zcard(self._key("failed"))

    def get_job_counts(self) -> QueueMetricsSnapshot:
        """Read all four counts in one non-transactional round trip."""
        pipe = self.redis.pipeline(transaction=False)
        for suffix in ("wait", "delayed", "active", "completed", "failed"):
            pipe.zcard(self._key(suffix))
        wait, delayed, active, completed, failed = pipe.execute()
        return QueueMetricsSnapshot(
            waiting=wait + delayed,
            active=active,
            completed=completed,
            failed=failed,
        )

    # Lifecycle

    def ping(self) -> bool:
        return bool(self.redis.ping())

    def close(self) -> None:
        """Release the underlying connection pool."""
        self.redis.close()
        logger.info(f"Closed connection for queue '{self.name}'")
