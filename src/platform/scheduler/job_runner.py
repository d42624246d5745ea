"""
Durable Job Runner

Polls the job queue, dispatches each claimed job to the handler registered for
its kind and records the result:

    claim_due ──> handler(payload) ──ok──> mark_done
                        │
                        └──error──> mark_failed(retry_at=now + backoff)
                                    (FAILED once JOB_MAX_ATTEMPTS is reached)

Periodic triggers are enqueued with key = floor(epoch / interval), so every
replica computes the same key for the same tick and only one job per tick
exists no matter how many runners are alive. The payload carries the bucket
start, so a job that runs late still works on the interval it was fired for.

On the last allowed attempt the handler payload gets FINAL_ATTEMPT_PAYLOAD_KEY,
letting a handler settle instead of failing for good.
"""

from datetime import datetime, timedelta, timezone
import math
import time
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence

import anyio
from anyio.abc import TaskGroup
import attrs
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.platform.observability.tracing import TRACE_PAYLOAD_KEY, extract_trace_context
from src.platform.scheduler.i_job_queue import IJobQueue
from src.platform.scheduler.scheduled_job import (
    BUCKET_START_PAYLOAD_KEY,
    FINAL_ATTEMPT_PAYLOAD_KEY,
    ScheduledJob,
)
from src.platform.types.utc_datetime import utc_now


JobHandler = Callable[[dict[str, Any]], Awaitable[Any]]


@attrs.define
class PeriodicTrigger:
    kind: str
    interval_seconds: int
    payload: dict[str, Any] = attrs.field(factory=dict)

    def bucket_key(self, *, at: datetime) -> str:
        return str(math.floor(at.timestamp() / self.interval_seconds))

    def bucket_start(self, *, at: datetime) -> datetime:
        bucket = math.floor(at.timestamp() / self.interval_seconds)
        return datetime.fromtimestamp(bucket * self.interval_seconds, tz=timezone.utc)


class JobRunner:
    def __init__(
        self,
        *,
        job_queue: IJobQueue,
        handlers: Mapping[str, JobHandler],
        periodic_triggers: Sequence[PeriodicTrigger] = (),
        poll_interval: Optional[float] = None,
        batch_size: Optional[int] = None,
        lease_seconds: Optional[int] = None,
        max_attempts: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
    ) -> None:
        self.job_queue = job_queue
        self.handlers = dict(handlers)
        self.periodic_triggers = list(periodic_triggers)
        self.poll_interval = poll_interval or settings.JOB_POLL_INTERVAL_SECONDS
        self.batch_size = batch_size or settings.JOB_BATCH_SIZE
        self.lease_seconds = lease_seconds or settings.JOB_LEASE_SECONDS
        self.max_attempts = max_attempts or settings.JOB_MAX_ATTEMPTS
        self.retry_base_delay = retry_base_delay or settings.JOB_RETRY_BASE_DELAY_SECONDS
        self.tracer = trace.get_tracer(__name__)
        self._last_buckets: dict[str, str] = {}

    async def start(self, *, task_group: TaskGroup) -> None:
        task_group.start_soon(self.run_forever)  # pyrefly: ignore[bad-argument-type]
        Logger.base.info(
            f'⏱️  [JOB RUNNER] Started (kinds={sorted(self.handlers)}, poll={self.poll_interval}s)'
        )

    async def run_forever(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception as e:
                # Database hiccups must not kill the loop; the next poll retries
                Logger.base.error(f'❌ [JOB RUNNER] Poll failed: {e}')
            await anyio.sleep(self.poll_interval)

    async def run_once(self) -> int:
        """Fire due periodic triggers, then run one batch of due jobs. Returns jobs processed."""
        await self.fire_periodic_triggers()

        jobs = await self.job_queue.claim_due(
            limit=self.batch_size, lease_seconds=self.lease_seconds
        )
        if not jobs:
            return 0

        async with anyio.create_task_group() as tg:
            for job in jobs:
                tg.start_soon(self._run_job, job)  # pyrefly: ignore[bad-argument-type]
        return len(jobs)

    async def fire_periodic_triggers(self, *, now: Optional[datetime] = None) -> None:
        now = now or utc_now()
        for trigger in self.periodic_triggers:
            key = trigger.bucket_key(at=now)
            if self._last_buckets.get(trigger.kind) == key:
                continue
            await self.job_queue.enqueue(
                kind=trigger.kind,
                key=key,
                payload={
                    **trigger.payload,
                    BUCKET_START_PAYLOAD_KEY: trigger.bucket_start(at=now).isoformat(),
                },
                due_at=now,
            )
            self._last_buckets[trigger.kind] = key

    async def _run_job(self, job: ScheduledJob) -> None:
        assert job.id is not None
        handler = self.handlers.get(job.kind)
        if handler is None:
            Logger.base.error(f'❌ [JOB RUNNER] No handler for kind {job.kind} (job {job.id})')
            await self.job_queue.mark_failed(job_id=job.id, error=f'no handler for {job.kind}')
            metrics.record_job(kind=job.kind, result='failed', duration=0.0)
            return

        payload = {k: v for k, v in job.payload.items() if k != TRACE_PAYLOAD_KEY}
        if job.attempts >= self.max_attempts:
            payload[FINAL_ATTEMPT_PAYLOAD_KEY] = True
        parent_ctx = extract_trace_context(carrier=job.payload.get(TRACE_PAYLOAD_KEY))
        start = time.perf_counter()

        with self.tracer.start_as_current_span(
            f'job.{job.kind}',
            context=parent_ctx,
            attributes={'job.id': job.id, 'job.key': job.key, 'job.attempt': job.attempts},
        ) as span:
            try:
                await handler(payload)
            except Exception as e:
                span.record_exception(e)
                await self._handle_failure(job=job, error=e, duration=time.perf_counter() - start)
                return

        await self.job_queue.mark_done(job_id=job.id)
        metrics.record_job(kind=job.kind, result='done', duration=time.perf_counter() - start)
        Logger.base.info(f'✅ [JOB RUNNER] {job.kind}:{job.key} done (attempt {job.attempts})')

    async def _handle_failure(self, *, job: ScheduledJob, error: Exception, duration: float) -> None:
        assert job.id is not None
        message = f'{type(error).__name__}: {error}'

        if job.attempts >= self.max_attempts:
            await self.job_queue.mark_failed(job_id=job.id, error=message)
            metrics.record_job(kind=job.kind, result='failed', duration=duration)
            Logger.base.error(
                f'💀 [JOB RUNNER] {job.kind}:{job.key} gave up after {job.attempts} attempts: {message}'
            )
            return

        retry_at = utc_now() + timedelta(seconds=self.backoff_seconds(attempts=job.attempts))
        await self.job_queue.mark_failed(job_id=job.id, error=message, retry_at=retry_at)
        metrics.record_job(kind=job.kind, result='retry', duration=duration)
        Logger.base.warning(
            f'🔁 [JOB RUNNER] {job.kind}:{job.key} attempt {job.attempts} failed, '
            f'retrying at {retry_at.isoformat()}: {message}'
        )

    def backoff_seconds(self, *, attempts: int) -> float:
        return self.retry_base_delay * (2 ** max(attempts - 1, 0))


def merge_kind_handlers(*sources: Any) -> dict[str, JobHandler]:
    """Combine `get_kind_handlers()` of several handler objects; a kind may be registered once."""
    handlers: dict[str, JobHandler] = {}
    for source in sources:
        for kind, handler in source.get_kind_handlers().items():
            if kind in handlers:
                raise ValueError(f'Duplicate handler for job kind {kind}')
            handlers[kind] = handler
    return handlers
