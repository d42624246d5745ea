"""
Unit tests for JobRunner, PeriodicTrigger, merge_kind_handlers and RetryPolicy

Test Coverage:
1. Dispatch by kind, mark_done on success
2. Failure -> retry with exponential backoff, FAILED after max attempts
3. Unknown kind -> FAILED without retry; the last attempt is flagged to the handler
4. Periodic triggers enqueue once per interval bucket, carrying the bucket start
5. Handler registry merge rejects duplicate kinds
6. RetryPolicy retries only retryable errors, bounded by max_attempts
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import UpstreamRejectedError, UpstreamUnavailableError
from src.platform.http.retry_policy import RetryPolicy
from src.platform.http.upstream_client import is_retryable
from src.platform.observability.tracing import TRACE_PAYLOAD_KEY
from src.platform.scheduler.job_runner import JobRunner, PeriodicTrigger, merge_kind_handlers
from src.platform.scheduler.scheduled_job import (
    BUCKET_START_PAYLOAD_KEY,
    FINAL_ATTEMPT_PAYLOAD_KEY,
    JobKind,
    JobStatus,
    ScheduledJob,
)


pytestmark = pytest.mark.unit


def _job(*, kind: str = JobKind.RELEASE_UNPAID_BOOKING, attempts: int = 1) -> ScheduledJob:
    return ScheduledJob(
        id=7,
        kind=kind,
        key='booking-1',
        due_at=datetime.now(timezone.utc),
        payload={'booking_id': 'booking-1', TRACE_PAYLOAD_KEY: {}},
        status=JobStatus.RUNNING,
        attempts=attempts,
    )


class TestJobRunnerDispatch:
    def setup_method(self):
        self.job_queue = AsyncMock()
        self.handler = AsyncMock()
        self.runner = JobRunner(
            job_queue=self.job_queue,
            handlers={JobKind.RELEASE_UNPAID_BOOKING: self.handler},
            max_attempts=3,
            retry_base_delay=5.0,
        )

    @pytest.mark.asyncio
    async def test_successful_job_is_marked_done(self):
        # Given
        self.job_queue.claim_due.return_value = [_job()]

        # When
        processed = await self.runner.run_once()

        # Then: trace carrier is stripped from the handler payload
        assert processed == 1
        self.handler.assert_awaited_once_with({'booking_id': 'booking-1'})
        self.job_queue.mark_done.assert_awaited_once_with(job_id=7)
        self.job_queue.mark_failed.assert_not_called()

    @pytest.mark.asyncio
    async def test_nothing_due(self):
        self.job_queue.claim_due.return_value = []

        assert await self.runner.run_once() == 0
        self.handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_is_rescheduled_with_backoff(self):
        # Given
        self.job_queue.claim_due.return_value = [_job(attempts=2)]
        self.handler.side_effect = UpstreamUnavailableError('down')
        before = datetime.now(timezone.utc)

        # When
        await self.runner.run_once()

        # Then: second attempt waits base * 2
        kwargs = self.job_queue.mark_failed.call_args.kwargs
        assert kwargs['job_id'] == 7
        assert 'UpstreamUnavailableError' in kwargs['error']
        assert kwargs['retry_at'] >= before + timedelta(seconds=10)
        self.job_queue.mark_done.assert_not_called()

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        self.job_queue.claim_due.return_value = [_job(attempts=3)]
        self.handler.side_effect = RuntimeError('boom')

        await self.runner.run_once()

        kwargs = self.job_queue.mark_failed.call_args.kwargs
        assert 'retry_at' not in kwargs
        assert kwargs['error'] == 'RuntimeError: boom'

    @pytest.mark.asyncio
    async def test_last_attempt_is_flagged_to_the_handler(self):
        # Given: max_attempts=3
        self.job_queue.claim_due.return_value = [_job(attempts=3)]

        # When
        await self.runner.run_once()

        # Then
        self.handler.assert_awaited_once_with(
            {'booking_id': 'booking-1', FINAL_ATTEMPT_PAYLOAD_KEY: True}
        )
        self.job_queue.mark_done.assert_awaited_once_with(job_id=7)

    @pytest.mark.asyncio
    async def test_unknown_kind_fails_without_retry(self):
        self.job_queue.claim_due.return_value = [_job(kind='nobody.handles.this')]

        await self.runner.run_once()

        self.job_queue.mark_failed.assert_awaited_once_with(
            job_id=7, error='no handler for nobody.handles.this'
        )

    def test_backoff_doubles(self):
        assert [self.runner.backoff_seconds(attempts=n) for n in (1, 2, 3)] == [5.0, 10.0, 20.0]


class TestPeriodicTriggers:
    @pytest.mark.asyncio
    async def test_enqueues_once_per_bucket(self):
        # Given
        job_queue = AsyncMock()
        job_queue.claim_due.return_value = []
        runner = JobRunner(
            job_queue=job_queue,
            handlers={},
            periodic_triggers=[PeriodicTrigger(kind=JobKind.SHOW_REMINDERS, interval_seconds=3600)],
        )
        t0 = datetime(2030, 1, 1, 8, 0, tzinfo=timezone.utc)

        # When: twice in the same hour, then in the next hour
        await runner.fire_periodic_triggers(now=t0)
        await runner.fire_periodic_triggers(now=t0 + timedelta(minutes=30))
        await runner.fire_periodic_triggers(now=t0 + timedelta(hours=1))

        # Then
        keys = [c.kwargs['key'] for c in job_queue.enqueue.call_args_list]
        assert len(keys) == 2
        assert keys[0] != keys[1]
        assert all(c.kwargs['kind'] == JobKind.SHOW_REMINDERS for c in job_queue.enqueue.call_args_list)

    @pytest.mark.asyncio
    async def test_payload_carries_bucket_start(self):
        # Given: an 8h interval fired partway into the 08:00 bucket
        job_queue = AsyncMock()
        runner = JobRunner(
            job_queue=job_queue,
            handlers={},
            periodic_triggers=[
                PeriodicTrigger(kind=JobKind.SHOW_REMINDERS, interval_seconds=8 * 3600)
            ],
        )

        # When
        await runner.fire_periodic_triggers(now=datetime(2030, 1, 1, 13, 25, tzinfo=timezone.utc))

        # Then
        payload = job_queue.enqueue.call_args.kwargs['payload']
        assert payload == {BUCKET_START_PAYLOAD_KEY: '2030-01-01T08:00:00+00:00'}

    def test_bucket_start_is_interval_aligned(self):
        trigger = PeriodicTrigger(kind=JobKind.SHOW_REMINDERS, interval_seconds=8 * 3600)

        start = trigger.bucket_start(at=datetime(2030, 1, 1, 23, 59, tzinfo=timezone.utc))

        assert start == datetime(2030, 1, 1, 16, 0, tzinfo=timezone.utc)

    def test_bucket_key_is_shared_across_replicas(self):
        trigger = PeriodicTrigger(kind=JobKind.SHOW_REMINDERS, interval_seconds=8 * 3600)
        at = datetime(2030, 1, 1, 9, 0, tzinfo=timezone.utc)

        assert trigger.bucket_key(at=at) == trigger.bucket_key(at=at + timedelta(hours=1))


class TestMergeKindHandlers:
    class _Source:
        def __init__(self, handlers):
            self.handlers = handlers

        def get_kind_handlers(self):
            return self.handlers

    def test_merges_disjoint_sources(self):
        a, b = AsyncMock(), AsyncMock()

        merged = merge_kind_handlers(self._Source({'x': a}), self._Source({'y': b}))

        assert merged == {'x': a, 'y': b}

    def test_duplicate_kind_is_rejected(self):
        with pytest.raises(ValueError, match='Duplicate handler for job kind x'):
            merge_kind_handlers(self._Source({'x': AsyncMock()}), self._Source({'x': AsyncMock()}))


class TestRetryPolicy:
    @pytest.mark.asyncio
    async def test_retries_retryable_errors_until_success(self):
        # Given
        operation = AsyncMock(side_effect=[UpstreamUnavailableError('down'), 'ok'])
        policy = RetryPolicy(max_attempts=3, base_delay=0)

        # When
        result = await policy.execute(operation, retryable=is_retryable, label='TEST')

        # Then
        assert result == 'ok'
        assert operation.await_count == 2

    @pytest.mark.asyncio
    async def test_non_retryable_error_raises_immediately(self):
        operation = AsyncMock(side_effect=UpstreamRejectedError('bad key'))
        policy = RetryPolicy(max_attempts=3, base_delay=0)

        with pytest.raises(UpstreamRejectedError):
            await policy.execute(operation, retryable=is_retryable, label='TEST')
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        operation = AsyncMock(side_effect=UpstreamUnavailableError('down'))
        policy = RetryPolicy(max_attempts=4, base_delay=0)

        with pytest.raises(UpstreamUnavailableError):
            await policy.execute(operation, retryable=is_retryable, label='TEST')
        assert operation.await_count == 4

    def test_delay_is_capped(self):
        policy = RetryPolicy(base_delay=1.0, max_delay=8.0, jitter=0)

        assert [policy.delay_for(attempt=n) for n in (1, 2, 3, 4, 5)] == [1.0, 2.0, 4.0, 8.0, 8.0]

    def test_worst_case_delay_bounds_every_sleep(self):
        policy = RetryPolicy(max_attempts=4, base_delay=1.0, max_delay=3.0, jitter=0.5)

        # sleeps after attempts 1..3: 1, 2, 3 (capped), each up to +50% jitter
        assert policy.worst_case_delay() == pytest.approx(9.0)
        assert RetryPolicy(max_attempts=1).worst_case_delay() == 0
