"""
SQLAlchemy Durable Job Queue

Jobs live in the `scheduled_job` table, so pending reconciliations and outbox
events survive process restarts. Claiming uses a lease (`locked_until`): a
runner that dies mid-job leaves a RUNNING row whose lease expires and gets
picked up again. On PostgreSQL the claim query uses FOR UPDATE SKIP LOCKED so
concurrent runners never lease the same row.
"""

from datetime import datetime, timedelta
from typing import Any, AsyncContextManager, Callable, Optional

from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TRACE_PAYLOAD_KEY, inject_trace_context
from src.platform.scheduler.i_job_queue import IJobQueue
from src.platform.scheduler.scheduled_job import JobStatus, ScheduledJob
from src.platform.scheduler.scheduled_job_model import ScheduledJobModel
from src.platform.types.utc_datetime import ensure_utc, utc_now


class JobQueueImpl(IJobQueue):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def enqueue(
        self,
        *,
        kind: str,
        key: str,
        payload: Optional[dict[str, Any]] = None,
        due_at: Optional[datetime] = None,
    ) -> bool:
        async with self.session_factory() as session:
            added = await self.add_to_session(
                session=session, kind=kind, key=key, payload=payload, due_at=due_at
            )
            if not added:
                return False
            try:
                await session.commit()
            except IntegrityError:
                # Another replica scheduled the same (kind, key) concurrently
                await session.rollback()
                Logger.base.debug(f'⏭️  [JOB] {kind}:{key} already scheduled by another writer')
                return False
            return True

    @Logger.io
    async def add_to_session(
        self,
        *,
        session: AsyncSession,
        kind: str,
        key: str,
        payload: Optional[dict[str, Any]] = None,
        due_at: Optional[datetime] = None,
    ) -> bool:
        existing = await session.execute(
            select(ScheduledJobModel.id).where(
                ScheduledJobModel.kind == kind, ScheduledJobModel.key == key
            )
        )
        if existing.scalar_one_or_none() is not None:
            Logger.base.debug(f'⏭️  [JOB] {kind}:{key} already scheduled')
            return False

        job_payload = dict(payload or {})
        if trace_carrier := inject_trace_context():
            job_payload[TRACE_PAYLOAD_KEY] = trace_carrier
        session.add(
            ScheduledJobModel(
                kind=kind,
                key=key,
                payload=job_payload,
                due_at=due_at or utc_now(),
                status=JobStatus.PENDING.value,
                attempts=0,
            )
        )
        await session.flush()
        Logger.base.info(f'🗓️  [JOB] Scheduled {kind}:{key} due {due_at or "now"}')
        return True

    @Logger.io
    async def claim_due(self, *, limit: int, lease_seconds: int) -> list[ScheduledJob]:
        now = utc_now()
        async with self.session_factory() as session:
            result = await session.execute(
                select(ScheduledJobModel)
                .where(
                    or_(
                        and_(
                            ScheduledJobModel.status == JobStatus.PENDING.value,
                            ScheduledJobModel.due_at <= now,
                        ),
                        and_(
                            ScheduledJobModel.status == JobStatus.RUNNING.value,
                            ScheduledJobModel.locked_until < now,
                        ),
                    )
                )
                .order_by(ScheduledJobModel.due_at)
                .limit(limit)
                .with_for_update(skip_locked=True)
            )
            models = list(result.scalars().all())

            lease_until = now + timedelta(seconds=lease_seconds)
            for model in models:
                model.status = JobStatus.RUNNING.value
                model.locked_until = lease_until
                model.attempts += 1

            await session.commit()
            return [self._model_to_entity(model) for model in models]

    @Logger.io
    async def mark_done(self, *, job_id: int) -> None:
        async with self.session_factory() as session:
            await session.execute(
                update(ScheduledJobModel)
                .where(ScheduledJobModel.id == job_id)
                .values(status=JobStatus.DONE.value, locked_until=None, last_error=None)
            )
            await session.commit()

    @Logger.io
    async def mark_failed(
        self, *, job_id: int, error: str, retry_at: Optional[datetime] = None
    ) -> None:
        values: dict[str, Any] = {'locked_until': None, 'last_error': error[:2000]}
        if retry_at is None:
            values['status'] = JobStatus.FAILED.value
        else:
            values['status'] = JobStatus.PENDING.value
            values['due_at'] = retry_at

        async with self.session_factory() as session:
            await session.execute(
                update(ScheduledJobModel).where(ScheduledJobModel.id == job_id).values(**values)
            )
            await session.commit()

    @Logger.io
    async def get(self, *, kind: str, key: str) -> Optional[ScheduledJob]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ScheduledJobModel).where(
                    ScheduledJobModel.kind == kind, ScheduledJobModel.key == key
                )
            )
            model = result.scalar_one_or_none()
            return self._model_to_entity(model) if model else None

    @staticmethod
    def _model_to_entity(model: ScheduledJobModel) -> ScheduledJob:
        return ScheduledJob(
            id=model.id,
            kind=model.kind,
            key=model.key,
            payload=dict(model.payload or {}),
            due_at=ensure_utc(model.due_at),
            status=JobStatus(model.status),
            attempts=model.attempts,
            last_error=model.last_error,
        )
