from datetime import datetime
from decimal import Decimal
from typing import AsyncContextManager, Callable, Optional, Sequence
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.scheduler.i_job_queue import IJobQueue
from src.platform.scheduler.scheduled_job import JobRequest
from src.platform.types.utc_datetime import ensure_utc
from src.service.catalog.app.interface.i_show_repo import IShowRepo
from src.service.catalog.domain.entity.show_entity import Show
from src.service.catalog.driven_adapter.model.show_model import ShowModel


class ShowRepoImpl(IShowRepo):
    def __init__(
        self,
        session_factory: Callable[..., AsyncContextManager[AsyncSession]],
        job_queue: IJobQueue,
    ) -> None:
        self.session_factory = session_factory
        self.job_queue = job_queue

    @staticmethod
    def _to_entity(db_show: ShowModel) -> Show:
        return Show(
            id=db_show.id,
            movie_id=db_show.movie_id,
            show_date_time=ensure_utc(db_show.show_date_time),
            show_price=Decimal(str(db_show.show_price)).quantize(Decimal('0.01')),
            created_at=ensure_utc(db_show.created_at),
        )

    @Logger.io
    async def create_many(
        self, *, shows: Sequence[Show], jobs: Sequence[JobRequest] = ()
    ) -> list[Show]:
        async with self.session_factory() as session:
            session.add_all(
                [
                    ShowModel(
                        id=show.id,
                        movie_id=show.movie_id,
                        show_date_time=show.show_date_time,
                        show_price=show.show_price,
                        created_at=show.created_at,
                    )
                    for show in shows
                ]
            )
            for job in jobs:
                await self.job_queue.add_to_session(
                    session=session,
                    kind=job.kind,
                    key=job.key,
                    payload=job.payload,
                    due_at=job.due_at,
                )
            await session.commit()
        return list(shows)

    @Logger.io
    async def get_by_id(self, *, show_id: uuid.UUID) -> Optional[Show]:
        async with self.session_factory() as session:
            db_show = await session.get(ShowModel, show_id)
            return self._to_entity(db_show) if db_show else None

    @Logger.io
    async def get_by_ids(self, *, show_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, Show]:
        if not show_ids:
            return {}
        async with self.session_factory() as session:
            result = await session.execute(
                select(ShowModel).where(ShowModel.id.in_(list(show_ids)))
            )
            return {s.id: self._to_entity(s) for s in result.scalars().all()}

    @Logger.io
    async def list_upcoming(self, *, now: datetime, movie_id: Optional[int] = None) -> list[Show]:
        stmt = select(ShowModel).where(ShowModel.show_date_time >= now)
        if movie_id is not None:
            stmt = stmt.where(ShowModel.movie_id == movie_id)
        stmt = stmt.order_by(ShowModel.show_date_time)

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [self._to_entity(s) for s in result.scalars().all()]

    @Logger.io
    async def list_between(self, *, start: datetime, end: datetime) -> list[Show]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ShowModel)
                .where(ShowModel.show_date_time >= start, ShowModel.show_date_time < end)
                .order_by(ShowModel.show_date_time)
            )
            return [self._to_entity(s) for s in result.scalars().all()]

    @Logger.io
    async def get_latest_created(self) -> Optional[Show]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ShowModel).order_by(ShowModel.created_at.desc()).limit(1)
            )
            db_show = result.scalar_one_or_none()
            return self._to_entity(db_show) if db_show else None
