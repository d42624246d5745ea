from decimal import Decimal
from typing import Any, AsyncContextManager, Callable, Optional, Sequence
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import ensure_utc
from src.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.booking.domain.entity.booking_entity import CENTS, Booking
from src.service.booking.driven_adapter.model.booking_model import BookingModel, SeatHoldModel
from src.service.catalog.driven_adapter.model.show_model import ShowModel


class BookingQueryRepoImpl(IBookingQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @staticmethod
    def _to_entity(db_booking: BookingModel) -> Booking:
        return Booking(
            id=db_booking.id,
            user_id=db_booking.user_id,
            show_id=db_booking.show_id,
            booked_seats=list(db_booking.booked_seats),
            amount=Decimal(str(db_booking.amount)).quantize(CENTS),
            is_paid=db_booking.is_paid,
            payment_link=db_booking.payment_link,
            payment_session_id=db_booking.payment_session_id,
            created_at=ensure_utc(db_booking.created_at),
            updated_at=ensure_utc(db_booking.updated_at),
            paid_at=ensure_utc(db_booking.paid_at),
        )

    @Logger.io
    async def get_by_id(self, *, booking_id: uuid.UUID) -> Optional[Booking]:
        async with self.session_factory() as session:
            db_booking = await session.get(BookingModel, booking_id)
            return self._to_entity(db_booking) if db_booking else None

    @Logger.io
    async def get_occupied_seats(self, *, show_id: uuid.UUID) -> dict[str, str]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(SeatHoldModel.seat_label, SeatHoldModel.user_id)
                .where(SeatHoldModel.show_id == show_id)
                .order_by(SeatHoldModel.seat_label)
            )
            return {seat: user_id for seat, user_id in result.all()}

    @Logger.io
    async def get_holders_by_show(
        self, *, show_ids: Sequence[uuid.UUID]
    ) -> dict[uuid.UUID, list[str]]:
        if not show_ids:
            return {}

        async with self.session_factory() as session:
            result = await session.execute(
                select(SeatHoldModel.show_id, SeatHoldModel.user_id)
                .where(SeatHoldModel.show_id.in_(list(show_ids)))
                .distinct()
                .order_by(SeatHoldModel.show_id, SeatHoldModel.user_id)
            )

        holders: dict[uuid.UUID, list[str]] = {}
        for show_id, user_id in result.all():
            holders.setdefault(show_id, []).append(user_id)
        return holders

    @Logger.io
    async def list_by_user(self, *, user_id: str) -> list[Booking]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(BookingModel)
                .where(BookingModel.user_id == user_id)
                .order_by(BookingModel.created_at.desc(), BookingModel.id.desc())
            )
            return [self._to_entity(b) for b in result.scalars().all()]

    @Logger.io
    async def get_top_booked_movie_stats(self) -> Optional[dict[str, Any]]:
        booking_count = func.count(BookingModel.id)
        revenue = func.coalesce(func.sum(BookingModel.amount), 0)

        async with self.session_factory() as session:
            top = (
                await session.execute(
                    select(ShowModel.movie_id, booking_count, revenue)
                    .join(ShowModel, ShowModel.id == BookingModel.show_id)
                    .where(BookingModel.is_paid.is_(True))
                    .group_by(ShowModel.movie_id)
                    .order_by(booking_count.desc(), revenue.desc(), ShowModel.movie_id)
                    .limit(1)
                )
            ).first()
            if top is None:
                return None

            movie_id, total_bookings, total_revenue = top
            total_seats = await session.scalar(
                select(func.count())
                .select_from(SeatHoldModel)
                .join(BookingModel, BookingModel.id == SeatHoldModel.booking_id)
                .join(ShowModel, ShowModel.id == SeatHoldModel.show_id)
                .where(BookingModel.is_paid.is_(True), ShowModel.movie_id == movie_id)
            )

        return {
            'movie_id': movie_id,
            'total_bookings': int(total_bookings),
            'total_seats': int(total_seats or 0),
            'total_revenue': Decimal(str(total_revenue)).quantize(CENTS),
        }
