"""
Booking Command Repository Implementation

Seat locking relies on the (show_id, seat_label) primary key of
show_seat_hold: one multi-row INSERT either claims every requested seat or
fails as a whole, and the failure rolls back the booking row with it.

Release and confirm both start with a conditional UPDATE on `is_paid = false`.
The UPDATE takes the booking row lock (PostgreSQL) or the database write lock
(SQLite), so whichever of the two commits first wins and the other sees the
result.
"""

from datetime import datetime
from typing import AsyncContextManager, Callable, Sequence
import uuid

from opentelemetry import trace
from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.platform.scheduler.i_job_queue import IJobQueue
from src.platform.scheduler.scheduled_job import JobRequest
from src.platform.types.utc_datetime import utc_now
from src.service.booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.enum.booking_outcome import ConfirmOutcome, ReleaseOutcome
from src.service.booking.driven_adapter.model.booking_model import BookingModel, SeatHoldModel


class BookingCommandRepoImpl(IBookingCommandRepo):
    def __init__(
        self,
        session_factory: Callable[..., AsyncContextManager[AsyncSession]],
        job_queue: IJobQueue,
    ) -> None:
        self.session_factory = session_factory
        self.job_queue = job_queue
        self.tracer = trace.get_tracer(__name__)

    async def _add_jobs(self, session: AsyncSession, jobs: Sequence[JobRequest]) -> None:
        for job in jobs:
            await self.job_queue.add_to_session(
                session=session,
                kind=job.kind,
                key=job.key,
                payload=job.payload,
                due_at=job.due_at,
            )

    @Logger.io
    async def create_with_seat_holds(
        self, *, booking: Booking, jobs: Sequence[JobRequest] = ()
    ) -> Booking:
        with self.tracer.start_as_current_span(
            'repo.create_booking_with_seat_holds',
            attributes={
                'booking.id': str(booking.id),
                'show.id': str(booking.show_id),
                'seat.count': len(booking.booked_seats),
            },
        ):
            async with self.session_factory() as session:
                try:
                    session.add(
                        BookingModel(
                            id=booking.id,
                            user_id=booking.user_id,
                            show_id=booking.show_id,
                            booked_seats=list(booking.booked_seats),
                            amount=booking.amount,
                            is_paid=False,
                            created_at=booking.created_at,
                            updated_at=booking.updated_at,
                        )
                    )
                    await session.flush()
                    await session.execute(
                        insert(SeatHoldModel).values(
                            [
                                {
                                    'show_id': booking.show_id,
                                    'seat_label': seat,
                                    'booking_id': booking.id,
                                    'user_id': booking.user_id,
                                }
                                for seat in booking.booked_seats
                            ]
                        )
                    )
                    await self._add_jobs(session, jobs)
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    taken = await self._find_held_seats(
                        session, show_id=booking.show_id, seats=booking.booked_seats
                    )
                    Logger.base.warning(
                        f'🔒 [BOOKING] Seat conflict on show {booking.show_id}: {taken or booking.booked_seats}'
                    )
                    raise ConflictError(
                        f'Selected seats are not available: {", ".join(taken or booking.booked_seats)}'
                    )

        Logger.base.info(
            f'🎟️ [BOOKING] Created {booking.id} with seats {booking.booked_seats}'
        )
        return booking

    @staticmethod
    async def _find_held_seats(
        session: AsyncSession, *, show_id: uuid.UUID, seats: Sequence[str]
    ) -> list[str]:
        result = await session.execute(
            select(SeatHoldModel.seat_label).where(
                SeatHoldModel.show_id == show_id, SeatHoldModel.seat_label.in_(list(seats))
            )
        )
        held = set(result.scalars().all())
        return [seat for seat in seats if seat in held]

    @Logger.io
    async def attach_payment_session(
        self, *, booking_id: uuid.UUID, payment_link: str, payment_session_id: str
    ) -> None:
        async with self.session_factory() as session:
            await session.execute(
                update(BookingModel)
                .where(BookingModel.id == booking_id)
                .values(
                    payment_link=payment_link,
                    payment_session_id=payment_session_id,
                    updated_at=utc_now(),
                )
            )
            await session.commit()

    @Logger.io
    async def mark_paid(
        self, *, booking_id: uuid.UUID, paid_at: datetime, jobs: Sequence[JobRequest] = ()
    ) -> ConfirmOutcome:
        with self.tracer.start_as_current_span(
            'repo.mark_booking_paid', attributes={'booking.id': str(booking_id)}
        ):
            async with self.session_factory() as session:
                result = await session.execute(
                    update(BookingModel)
                    .where(BookingModel.id == booking_id, BookingModel.is_paid.is_(False))
                    .values(is_paid=True, paid_at=paid_at, updated_at=paid_at)
                )
                if result.rowcount == 1:  # type: ignore[attr-defined]
                    await self._add_jobs(session, jobs)
                    await session.commit()
                    return ConfirmOutcome.CONFIRMED

                await session.rollback()
                exists = await session.scalar(
                    select(BookingModel.id).where(BookingModel.id == booking_id)
                )
                return ConfirmOutcome.ALREADY_PAID if exists else ConfirmOutcome.NOT_FOUND

    @Logger.io
    async def release_if_unpaid(self, *, booking_id: uuid.UUID) -> ReleaseOutcome:
        with self.tracer.start_as_current_span(
            'repo.release_unpaid_booking', attributes={'booking.id': str(booking_id)}
        ):
            async with self.session_factory() as session:
                # Row lock + is_paid re-check in one statement
                claimed = await session.execute(
                    update(BookingModel)
                    .where(BookingModel.id == booking_id, BookingModel.is_paid.is_(False))
                    .values(updated_at=utc_now())
                )
                if claimed.rowcount != 1:  # type: ignore[attr-defined]
                    await session.rollback()
                    exists = await session.scalar(
                        select(BookingModel.id).where(BookingModel.id == booking_id)
                    )
                    return ReleaseOutcome.ALREADY_PAID if exists else ReleaseOutcome.NOT_FOUND

                holds = await session.execute(
                    delete(SeatHoldModel).where(SeatHoldModel.booking_id == booking_id)
                )
                await session.execute(delete(BookingModel).where(BookingModel.id == booking_id))
                await session.commit()

        Logger.base.info(
            f'🧹 [BOOKING] Released unpaid booking {booking_id} ({holds.rowcount} seats)'  # type: ignore[attr-defined]
        )
        return ReleaseOutcome.RELEASED
