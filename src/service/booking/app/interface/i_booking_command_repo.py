"""
Booking Command Repository Interface

Every method is one database transaction. Methods taking `jobs` write those
work items to the durable job queue inside that same transaction, so a
booking never exists without its reconciliation job and a payment never
commits without its confirmation notification.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Sequence
import uuid

from src.platform.scheduler.scheduled_job import JobRequest
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.enum.booking_outcome import ConfirmOutcome, ReleaseOutcome


class IBookingCommandRepo(ABC):
    @abstractmethod
    async def create_with_seat_holds(
        self, *, booking: Booking, jobs: Sequence[JobRequest] = ()
    ) -> Booking:
        """
        Insert the booking and one hold per seat atomically.

        Raises:
            ConflictError: any selected seat is already held (nothing is persisted)
        """
        pass

    @abstractmethod
    async def attach_payment_session(
        self, *, booking_id: uuid.UUID, payment_link: str, payment_session_id: str
    ) -> None:
        pass

    @abstractmethod
    async def mark_paid(
        self, *, booking_id: uuid.UUID, paid_at: datetime, jobs: Sequence[JobRequest] = ()
    ) -> ConfirmOutcome:
        """Conditional is_paid false -> true; `jobs` are written only on the transition."""
        pass

    @abstractmethod
    async def release_if_unpaid(self, *, booking_id: uuid.UUID) -> ReleaseOutcome:
        """
        Lock the booking row, re-check is_paid, then delete its seat holds and the booking.

        Returns NOT_FOUND, ALREADY_PAID or RELEASED.
        """
        pass
