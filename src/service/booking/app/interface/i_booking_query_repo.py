from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence
import uuid

from src.service.booking.domain.entity.booking_entity import Booking


class IBookingQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, booking_id: uuid.UUID) -> Optional[Booking]:
        pass

    @abstractmethod
    async def get_occupied_seats(self, *, show_id: uuid.UUID) -> dict[str, str]:
        """Seat label -> holder user id for every held seat of the show."""
        pass

    @abstractmethod
    async def get_holders_by_show(self, *, show_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, list[str]]:
        """Distinct holder user ids per show (shows without holds are omitted)."""
        pass

    @abstractmethod
    async def list_by_user(self, *, user_id: str) -> list[Booking]:
        """Newest first."""
        pass

    @abstractmethod
    async def get_top_booked_movie_stats(self) -> Optional[dict[str, Any]]:
        """
        Paid-booking totals of the movie with the most paid bookings.

        Returns:
            {'movie_id', 'total_bookings', 'total_seats', 'total_revenue'} or None when nothing is paid
        """
        pass
