from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence
import uuid

from src.platform.scheduler.scheduled_job import JobRequest
from src.service.catalog.domain.entity.show_entity import Show


class IShowRepo(ABC):
    @abstractmethod
    async def create_many(
        self, *, shows: Sequence[Show], jobs: Sequence[JobRequest] = ()
    ) -> list[Show]:
        """Insert shows and schedule `jobs` in the same transaction."""
        pass

    @abstractmethod
    async def get_by_id(self, *, show_id: uuid.UUID) -> Optional[Show]:
        pass

    @abstractmethod
    async def get_by_ids(self, *, show_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, Show]:
        pass

    @abstractmethod
    async def list_upcoming(self, *, now: datetime, movie_id: Optional[int] = None) -> list[Show]:
        """Shows at or after `now`, ordered by show time."""
        pass

    @abstractmethod
    async def list_between(self, *, start: datetime, end: datetime) -> list[Show]:
        """Shows with start <= show_date_time < end."""
        pass

    @abstractmethod
    async def get_latest_created(self) -> Optional[Show]:
        pass
