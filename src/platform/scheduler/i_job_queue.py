"""
Durable Job Queue Interface

A work item is identified by (kind, key). Enqueueing the same pair twice is a
no-op, which makes delayed resumptions, outbox events and periodic triggers
idempotent across retries and replicas.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.scheduler.scheduled_job import ScheduledJob


class IJobQueue(ABC):
    @abstractmethod
    async def enqueue(
        self,
        *,
        kind: str,
        key: str,
        payload: Optional[dict[str, Any]] = None,
        due_at: Optional[datetime] = None,
    ) -> bool:
        """
        Schedule a work item in its own transaction.

        Args:
            kind: Handler kind (see JobKind)
            key: Idempotency key within the kind (e.g. booking id)
            payload: JSON-serializable data for the handler
            due_at: Earliest execution time (default: now)

        Returns:
            True if newly scheduled, False if (kind, key) already existed
        """
        pass

    @abstractmethod
    async def add_to_session(
        self,
        *,
        session: AsyncSession,
        kind: str,
        key: str,
        payload: Optional[dict[str, Any]] = None,
        due_at: Optional[datetime] = None,
    ) -> bool:
        """Schedule a work item inside the caller's transaction (outbox write)."""
        pass

    @abstractmethod
    async def claim_due(self, *, limit: int, lease_seconds: int) -> list[ScheduledJob]:
        """
        Lease due jobs (pending and due, or running with an expired lease).

        Claimed jobs move to RUNNING with attempts incremented.
        """
        pass

    @abstractmethod
    async def mark_done(self, *, job_id: int) -> None:
        pass

    @abstractmethod
    async def mark_failed(
        self, *, job_id: int, error: str, retry_at: Optional[datetime] = None
    ) -> None:
        """Reschedule as PENDING at retry_at, or give up (FAILED) when retry_at is None."""
        pass

    @abstractmethod
    async def get(self, *, kind: str, key: str) -> Optional[ScheduledJob]:
        pass
