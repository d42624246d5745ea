from datetime import datetime
from enum import StrEnum
from typing import Any, Optional

import attrs


class JobStatus(StrEnum):
    PENDING = 'pending'
    RUNNING = 'running'
    DONE = 'done'
    FAILED = 'failed'


class JobKind(StrEnum):
    """Work-item kinds; each kind has exactly one registered handler."""

    RELEASE_UNPAID_BOOKING = 'booking.release_if_unpaid'
    BOOKING_CONFIRMED = 'notification.booking_confirmed'
    SHOW_REMINDERS = 'notification.show_reminders'
    NEW_SHOW = 'notification.new_show'


@attrs.define
class ScheduledJob:
    kind: str
    key: str
    due_at: datetime
    payload: dict[str, Any] = attrs.field(factory=dict)
    status: JobStatus = JobStatus.PENDING
    attempts: int = 0
    id: Optional[int] = None
    last_error: Optional[str] = None


@attrs.define(frozen=True)
class JobRequest:
    """A work item a repository writes inside its own transaction (transactional outbox)."""

    kind: str
    key: str
    payload: dict[str, Any] = attrs.field(factory=dict)
    due_at: Optional[datetime] = None


# Added by the runner to the handler payload on a job's last allowed attempt
FINAL_ATTEMPT_PAYLOAD_KEY = '_final_attempt'
# Start of the interval a periodic job was fired for, ISO 8601 in UTC
BUCKET_START_PAYLOAD_KEY = 'bucket_start'
