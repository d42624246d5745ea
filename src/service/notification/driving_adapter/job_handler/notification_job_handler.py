"""
Notification Job Handler

Handles 3 job kinds:
1. notification.booking_confirmed - ticket email after payment (outbox of the paid transition)
2. notification.show_reminders - periodic reminder sweep (one job per interval bucket)
3. notification.new_show - alert every user after an admin adds shows (outbox of AddShows)
"""

from datetime import datetime
from typing import Any, Dict
import uuid

from src.platform.scheduler.job_runner import JobHandler
from src.platform.scheduler.scheduled_job import BUCKET_START_PAYLOAD_KEY, JobKind
from src.service.notification.app.command.send_booking_confirmation_use_case import (
    SendBookingConfirmationUseCase,
)
from src.service.notification.app.command.send_new_show_notifications_use_case import (
    SendNewShowNotificationsUseCase,
)
from src.service.notification.app.command.send_show_reminders_use_case import (
    SendShowRemindersUseCase,
)


class NotificationJobHandler:
    def __init__(
        self,
        *,
        send_booking_confirmation_use_case: SendBookingConfirmationUseCase,
        send_show_reminders_use_case: SendShowRemindersUseCase,
        send_new_show_notifications_use_case: SendNewShowNotificationsUseCase,
    ) -> None:
        self.send_booking_confirmation_use_case = send_booking_confirmation_use_case
        self.send_show_reminders_use_case = send_show_reminders_use_case
        self.send_new_show_notifications_use_case = send_new_show_notifications_use_case

    def get_kind_handlers(self) -> Dict[str, JobHandler]:
        return {
            JobKind.BOOKING_CONFIRMED: self._handle_booking_confirmed,
            JobKind.SHOW_REMINDERS: self._handle_show_reminders,
            JobKind.NEW_SHOW: self._handle_new_show,
        }

    async def _handle_booking_confirmed(self, payload: Dict[str, Any]) -> bool:
        booking_id = payload.get('booking_id')
        if not booking_id:
            raise ValueError('Missing required field: booking_id')
        return await self.send_booking_confirmation_use_case.execute(
            booking_id=uuid.UUID(str(booking_id))
        )

    async def _handle_show_reminders(self, payload: Dict[str, Any]) -> Dict[str, int]:
        # Anchor the window on the interval the sweep was fired for, not on when it runs
        bucket_start = payload.get(BUCKET_START_PAYLOAD_KEY)
        result = await self.send_show_reminders_use_case.execute(
            now=datetime.fromisoformat(bucket_start) if bucket_start else None
        )
        return {'sent': result.sent, 'failed': result.failed}

    async def _handle_new_show(self, payload: Dict[str, Any]) -> Dict[str, int]:
        movie_title = payload.get('movie_title')
        if not movie_title:
            raise ValueError('Missing required field: movie_title')
        result = await self.send_new_show_notifications_use_case.execute(movie_title=movie_title)
        return {'sent': result.sent, 'failed': result.failed}
