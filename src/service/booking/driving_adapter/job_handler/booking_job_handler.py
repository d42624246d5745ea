"""
Booking Job Handler

Handles one job kind:
1. booking.release_if_unpaid - resume the seat hold once its window has elapsed

The job is due at booking.created_at + BOOKING_HOLD_MINUTES, so it is picked
up only after the hold window, also across restarts. On the runner's final
attempt the release goes ahead even when the gateway cannot be reached.
"""

from typing import Any, Dict
import uuid

from src.platform.logging.loguru_io import Logger
from src.platform.scheduler.job_runner import JobHandler
from src.platform.scheduler.scheduled_job import FINAL_ATTEMPT_PAYLOAD_KEY, JobKind
from src.service.booking.app.command.release_unpaid_booking_use_case import (
    ReleaseUnpaidBookingUseCase,
)


class BookingJobHandler:
    def __init__(self, *, release_unpaid_booking_use_case: ReleaseUnpaidBookingUseCase) -> None:
        self.release_unpaid_booking_use_case = release_unpaid_booking_use_case

    def get_kind_handlers(self) -> Dict[str, JobHandler]:
        return {JobKind.RELEASE_UNPAID_BOOKING: self._handle_release_unpaid_booking}

    async def _handle_release_unpaid_booking(self, payload: Dict[str, Any]) -> str:
        booking_id = payload.get('booking_id')
        if not booking_id:
            raise ValueError('Missing required field: booking_id')

        outcome = await self.release_unpaid_booking_use_case.execute(
            booking_id=uuid.UUID(str(booking_id)),
            final_attempt=bool(payload.get(FINAL_ATTEMPT_PAYLOAD_KEY)),
        )
        Logger.base.info(f'⏰ [BOOKING JOB] release_if_unpaid {booking_id} -> {outcome}')
        return outcome.value
