import uuid

from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.platform.scheduler.scheduled_job import JobKind, JobRequest
from src.platform.types.utc_datetime import utc_now
from src.service.booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.booking.domain.enum.booking_outcome import ConfirmOutcome


class ConfirmBookingPaymentUseCase:
    """
    Mark a booking paid and schedule its confirmation email.

    Reached from the payment webhook and from the release job when the
    gateway already reports the session as paid. The email job is written in
    the same transaction as the is_paid transition, so it is scheduled exactly
    once however often the webhook is redelivered.
    """

    def __init__(self, *, booking_command_repo: IBookingCommandRepo) -> None:
        self.booking_command_repo = booking_command_repo
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def execute(self, *, booking_id: uuid.UUID, source: str = 'webhook') -> ConfirmOutcome:
        with self.tracer.start_as_current_span(
            'use_case.confirm_booking_payment',
            attributes={'booking.id': str(booking_id), 'payment.source': source},
        ):
            outcome = await self.booking_command_repo.mark_paid(
                booking_id=booking_id,
                paid_at=utc_now(),
                jobs=[
                    JobRequest(
                        kind=JobKind.BOOKING_CONFIRMED,
                        key=str(booking_id),
                        payload={'booking_id': str(booking_id)},
                    )
                ],
            )

            if outcome == ConfirmOutcome.CONFIRMED:
                metrics.record_payment_confirmed(source=source)
                Logger.base.info(f'✅ [PAYMENT] Booking {booking_id} paid ({source})')
            elif outcome == ConfirmOutcome.NOT_FOUND:
                Logger.base.error(
                    f'💸 [PAYMENT] Orphaned payment: booking {booking_id} was already released'
                )
            else:
                Logger.base.info(f'🔁 [PAYMENT] Booking {booking_id} already paid, ignoring')
            return outcome
