from typing import Optional
import uuid

from opentelemetry import trace

from src.platform.exception.exceptions import NotFoundError, UpstreamError, UpstreamRejectedError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.booking.app.command.confirm_booking_payment_use_case import (
    ConfirmBookingPaymentUseCase,
)
from src.service.booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.booking.app.interface.i_payment_gateway import CheckoutSession, IPaymentGateway
from src.service.booking.domain.enum.booking_outcome import ConfirmOutcome, ReleaseOutcome


class ReleaseUnpaidBookingUseCase:
    """
    Second half of the seat hold: runs once the hold window has elapsed.

    Idempotent. A missing booking (already released) or a paid booking is a
    no-op. A booking whose checkout the gateway reports as paid is confirmed
    instead of released, covering a webhook that has not arrived yet.

    The gateway lookup never blocks the release: an unknown session or
    rejected credentials release right away, and a transient outage is
    re-raised for a retry unless this is the final attempt.
    """

    def __init__(
        self,
        *,
        booking_command_repo: IBookingCommandRepo,
        booking_query_repo: IBookingQueryRepo,
        payment_gateway: IPaymentGateway,
        confirm_booking_payment_use_case: ConfirmBookingPaymentUseCase,
    ) -> None:
        self.booking_command_repo = booking_command_repo
        self.booking_query_repo = booking_query_repo
        self.payment_gateway = payment_gateway
        self.confirm_booking_payment_use_case = confirm_booking_payment_use_case
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def execute(
        self, *, booking_id: uuid.UUID, final_attempt: bool = False
    ) -> ReleaseOutcome:
        with self.tracer.start_as_current_span(
            'use_case.release_unpaid_booking', attributes={'booking.id': str(booking_id)}
        ) as span:
            outcome = await self._reconcile(booking_id=booking_id, final_attempt=final_attempt)
            span.set_attribute('release.outcome', outcome.value)
            metrics.record_release(outcome=outcome.value)
            return outcome

    async def _reconcile(self, *, booking_id: uuid.UUID, final_attempt: bool) -> ReleaseOutcome:
        booking = await self.booking_query_repo.get_by_id(booking_id=booking_id)
        if not booking:
            Logger.base.info(f'⏭️ [RELEASE] Booking {booking_id} no longer exists')
            return ReleaseOutcome.NOT_FOUND
        if booking.is_paid:
            return ReleaseOutcome.ALREADY_PAID

        if booking.payment_session_id:
            checkout = await self._lookup_checkout(
                booking_id=booking_id,
                session_id=booking.payment_session_id,
                final_attempt=final_attempt,
            )
            if checkout is not None and checkout.is_paid:
                confirmed = await self.confirm_booking_payment_use_case.execute(
                    booking_id=booking_id, source='reconciliation'
                )
                if confirmed == ConfirmOutcome.CONFIRMED:
                    return ReleaseOutcome.CONFIRMED_LATE
                if confirmed == ConfirmOutcome.ALREADY_PAID:
                    return ReleaseOutcome.ALREADY_PAID
                return ReleaseOutcome.NOT_FOUND

        return await self.booking_command_repo.release_if_unpaid(booking_id=booking_id)

    async def _lookup_checkout(
        self, *, booking_id: uuid.UUID, session_id: str, final_attempt: bool
    ) -> Optional[CheckoutSession]:
        try:
            return await self.payment_gateway.get_checkout_session(session_id=session_id)
        except (NotFoundError, UpstreamRejectedError) as e:
            Logger.base.warning(
                f'⚠️ [RELEASE] Checkout {session_id} of booking {booking_id} unreadable ({e.message}), releasing'
            )
            return None
        except UpstreamError as e:
            if not final_attempt:
                raise
            Logger.base.error(
                f'⚠️ [RELEASE] Checkout {session_id} of booking {booking_id} still unreachable '
                f'on the final attempt ({e.message}), releasing'
            )
            return None
