"""
Unit tests for ConfirmBookingPaymentUseCase and ReleaseUnpaidBookingUseCase

Test Coverage:
1. Confirm: paid transition carries the confirmation job; repeats are no-ops
2. Release: missing / paid bookings are no-ops
3. Release: gateway reports paid -> confirmed instead of released
4. Release: unpaid session -> seats released; transient gateway error retried
5. Release: unknown session, rejected credentials or a final-attempt outage
   still free the seats
"""

from decimal import Decimal
from unittest.mock import AsyncMock
import uuid

import pytest

from src.platform.exception.exceptions import (
    NotFoundError,
    RateLimitedError,
    UpstreamRejectedError,
    UpstreamUnavailableError,
)
from src.platform.scheduler.scheduled_job import FINAL_ATTEMPT_PAYLOAD_KEY, JobKind
from src.service.booking.app.command.confirm_booking_payment_use_case import (
    ConfirmBookingPaymentUseCase,
)
from src.service.booking.app.command.release_unpaid_booking_use_case import (
    ReleaseUnpaidBookingUseCase,
)
from src.service.booking.app.interface.i_payment_gateway import CheckoutSession
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.enum.booking_outcome import ConfirmOutcome, ReleaseOutcome
from src.service.booking.driving_adapter.job_handler.booking_job_handler import BookingJobHandler


pytestmark = pytest.mark.unit


def _booking(*, is_paid: bool = False, payment_session_id: str | None = 'cs_test_1') -> Booking:
    booking = Booking.create(
        user_id='user_1',
        show_id=uuid.uuid4(),
        selected_seats=['A1', 'A2'],
        show_price=Decimal('10.00'),
    )
    booking.is_paid = is_paid
    booking.payment_session_id = payment_session_id
    return booking


class TestConfirmBookingPayment:
    def setup_method(self):
        self.booking_command_repo = AsyncMock()
        self.use_case = ConfirmBookingPaymentUseCase(booking_command_repo=self.booking_command_repo)

    @pytest.mark.asyncio
    async def test_marks_paid_with_confirmation_job(self):
        # Given
        booking_id = uuid.uuid4()
        self.booking_command_repo.mark_paid.return_value = ConfirmOutcome.CONFIRMED

        # When
        outcome = await self.use_case.execute(booking_id=booking_id)

        # Then
        assert outcome == ConfirmOutcome.CONFIRMED
        kwargs = self.booking_command_repo.mark_paid.call_args.kwargs
        assert kwargs['booking_id'] == booking_id
        assert kwargs['paid_at'].tzinfo is not None
        (job,) = kwargs['jobs']
        assert job.kind == JobKind.BOOKING_CONFIRMED
        assert job.key == str(booking_id)
        assert job.payload == {'booking_id': str(booking_id)}

    @pytest.mark.asyncio
    @pytest.mark.parametrize('outcome', [ConfirmOutcome.ALREADY_PAID, ConfirmOutcome.NOT_FOUND])
    async def test_passes_through_non_transition_outcomes(self, outcome):
        self.booking_command_repo.mark_paid.return_value = outcome

        assert await self.use_case.execute(booking_id=uuid.uuid4()) == outcome


class TestReleaseUnpaidBooking:
    def setup_method(self):
        self.booking_command_repo = AsyncMock()
        self.booking_query_repo = AsyncMock()
        self.payment_gateway = AsyncMock()
        self.confirm_use_case = AsyncMock()
        self.use_case = ReleaseUnpaidBookingUseCase(
            booking_command_repo=self.booking_command_repo,
            booking_query_repo=self.booking_query_repo,
            payment_gateway=self.payment_gateway,
            confirm_booking_payment_use_case=self.confirm_use_case,
        )

    @pytest.mark.asyncio
    async def test_missing_booking_is_noop(self):
        # Given: already released by an earlier run
        self.booking_query_repo.get_by_id.return_value = None

        # When
        outcome = await self.use_case.execute(booking_id=uuid.uuid4())

        # Then
        assert outcome == ReleaseOutcome.NOT_FOUND
        self.booking_command_repo.release_if_unpaid.assert_not_called()

    @pytest.mark.asyncio
    async def test_paid_booking_is_never_released(self):
        self.booking_query_repo.get_by_id.return_value = _booking(is_paid=True)

        outcome = await self.use_case.execute(booking_id=uuid.uuid4())

        assert outcome == ReleaseOutcome.ALREADY_PAID
        self.payment_gateway.get_checkout_session.assert_not_called()
        self.booking_command_repo.release_if_unpaid.assert_not_called()

    @pytest.mark.asyncio
    async def test_unpaid_session_releases_seats(self):
        # Given
        booking = _booking()
        self.booking_query_repo.get_by_id.return_value = booking
        self.payment_gateway.get_checkout_session.return_value = CheckoutSession(
            id='cs_test_1', url='', status='expired', payment_status='unpaid'
        )
        self.booking_command_repo.release_if_unpaid.return_value = ReleaseOutcome.RELEASED

        # When
        outcome = await self.use_case.execute(booking_id=booking.id)

        # Then
        assert outcome == ReleaseOutcome.RELEASED
        self.booking_command_repo.release_if_unpaid.assert_awaited_once_with(booking_id=booking.id)
        self.confirm_use_case.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_booking_without_checkout_is_released(self):
        # Given: checkout creation failed after the hold was committed
        booking = _booking(payment_session_id=None)
        self.booking_query_repo.get_by_id.return_value = booking
        self.booking_command_repo.release_if_unpaid.return_value = ReleaseOutcome.RELEASED

        # When
        outcome = await self.use_case.execute(booking_id=booking.id)

        # Then
        assert outcome == ReleaseOutcome.RELEASED
        self.payment_gateway.get_checkout_session.assert_not_called()

    @pytest.mark.asyncio
    async def test_paid_session_is_confirmed_instead_of_released(self):
        # Given: the gateway saw the payment, the webhook did not arrive yet
        booking = _booking()
        self.booking_query_repo.get_by_id.return_value = booking
        self.payment_gateway.get_checkout_session.return_value = CheckoutSession(
            id='cs_test_1', url='', status='complete', payment_status='paid'
        )
        self.confirm_use_case.execute.return_value = ConfirmOutcome.CONFIRMED

        # When
        outcome = await self.use_case.execute(booking_id=booking.id)

        # Then
        assert outcome == ReleaseOutcome.CONFIRMED_LATE
        self.confirm_use_case.execute.assert_awaited_once_with(
            booking_id=booking.id, source='reconciliation'
        )
        self.booking_command_repo.release_if_unpaid.assert_not_called()

    @pytest.mark.asyncio
    async def test_webhook_won_race_during_reconciliation(self):
        booking = _booking()
        self.booking_query_repo.get_by_id.return_value = booking
        self.payment_gateway.get_checkout_session.return_value = CheckoutSession(
            id='cs_test_1', url='', status='complete', payment_status='paid'
        )
        self.confirm_use_case.execute.return_value = ConfirmOutcome.ALREADY_PAID

        assert await self.use_case.execute(booking_id=booking.id) == ReleaseOutcome.ALREADY_PAID

    @pytest.mark.asyncio
    async def test_gateway_error_propagates_for_retry(self):
        # Given
        self.booking_query_repo.get_by_id.return_value = _booking()
        self.payment_gateway.get_checkout_session.side_effect = UpstreamUnavailableError(
            'Payment service temporarily unavailable. Please try again later.'
        )

        # When / Then
        with pytest.raises(UpstreamUnavailableError):
            await self.use_case.execute(booking_id=uuid.uuid4())
        self.booking_command_repo.release_if_unpaid.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'error',
        [
            NotFoundError('Payment session not found'),
            UpstreamRejectedError('Payment configuration error. Please contact support.'),
        ],
    )
    async def test_unreadable_session_still_releases(self, error):
        # Given: the session is gone or the key was rotated, retrying cannot help
        booking = _booking()
        self.booking_query_repo.get_by_id.return_value = booking
        self.payment_gateway.get_checkout_session.side_effect = error
        self.booking_command_repo.release_if_unpaid.return_value = ReleaseOutcome.RELEASED

        # When
        outcome = await self.use_case.execute(booking_id=booking.id)

        # Then
        assert outcome == ReleaseOutcome.RELEASED
        self.booking_command_repo.release_if_unpaid.assert_awaited_once_with(booking_id=booking.id)
        self.confirm_use_case.execute.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'error',
        [
            UpstreamUnavailableError('Payment service temporarily unavailable. Please try again later.'),
            RateLimitedError('Too many payment requests. Please wait a moment and try again.'),
        ],
    )
    async def test_outage_on_final_attempt_releases(self, error):
        # Given
        booking = _booking()
        self.booking_query_repo.get_by_id.return_value = booking
        self.payment_gateway.get_checkout_session.side_effect = error
        self.booking_command_repo.release_if_unpaid.return_value = ReleaseOutcome.RELEASED

        # When
        outcome = await self.use_case.execute(booking_id=booking.id, final_attempt=True)

        # Then
        assert outcome == ReleaseOutcome.RELEASED
        self.booking_command_repo.release_if_unpaid.assert_awaited_once_with(booking_id=booking.id)


class TestBookingJobHandler:
    def setup_method(self):
        self.release_use_case = AsyncMock()
        self.release_use_case.execute.return_value = ReleaseOutcome.RELEASED
        self.handler = BookingJobHandler(
            release_unpaid_booking_use_case=self.release_use_case
        ).get_kind_handlers()[JobKind.RELEASE_UNPAID_BOOKING]

    @pytest.mark.asyncio
    async def test_regular_attempt(self):
        booking_id = uuid.uuid4()

        assert await self.handler({'booking_id': str(booking_id)}) == 'released'

        self.release_use_case.execute.assert_awaited_once_with(
            booking_id=booking_id, final_attempt=False
        )

    @pytest.mark.asyncio
    async def test_final_attempt_flag_is_forwarded(self):
        booking_id = uuid.uuid4()

        await self.handler({'booking_id': str(booking_id), FINAL_ATTEMPT_PAYLOAD_KEY: True})

        self.release_use_case.execute.assert_awaited_once_with(
            booking_id=booking_id, final_attempt=True
        )
