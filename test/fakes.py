"""In-process stand-ins for the payment gateway, shared by integration and API tests."""

from datetime import datetime
from typing import Any

from src.platform.exception.exceptions import UpstreamUnavailableError
from src.service.booking.app.interface.i_payment_gateway import CheckoutSession, IPaymentGateway


class FakePaymentGateway(IPaymentGateway):
    def __init__(self) -> None:
        self.created: list[dict[str, Any]] = []
        self.paid_session_ids: set[str] = set()
        self.fail_create = False

    async def create_checkout_session(
        self,
        *,
        booking_id: str,
        product_name: str,
        amount_in_cents: int,
        success_url: str,
        cancel_url: str,
        expires_at: datetime,
    ) -> CheckoutSession:
        if self.fail_create:
            raise UpstreamUnavailableError('Payment service temporarily unavailable. Please try again later.')
        self.created.append(
            {
                'booking_id': booking_id,
                'product_name': product_name,
                'amount_in_cents': amount_in_cents,
                'success_url': success_url,
                'cancel_url': cancel_url,
                'expires_at': expires_at,
            }
        )
        return CheckoutSession(
            id=f'cs_test_{booking_id}',
            url=f'https://checkout.stripe.test/pay/cs_test_{booking_id}',
            status='open',
            payment_status='unpaid',
        )

    async def get_checkout_session(self, *, session_id: str) -> CheckoutSession:
        if session_id in self.paid_session_ids:
            return CheckoutSession(
                id=session_id, url='', status='complete', payment_status='paid'
            )
        return CheckoutSession(id=session_id, url='', status='expired', payment_status='unpaid')
