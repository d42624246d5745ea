from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

import attrs


@attrs.define(frozen=True)
class CheckoutSession:
    id: str
    url: str
    status: Optional[str] = None  # open / complete / expired
    payment_status: Optional[str] = None  # paid / unpaid

    @property
    def is_paid(self) -> bool:
        return self.status == 'complete' and self.payment_status in ('paid', 'no_payment_required')


class IPaymentGateway(ABC):
    @abstractmethod
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
        """
        Create a hosted checkout page for one booking.

        Raises:
            UpstreamUnavailableError / RateLimitedError: after the retry budget is spent
            UpstreamRejectedError: bad gateway credentials
        """
        pass

    @abstractmethod
    async def get_checkout_session(self, *, session_id: str) -> CheckoutSession:
        pass
