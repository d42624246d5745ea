from datetime import datetime, timedelta
from typing import Any, Optional

import httpx

from src.platform.config.core_setting import settings
from src.platform.http.retry_policy import RetryPolicy
from src.platform.http.upstream_client import UpstreamHttpClient
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.booking.app.interface.i_payment_gateway import CheckoutSession, IPaymentGateway


# Stripe rejects an expires_at closer than 30 minutes to when the request arrives
MIN_CHECKOUT_LIFETIME = timedelta(minutes=30)
CLOCK_SKEW_MARGIN = timedelta(minutes=1)


class StripePaymentGateway(UpstreamHttpClient, IPaymentGateway):
    """
    Stripe Checkout over its form-encoded REST API.

    Session creation carries an Idempotency-Key derived from the booking id,
    so a retried request never opens a second checkout for the same booking.
    The requested expiry is raised to Stripe's minimum lifetime counted from
    the latest moment a retried request can still arrive.
    """

    SERVICE_NAME = 'stripe'
    UNAVAILABLE_MESSAGE = 'Payment service temporarily unavailable. Please try again later.'
    REJECTED_MESSAGE = 'Payment configuration error. Please contact support.'
    RATE_LIMITED_MESSAGE = 'Too many payment requests. Please wait a moment and try again.'
    NOT_FOUND_MESSAGE = 'Payment session not found'
    FAILED_MESSAGE = 'Failed to create payment session. Please try again.'

    def __init__(
        self,
        *,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        currency: Optional[str] = None,
        timeout: Optional[float] = None,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        key = secret_key if secret_key is not None else settings.STRIPE_SECRET_KEY.get_secret_value()
        super().__init__(
            base_url=base_url or settings.STRIPE_BASE_URL,
            headers={'Authorization': f'Bearer {key}'},
            timeout=timeout or settings.PAYMENT_TIMEOUT_SECONDS,
            retry_policy=retry_policy
            or RetryPolicy(
                max_attempts=settings.PAYMENT_MAX_ATTEMPTS,
                base_delay=settings.PAYMENT_RETRY_BASE_DELAY,
            ),
            transport=transport,
        )
        self.currency = currency or settings.PAYMENT_CURRENCY

    @staticmethod
    def _to_session(data: dict[str, Any]) -> CheckoutSession:
        return CheckoutSession(
            id=data['id'],
            url=data.get('url') or '',
            status=data.get('status'),
            payment_status=data.get('payment_status'),
        )

    @Logger.io
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
        form = {
            'mode': 'payment',
            'success_url': success_url,
            'cancel_url': cancel_url,
            'line_items[0][price_data][currency]': self.currency,
            'line_items[0][price_data][product_data][name]': product_name,
            'line_items[0][price_data][unit_amount]': str(amount_in_cents),
            'line_items[0][quantity]': '1',
            'expires_at': str(int(self.checkout_expiry(requested=expires_at).timestamp())),
            'metadata[booking_id]': booking_id,
        }
        response = await self._request(
            'POST',
            '/checkout/sessions',
            data=form,
            headers={'Idempotency-Key': f'checkout-{booking_id}'},
        )
        session = self._to_session(response.json())
        Logger.base.info(f'💳 [STRIPE] Checkout session {session.id} for booking {booking_id}')
        return session

    def checkout_expiry(self, *, requested: datetime) -> datetime:
        retry_budget = self.retry_policy.worst_case_delay() + self.timeout * self.retry_policy.max_attempts
        earliest = utc_now() + MIN_CHECKOUT_LIFETIME + CLOCK_SKEW_MARGIN + timedelta(seconds=retry_budget)
        if requested >= earliest:
            return requested
        Logger.base.warning(
            f'⏳ [STRIPE] Checkout expiry {requested.isoformat()} is too close, using {earliest.isoformat()}'
        )
        return earliest

    @Logger.io
    async def get_checkout_session(self, *, session_id: str) -> CheckoutSession:
        response = await self._request('GET', f'/checkout/sessions/{session_id}')
        return self._to_session(response.json())
