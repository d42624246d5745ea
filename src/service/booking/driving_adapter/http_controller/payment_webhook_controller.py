from typing import Any, Optional
import uuid

from fastapi import APIRouter, Header, Request

from src.platform.config.di import container
from src.platform.logging.loguru_io import Logger
from src.service.booking.driving_adapter.http_controller.schema.booking_schema import (
    PaymentWebhookResponse,
)


router = APIRouter()

PAID_EVENTS = ('checkout.session.completed', 'checkout.session.async_payment_succeeded')


def _paid_booking_id(event: dict[str, Any]) -> Optional[uuid.UUID]:
    if event.get('type') not in PAID_EVENTS:
        return None
    session = (event.get('data') or {}).get('object') or {}
    if session.get('payment_status') not in ('paid', 'no_payment_required'):
        return None

    raw_id = (session.get('metadata') or {}).get('booking_id')
    try:
        return uuid.UUID(str(raw_id))
    except ValueError:
        Logger.base.warning(f'⚠️ [PAYMENT_WEBHOOK] Event {event.get("id")} has no valid booking id')
        return None


@router.post('/webhook')
@Logger.io
async def payment_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
) -> PaymentWebhookResponse:
    """Gateway callback; only signed checkout-completed events change state."""
    payload = await request.body()
    event = container.stripe_webhook_verifier().construct_event(
        payload=payload, signature_header=stripe_signature
    )

    booking_id = _paid_booking_id(event)
    if booking_id is None:
        Logger.base.info(f'📭 [PAYMENT_WEBHOOK] Ignoring {event.get("type")}')
        return PaymentWebhookResponse()

    await container.confirm_booking_payment_use_case().execute(booking_id=booking_id)
    return PaymentWebhookResponse()
