"""
Stripe webhook signature verification.

Header format: `Stripe-Signature: t=<unix ts>,v1=<hex hmac>[,v1=...]`. The
signed payload is `<ts>.<raw body>` under HMAC-SHA256 with the endpoint secret.
"""

import hashlib
import hmac
import time
from typing import Any, Optional

import orjson

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import DomainError


INVALID_SIGNATURE_MESSAGE = 'Invalid webhook signature'


class StripeWebhookVerifier:
    def __init__(self, *, secret: Optional[str] = None, tolerance_seconds: Optional[int] = None) -> None:
        self.secret = (
            secret if secret is not None else settings.STRIPE_WEBHOOK_SECRET.get_secret_value()
        )
        self.tolerance_seconds = (
            tolerance_seconds
            if tolerance_seconds is not None
            else settings.STRIPE_WEBHOOK_TOLERANCE_SECONDS
        )

    def sign(self, *, payload: bytes, timestamp: int) -> str:
        signed = f'{timestamp}.'.encode() + payload
        return hmac.new(self.secret.encode(), signed, hashlib.sha256).hexdigest()

    def build_header(self, *, payload: bytes, timestamp: Optional[int] = None) -> str:
        ts = int(time.time()) if timestamp is None else timestamp
        return f't={ts},v1={self.sign(payload=payload, timestamp=ts)}'

    def construct_event(
        self, *, payload: bytes, signature_header: Optional[str], now: Optional[float] = None
    ) -> dict[str, Any]:
        """
        Verify the signature and parse the event.

        Raises:
            DomainError: missing/invalid signature, stale timestamp or malformed body (400)
        """
        if not signature_header:
            raise DomainError(INVALID_SIGNATURE_MESSAGE)

        timestamp: Optional[int] = None
        signatures: list[str] = []
        for part in signature_header.split(','):
            name, _, value = part.strip().partition('=')
            if name == 't':
                try:
                    timestamp = int(value)
                except ValueError:
                    raise DomainError(INVALID_SIGNATURE_MESSAGE)
            elif name == 'v1':
                signatures.append(value)

        if timestamp is None or not signatures:
            raise DomainError(INVALID_SIGNATURE_MESSAGE)

        expected = self.sign(payload=payload, timestamp=timestamp)
        if not any(hmac.compare_digest(expected, sig) for sig in signatures):
            raise DomainError(INVALID_SIGNATURE_MESSAGE)

        current = time.time() if now is None else now
        if abs(current - timestamp) > self.tolerance_seconds:
            raise DomainError(INVALID_SIGNATURE_MESSAGE)

        try:
            event = orjson.loads(payload)
        except orjson.JSONDecodeError:
            raise DomainError('Invalid webhook payload')
        if not isinstance(event, dict):
            raise DomainError('Invalid webhook payload')
        return event
