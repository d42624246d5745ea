from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional
import uuid

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.booking.domain.value_object.seat_label import validate_seat_labels


CENTS = Decimal('0.01')


@attrs.define
class Booking:
    id: uuid.UUID
    user_id: str
    show_id: uuid.UUID
    booked_seats: List[str]
    amount: Decimal
    is_paid: bool = False
    payment_link: Optional[str] = None
    payment_session_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        user_id: str,
        show_id: uuid.UUID,
        selected_seats: List[str],
        show_price: Decimal,
    ) -> 'Booking':
        if not user_id:
            raise DomainError('User is required')
        seats = validate_seat_labels(selected_seats)
        if show_price <= 0:
            raise DomainError('Show price must be positive')

        now = utc_now()
        return cls(
            id=uuid7(),
            user_id=user_id,
            show_id=show_id,
            booked_seats=seats,
            amount=(show_price * len(seats)).quantize(CENTS),
            is_paid=False,
            created_at=now,
            updated_at=now,
        )

    @property
    def amount_in_cents(self) -> int:
        return int((self.amount * 100).to_integral_value())

    @property
    def verification_code(self) -> str:
        return f'SZ-{self.id.hex[-8:].upper()}'

    def hold_expires_at(self, *, hold_minutes: int) -> datetime:
        if self.created_at is None:
            raise DomainError('Booking has no creation time')
        return self.created_at + timedelta(minutes=hold_minutes)

    @Logger.io
    def attach_payment_session(self, *, payment_link: str, payment_session_id: str) -> 'Booking':
        return attrs.evolve(
            self,
            payment_link=payment_link,
            payment_session_id=payment_session_id,
            updated_at=utc_now(),
        )
