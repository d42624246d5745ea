from datetime import datetime
from decimal import Decimal
from typing import Optional
import uuid

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import ensure_utc, utc_now


@attrs.define
class Show:
    id: uuid.UUID
    movie_id: int
    show_date_time: datetime
    show_price: Decimal
    # seat label -> holder user id; filled from seat holds when read through the booking side
    occupied_seats: dict[str, str] = attrs.field(factory=dict)
    created_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(cls, *, movie_id: int, show_date_time: datetime, show_price: Decimal) -> 'Show':
        if show_price <= 0:
            raise DomainError('Show price must be positive')
        return cls(
            id=uuid7(),
            movie_id=movie_id,
            show_date_time=ensure_utc(show_date_time),
            show_price=show_price.quantize(Decimal('0.01')),
            occupied_seats={},
            created_at=utc_now(),
        )

    def is_upcoming(self, *, now: Optional[datetime] = None) -> bool:
        return self.show_date_time >= (now or utc_now())
