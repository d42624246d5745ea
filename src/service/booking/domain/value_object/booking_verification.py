from datetime import datetime
from decimal import Decimal
from typing import Any

import attrs


@attrs.define(frozen=True)
class BookingVerification:
    """Ticket payload encoded into the confirmation QR code and checked at the entrance."""

    booking_id: str
    movie_title: str
    show_date: datetime
    seats: tuple[str, ...]
    user_name: str
    user_email: str
    amount: Decimal
    venue: str
    verification_code: str

    def to_payload(self) -> dict[str, Any]:
        return {
            'bookingId': self.booking_id,
            'movieTitle': self.movie_title,
            'showDate': self.show_date.isoformat(),
            'seats': list(self.seats),
            'userName': self.user_name,
            'userEmail': self.user_email,
            'amount': float(self.amount),
            'venue': self.venue,
            'verificationCode': self.verification_code,
        }
