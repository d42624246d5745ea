from datetime import datetime
from typing import Any, List, Optional
import uuid

from pydantic import BaseModel, Field


class BookingCreateRequest(BaseModel):
    model_config = {
        'populate_by_name': True,
        'json_schema_extra': {
            'example': {
                'showId': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'selectedSeats': ['A1', 'A2'],
            }
        },
    }

    show_id: uuid.UUID = Field(alias='showId')
    selected_seats: List[str] = Field(alias='selectedSeats')


class BookingCreateResponse(BaseModel):
    success: bool = True
    url: str


class OccupiedSeatsResponse(BaseModel):
    success: bool = True
    occupiedSeats: List[str]


class TopMovieResponse(BaseModel):
    success: bool = True
    movie: dict[str, Any]


class BookingShowResponse(BaseModel):
    id: uuid.UUID
    showDateTime: datetime
    showPrice: float
    movie: Optional[dict[str, Any]] = None


class MyBookingResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'bookedSeats': ['A1', 'A2'],
                'amount': 20.0,
                'isPaid': False,
                'paymentLink': 'https://checkout.stripe.com/c/pay/cs_test_123',
                'verificationCode': 'SZ-456789AB',
                'createdAt': '2025-01-10T10:30:00Z',
                'paidAt': None,
                'show': {
                    'id': '01936d8f-1111-7c4e-a9c5-123456789abc',
                    'showDateTime': '2025-01-12T14:30:00Z',
                    'showPrice': 10.0,
                    'movie': {'id': 550, 'title': 'Fight Club'},
                },
            }
        },
    }

    id: uuid.UUID
    bookedSeats: List[str]
    amount: float
    isPaid: bool
    paymentLink: Optional[str] = None
    verificationCode: str
    createdAt: Optional[datetime] = None
    paidAt: Optional[datetime] = None
    show: Optional[BookingShowResponse] = None


class MyBookingsResponse(BaseModel):
    success: bool = True
    bookings: List[MyBookingResponse]


class PaymentWebhookResponse(BaseModel):
    received: bool = True
