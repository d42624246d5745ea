"""
Unit tests for the Booking entity and seat label validation

Test Coverage:
1. Amount = show price x seat count, exact to the cent
2. Seat selection validation (empty, malformed, duplicate)
3. Derived values (amount in cents, verification code, hold expiry)
"""

from datetime import timedelta
from decimal import Decimal
import uuid

import pytest

from src.platform.exception.exceptions import DomainError
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.value_object.seat_label import validate_seat_labels


pytestmark = pytest.mark.unit


def _create(seats: list[str], price: str = '10.00') -> Booking:
    return Booking.create(
        user_id='user_1',
        show_id=uuid.uuid4(),
        selected_seats=seats,
        show_price=Decimal(price),
    )


class TestBookingCreate:
    def test_amount_is_price_times_seat_count(self):
        # Given: a show priced 10.00 and two seats
        # When
        booking = _create(['A1', 'A2'])

        # Then
        assert booking.amount == Decimal('20.00')
        assert booking.is_paid is False
        assert booking.booked_seats == ['A1', 'A2']
        assert booking.payment_link is None

    def test_amount_keeps_cents(self):
        booking = _create(['A1', 'A2', 'A3'], price='12.99')

        assert booking.amount == Decimal('38.97')
        assert booking.amount_in_cents == 3897

    def test_seat_order_is_preserved(self):
        booking = _create(['C3', 'A1', 'B2'])

        assert booking.booked_seats == ['C3', 'A1', 'B2']

    def test_requires_user(self):
        with pytest.raises(DomainError, match='User is required'):
            Booking.create(
                user_id='',
                show_id=uuid.uuid4(),
                selected_seats=['A1'],
                show_price=Decimal('10.00'),
            )

    def test_rejects_non_positive_price(self):
        with pytest.raises(DomainError, match='Show price must be positive'):
            _create(['A1'], price='0')

    def test_ids_are_unique(self):
        assert _create(['A1']).id != _create(['A1']).id


class TestDerivedValues:
    def test_verification_code_uses_id_suffix(self):
        booking = _create(['A1'])

        assert booking.verification_code == f'SZ-{booking.id.hex[-8:].upper()}'
        assert len(booking.verification_code) == 11

    def test_hold_expires_after_hold_window(self):
        booking = _create(['A1'])

        expires_at = booking.hold_expires_at(hold_minutes=30)

        assert booking.created_at is not None
        assert expires_at - booking.created_at == timedelta(minutes=30)

    def test_hold_expiry_needs_creation_time(self):
        booking = _create(['A1'])
        booking.created_at = None

        with pytest.raises(DomainError, match='Booking has no creation time'):
            booking.hold_expires_at(hold_minutes=35)

    def test_attach_payment_session_returns_updated_copy(self):
        booking = _create(['A1'])

        updated = booking.attach_payment_session(
            payment_link='https://checkout.test/cs_1', payment_session_id='cs_1'
        )

        assert updated.payment_link == 'https://checkout.test/cs_1'
        assert updated.payment_session_id == 'cs_1'
        assert booking.payment_link is None


class TestSeatLabelValidation:
    @pytest.mark.parametrize('seats', [['A1'], ['J9', 'K12'], ['AA100']])
    def test_accepts_well_formed_labels(self, seats):
        assert validate_seat_labels(seats) == seats

    def test_rejects_empty_selection(self):
        with pytest.raises(DomainError, match='At least one seat must be selected'):
            validate_seat_labels([])

    @pytest.mark.parametrize('label', ['1A', 'A', 'A1000', 'A-1', '', 'a 1'])
    def test_rejects_malformed_label(self, label):
        with pytest.raises(DomainError, match='Invalid seat label'):
            validate_seat_labels(['B1', label])

    def test_rejects_duplicate_labels(self):
        with pytest.raises(DomainError, match='Duplicate seat label\\(s\\): A1'):
            validate_seat_labels(['A1', 'A2', 'A1'])

    def test_labels_are_trimmed_and_uppercased(self):
        assert validate_seat_labels([' a1', 'k12 ', 'Aa100']) == ['A1', 'K12', 'AA100']

    def test_case_variants_count_as_duplicates(self):
        with pytest.raises(DomainError, match='Duplicate seat label\\(s\\): B2'):
            validate_seat_labels(['b2', 'B2'])

    def test_booking_stores_normalized_labels(self):
        booking = _create(['c3', 'a1'])

        assert booking.booked_seats == ['C3', 'A1']
