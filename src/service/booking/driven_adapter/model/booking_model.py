from datetime import datetime
from decimal import Decimal
from typing import Optional
import uuid

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class BookingModel(Base):
    __tablename__ = 'booking'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    show_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey('show.id'), nullable=False, index=True
    )
    booked_seats: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    payment_link: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    payment_session_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f'<BookingModel(id={self.id}, show_id={self.show_id}, is_paid={self.is_paid})>'


class SeatHoldModel(Base):
    """
    One row per occupied seat of a show.

    The (show_id, seat_label) primary key is the seat lock: inserting a hold
    for a seat someone else holds violates it, which rolls back the whole
    booking transaction.
    """

    __tablename__ = 'show_seat_hold'

    show_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey('show.id'), primary_key=True)
    seat_label: Mapped[str] = mapped_column(String(8), primary_key=True)
    booking_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey('booking.id', ondelete='CASCADE'), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)

    def __repr__(self) -> str:
        return f'<SeatHoldModel(show_id={self.show_id}, seat={self.seat_label}, booking={self.booking_id})>'
