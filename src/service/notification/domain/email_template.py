"""
HTML bodies of the customer emails.

Every interpolated value is HTML-escaped. Show times are rendered in the
cinema's display timezone.
"""

from datetime import datetime
from decimal import Decimal
from html import escape
from typing import Sequence
from zoneinfo import ZoneInfo

from src.platform.config.core_setting import settings


ACCENT_COLOR = '#F84565'
QR_CODE_CID = 'qrcode'


def _local(value: datetime) -> datetime:
    return value.astimezone(ZoneInfo(settings.DISPLAY_TIMEZONE))


def format_show_date(value: datetime) -> str:
    local = _local(value)
    return f'{local.month}/{local.day}/{local.year}'


def format_show_time(value: datetime) -> str:
    return _local(value).strftime('%I:%M %p')


def _signature() -> str:
    brand = escape(settings.BRAND_NAME)
    return f'<p>Best regards,<br>The {brand} Team</p>'


def booking_confirmation_subject(*, movie_title: str) -> str:
    return f'Booking Confirmation : {movie_title} booked!'


def render_booking_confirmation(
    *,
    user_name: str,
    movie_title: str,
    show_date_time: datetime,
    seats: Sequence[str],
    amount: Decimal,
    verification_code: str,
) -> str:
    code = escape(verification_code)
    return f"""<div style="font-family: Arial, sans-serif; line-height: 1.5;">
  <h2>Hi {escape(user_name)},</h2>
  <p>Your booking for <strong style="color: {ACCENT_COLOR};">{escape(movie_title)}</strong> has been confirmed!</p>
  <p>
    <strong>Booking ID:</strong> {code}<br>
    <strong>Show Date:</strong> {format_show_date(show_date_time)}<br>
    <strong>Time:</strong> {format_show_time(show_date_time)}<br>
    <strong>Seats:</strong> {escape(', '.join(seats))}<br>
    <strong>Total Amount:</strong> ${amount:.2f}<br>
  </p>
  <div style="margin: 20px 0; padding: 15px; background-color: #f8f9fa; border-radius: 8px; text-align: center;">
    <h3 style="color: {ACCENT_COLOR}; margin-bottom: 10px;">Your Digital Ticket</h3>
    <p style="margin-bottom: 15px;">Show this QR code at the cinema for entry</p>
    <img src="cid:{QR_CODE_CID}" alt="Booking QR Code" style="max-width: 250px; border: 2px solid {ACCENT_COLOR}; border-radius: 8px;" />
    <p style="margin-top: 10px; font-size: 12px; color: #666;">
      Verification Code: <strong>{code}</strong>
    </p>
  </div>
  <p><strong>Important:</strong> Please arrive at least 15 minutes before the show time. Present this QR code or your verification code at the entrance.</p>
  <p>Thank you for choosing {escape(settings.BRAND_NAME)}! We hope you enjoy the movie.</p>
  {_signature()}
</div>"""


def show_reminder_subject(*, movie_title: str) -> str:
    return f'Reminder: Your movie {movie_title} is starting soon!'


def render_show_reminder(*, user_name: str, movie_title: str, show_date_time: datetime) -> str:
    return f"""<div style="font-family: Arial, sans-serif; padding: 20px;">
  <h2>Hi {escape(user_name)},</h2>
  <p>This is a friendly reminder that your movie <strong style="color: {ACCENT_COLOR};">{escape(movie_title)}</strong> is starting soon!</p>
  <p><strong>Show Time:</strong> {format_show_time(show_date_time)}</p>
  <p>We hope you enjoy the show!</p>
  {_signature()}
</div>"""


def new_show_subject(*, movie_title: str) -> str:
    return f'New Show Alert: {movie_title} is now playing!'


def render_new_show(*, user_name: str, movie_title: str) -> str:
    return f"""<div style="font-family: Arial, sans-serif; padding: 20px;">
  <h2>Hi {escape(user_name)},</h2>
  <p>We are excited to inform you that a new show for <strong style="color: {ACCENT_COLOR};">{escape(movie_title)}</strong> has been added!</p>
  <p>Check it out now and book your tickets!</p>
  {_signature()}
</div>"""
