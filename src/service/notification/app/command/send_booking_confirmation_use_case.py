import uuid

import orjson
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.booking.domain.value_object.booking_verification import BookingVerification
from src.service.catalog.app.interface.i_movie_repo import IMovieRepo
from src.service.catalog.app.interface.i_show_repo import IShowRepo
from src.service.identity.app.interface.i_user_repo import IUserRepo
from src.service.notification.app.interface.i_email_sender import (
    EmailMessage,
    IEmailSender,
    InlineImage,
)
from src.service.notification.app.interface.i_qr_code_generator import IQrCodeGenerator
from src.service.notification.domain import email_template


KIND = 'booking_confirmation'


class SendBookingConfirmationUseCase:
    """
    Email the ticket of a paid booking.

    The ticket is a QR code of the verification payload, embedded inline as
    `cid:qrcode`. Delivery errors propagate to the job runner for retry;
    they never change the booking.
    """

    def __init__(
        self,
        *,
        booking_query_repo: IBookingQueryRepo,
        show_repo: IShowRepo,
        movie_repo: IMovieRepo,
        user_repo: IUserRepo,
        email_sender: IEmailSender,
        qr_code_generator: IQrCodeGenerator,
    ) -> None:
        self.booking_query_repo = booking_query_repo
        self.show_repo = show_repo
        self.movie_repo = movie_repo
        self.user_repo = user_repo
        self.email_sender = email_sender
        self.qr_code_generator = qr_code_generator
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def execute(self, *, booking_id: uuid.UUID) -> bool:
        """Returns False when there is nothing to send (booking, show or user missing)."""
        with self.tracer.start_as_current_span(
            'use_case.send_booking_confirmation', attributes={'booking.id': str(booking_id)}
        ):
            booking = await self.booking_query_repo.get_by_id(booking_id=booking_id)
            if not booking or not booking.is_paid:
                Logger.base.warning(f'📭 [CONFIRMATION] Booking {booking_id} missing or unpaid, skipping')
                return False

            show = await self.show_repo.get_by_id(show_id=booking.show_id)
            user = await self.user_repo.get_by_id(user_id=booking.user_id)
            if not show or not user:
                Logger.base.warning(
                    f'📭 [CONFIRMATION] Show or user of booking {booking_id} not found, skipping'
                )
                return False
            movie = await self.movie_repo.get_by_id(movie_id=show.movie_id)
            movie_title = movie.title if movie else 'your movie'

            verification = BookingVerification(
                booking_id=str(booking.id),
                movie_title=movie_title,
                show_date=show.show_date_time,
                seats=tuple(booking.booked_seats),
                user_name=user.name,
                user_email=user.email,
                amount=booking.amount,
                venue=settings.CINEMA_NAME,
                verification_code=booking.verification_code,
            )
            qr_png = self.qr_code_generator.generate_png(
                data=orjson.dumps(verification.to_payload()).decode()
            )

            message = EmailMessage(
                to=user.email,
                subject=email_template.booking_confirmation_subject(movie_title=movie_title),
                html=email_template.render_booking_confirmation(
                    user_name=user.name,
                    movie_title=movie_title,
                    show_date_time=show.show_date_time,
                    seats=booking.booked_seats,
                    amount=booking.amount,
                    verification_code=booking.verification_code,
                ),
                inline_images=(
                    InlineImage(
                        cid=email_template.QR_CODE_CID,
                        filename='ticket-qrcode.png',
                        content=qr_png,
                    ),
                ),
            )

            try:
                await self.email_sender.send(message=message)
            except Exception:
                metrics.record_notification(kind=KIND, result='failed')
                raise
            metrics.record_notification(kind=KIND, result='sent')
            Logger.base.info(f'🎫 [CONFIRMATION] Ticket {booking.verification_code} sent to {user.email}')
            return True
