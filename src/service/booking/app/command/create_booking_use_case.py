import time
from typing import List, Self
import uuid

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.platform.scheduler.scheduled_job import JobKind, JobRequest
from src.service.booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.booking.app.interface.i_payment_gateway import IPaymentGateway
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.catalog.app.interface.i_movie_repo import IMovieRepo
from src.service.catalog.app.interface.i_show_repo import IShowRepo


class CreateBookingUseCase:
    """
    Reserve seats on a show and open a checkout for them.

    Flow:
    1. Load the show (price) and its movie (line-item name)
    2. Insert booking + seat holds in one transaction, together with the
       release job due when the hold window closes
    3. Create the checkout session and store its link on the booking

    A checkout failure after step 2 leaves an unpaid booking without a link;
    the release job already scheduled in step 2 frees its seats.
    """

    def __init__(
        self,
        *,
        booking_command_repo: IBookingCommandRepo,
        show_repo: IShowRepo,
        movie_repo: IMovieRepo,
        payment_gateway: IPaymentGateway,
        hold_minutes: int | None = None,
    ) -> None:
        self.booking_command_repo = booking_command_repo
        self.show_repo = show_repo
        self.movie_repo = movie_repo
        self.payment_gateway = payment_gateway
        self.hold_minutes = hold_minutes or settings.BOOKING_HOLD_MINUTES
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        booking_command_repo: IBookingCommandRepo = Depends(Provide[Container.booking_command_repo]),
        show_repo: IShowRepo = Depends(Provide[Container.show_repo]),
        movie_repo: IMovieRepo = Depends(Provide[Container.movie_repo]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    ) -> Self:
        return cls(
            booking_command_repo=booking_command_repo,
            show_repo=show_repo,
            movie_repo=movie_repo,
            payment_gateway=payment_gateway,
        )

    @Logger.io
    async def create_booking(
        self, *, user_id: str, show_id: uuid.UUID, selected_seats: List[str], origin: str
    ) -> str:
        start = time.perf_counter()
        result = 'error'
        try:
            url = await self._create_booking(
                user_id=user_id, show_id=show_id, selected_seats=selected_seats, origin=origin
            )
            result = 'success'
            return url
        except Exception as e:
            result = type(e).__name__
            raise
        finally:
            metrics.record_booking(result=result, duration=time.perf_counter() - start)

    async def _create_booking(
        self, *, user_id: str, show_id: uuid.UUID, selected_seats: List[str], origin: str
    ) -> str:
        with self.tracer.start_as_current_span(
            'use_case.create_booking',
            attributes={
                'show.id': str(show_id),
                'user.id': user_id,
                'seat.count': len(selected_seats),
            },
        ) as span:
            show = await self.show_repo.get_by_id(show_id=show_id)
            if not show:
                raise NotFoundError('Show not found')
            movie = await self.movie_repo.get_by_id(movie_id=show.movie_id)
            movie_title = movie.title if movie else 'Movie ticket'

            booking = Booking.create(
                user_id=user_id,
                show_id=show.id,
                selected_seats=selected_seats,
                show_price=show.show_price,
            )
            expires_at = booking.hold_expires_at(hold_minutes=self.hold_minutes)
            span.set_attribute('booking.id', str(booking.id))

            await self.booking_command_repo.create_with_seat_holds(
                booking=booking,
                jobs=[
                    JobRequest(
                        kind=JobKind.RELEASE_UNPAID_BOOKING,
                        key=str(booking.id),
                        payload={'booking_id': str(booking.id)},
                        due_at=expires_at,
                    )
                ],
            )

            origin = origin.rstrip('/')
            checkout = await self.payment_gateway.create_checkout_session(
                booking_id=str(booking.id),
                product_name=movie_title,
                amount_in_cents=booking.amount_in_cents,
                success_url=f'{origin}/loading/my-bookings',
                cancel_url=f'{origin}/my-bookings',
                expires_at=expires_at,
            )
            await self.booking_command_repo.attach_payment_session(
                booking_id=booking.id,
                payment_link=checkout.url,
                payment_session_id=checkout.id,
            )

            Logger.base.info(
                f'💳 [CREATE_BOOKING] Booking {booking.id} awaiting payment until {expires_at.isoformat()}'
            )
            return checkout.url
