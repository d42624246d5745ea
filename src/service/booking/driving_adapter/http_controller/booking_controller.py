from typing import Optional
import uuid

from fastapi import APIRouter, Depends, Header
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.command.create_booking_use_case import CreateBookingUseCase
from src.service.booking.app.query.get_occupied_seats_use_case import GetOccupiedSeatsUseCase
from src.service.booking.app.query.get_top_booked_movie_use_case import GetTopBookedMovieUseCase
from src.service.booking.app.query.list_my_bookings_use_case import (
    BookingDetail,
    ListMyBookingsUseCase,
)
from src.service.booking.driving_adapter.http_controller.schema.booking_schema import (
    BookingCreateRequest,
    BookingCreateResponse,
    BookingShowResponse,
    MyBookingResponse,
    MyBookingsResponse,
    OccupiedSeatsResponse,
    TopMovieResponse,
)
from src.service.identity.domain.entity.user_entity import UserEntity
from src.service.identity.driving_adapter.http_controller.auth.role_auth import get_current_user


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/create')
@Logger.io
async def create_booking(
    request: BookingCreateRequest,
    origin: Optional[str] = Header(None),
    current_user: UserEntity = Depends(get_current_user),
    use_case: CreateBookingUseCase = Depends(CreateBookingUseCase.depends),
) -> BookingCreateResponse:
    with tracer.start_as_current_span('controller.create_booking') as span:
        span.set_attribute('show.id', str(request.show_id))
        span.set_attribute('user.id', current_user.id)

        url = await use_case.create_booking(
            user_id=current_user.id,
            show_id=request.show_id,
            selected_seats=request.selected_seats,
            origin=origin or settings.FRONTEND_URL,
        )
        return BookingCreateResponse(url=url)


@router.get('/occupied-seats/{show_id}')
@Logger.io
async def get_occupied_seats(
    show_id: uuid.UUID,
    current_user: UserEntity = Depends(get_current_user),
    use_case: GetOccupiedSeatsUseCase = Depends(GetOccupiedSeatsUseCase.depends),
) -> OccupiedSeatsResponse:
    seats = await use_case.execute(show_id=show_id)
    return OccupiedSeatsResponse(occupiedSeats=seats)


@router.get('/top-movie')
@Logger.io
async def get_top_movie(
    use_case: GetTopBookedMovieUseCase = Depends(GetTopBookedMovieUseCase.depends),
) -> TopMovieResponse:
    return TopMovieResponse(movie=await use_case.execute())


def _to_my_booking(detail: BookingDetail) -> MyBookingResponse:
    booking, show, movie = detail.booking, detail.show, detail.movie
    return MyBookingResponse(
        id=booking.id,
        bookedSeats=booking.booked_seats,
        amount=float(booking.amount),
        isPaid=booking.is_paid,
        paymentLink=booking.payment_link,
        verificationCode=booking.verification_code,
        createdAt=booking.created_at,
        paidAt=booking.paid_at,
        show=BookingShowResponse(
            id=show.id,
            showDateTime=show.show_date_time,
            showPrice=float(show.show_price),
            movie=movie.to_dict() if movie else None,
        )
        if show
        else None,
    )


@router.get('/my-bookings')
@Logger.io
async def list_my_bookings(
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListMyBookingsUseCase = Depends(ListMyBookingsUseCase.depends),
) -> MyBookingsResponse:
    details = await use_case.execute(user_id=current_user.id)
    return MyBookingsResponse(bookings=[_to_my_booking(d) for d in details])
