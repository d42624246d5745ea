from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.catalog.app.command.add_shows_use_case import AddShowsUseCase
from src.service.catalog.app.query.list_shows_use_case import ListShowsUseCase
from src.service.catalog.domain.value_object.show_slot import ShowSlot
from src.service.catalog.driving_adapter.http_controller.schema.show_schema import (
    AddShowsRequest,
    AddShowsResponse,
    ShowListResponse,
    ShowScheduleResponse,
    ShowTimeResponse,
)
from src.service.identity.domain.entity.user_entity import UserEntity
from src.service.identity.driving_adapter.http_controller.auth.role_auth import require_admin


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/add', status_code=status.HTTP_200_OK)
@Logger.io
async def add_shows(
    request: AddShowsRequest,
    current_user: UserEntity = Depends(require_admin),
    use_case: AddShowsUseCase = Depends(AddShowsUseCase.depends),
) -> AddShowsResponse:
    with tracer.start_as_current_span('controller.add_shows') as span:
        span.set_attribute('movie.id', request.movie_id)
        await use_case.execute(
            movie_id=request.movie_id,
            show_input=[ShowSlot(date=item.date, times=tuple(item.time)) for item in request.show_input],
            show_price=request.show_price,
        )
        return AddShowsResponse()


@router.get('/all')
@Logger.io
async def list_shows(
    use_case: ListShowsUseCase = Depends(ListShowsUseCase.depends),
) -> ShowListResponse:
    movies = await use_case.list_upcoming_movies()
    return ShowListResponse(shows=[movie.to_dict() for movie in movies])


@router.get('/{movie_id}')
@Logger.io
async def get_show_schedule(
    movie_id: int,
    use_case: ListShowsUseCase = Depends(ListShowsUseCase.depends),
) -> ShowScheduleResponse:
    movie, date_time = await use_case.get_show_schedule(movie_id=movie_id)
    return ShowScheduleResponse(
        movie=movie.to_dict(),
        dateTime={
            date: [ShowTimeResponse(**slot) for slot in slots] for date, slots in date_time.items()
        },
    )
