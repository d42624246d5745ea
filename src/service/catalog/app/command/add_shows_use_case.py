from decimal import Decimal
from typing import Self, Sequence
from zoneinfo import ZoneInfo

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.platform.scheduler.scheduled_job import JobKind, JobRequest
from src.service.catalog.app.interface.i_movie_catalog_client import IMovieCatalogClient
from src.service.catalog.app.interface.i_movie_repo import IMovieRepo
from src.service.catalog.app.interface.i_show_repo import IShowRepo
from src.service.catalog.domain.entity.movie_entity import Movie
from src.service.catalog.domain.entity.show_entity import Show
from src.service.catalog.domain.value_object.show_slot import ShowSlot


class AddShowsUseCase:
    """
    Admin: schedule shows for a movie.

    Flow:
    1. Cache the movie from the catalog on first reference (details + credits)
    2. Insert one show per (date, time) with an empty seat map
    3. Schedule the new-show alert in the same transaction as the shows
    """

    def __init__(
        self,
        *,
        movie_repo: IMovieRepo,
        show_repo: IShowRepo,
        catalog_client: IMovieCatalogClient,
    ) -> None:
        self.movie_repo = movie_repo
        self.show_repo = show_repo
        self.catalog_client = catalog_client
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        movie_repo: IMovieRepo = Depends(Provide[Container.movie_repo]),
        show_repo: IShowRepo = Depends(Provide[Container.show_repo]),
        catalog_client: IMovieCatalogClient = Depends(Provide[Container.movie_catalog_client]),
    ) -> Self:
        return cls(movie_repo=movie_repo, show_repo=show_repo, catalog_client=catalog_client)

    @Logger.io
    async def execute(
        self, *, movie_id: int, show_input: Sequence[ShowSlot], show_price: Decimal
    ) -> list[Show]:
        with self.tracer.start_as_current_span(
            'use_case.add_shows', attributes={'movie.id': movie_id}
        ):
            tz = ZoneInfo(settings.DISPLAY_TIMEZONE)
            shows = [
                Show.create(movie_id=movie_id, show_date_time=show_date_time, show_price=show_price)
                for slot in show_input
                for show_date_time in slot.to_datetimes(tz=tz)
            ]
            if not shows:
                raise DomainError('At least one show time is required')

            movie = await self.get_or_cache_movie(movie_id=movie_id)

            await self.show_repo.create_many(
                shows=shows,
                jobs=[
                    JobRequest(
                        kind=JobKind.NEW_SHOW,
                        key=str(shows[0].id),
                        payload={'movie_id': movie.id, 'movie_title': movie.title},
                    )
                ],
            )
            Logger.base.info(f'🎞️  [ADD_SHOWS] {len(shows)} show(s) added for "{movie.title}"')
            return shows

    @Logger.io
    async def get_or_cache_movie(self, *, movie_id: int) -> Movie:
        movie = await self.movie_repo.get_by_id(movie_id=movie_id)
        if movie:
            return movie

        Logger.base.info(f'🌐 [ADD_SHOWS] Movie {movie_id} not cached, fetching from catalog')
        details = await self.catalog_client.get_movie_details(movie_id=movie_id)
        credits = await self.catalog_client.get_movie_credits(movie_id=movie_id)
        return await self.movie_repo.create(movie=Movie.from_tmdb(details=details, credits=credits))
