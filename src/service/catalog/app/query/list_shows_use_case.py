from typing import Any, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.catalog.app.interface.i_movie_repo import IMovieRepo
from src.service.catalog.app.interface.i_show_repo import IShowRepo
from src.service.catalog.domain.entity.movie_entity import Movie


class ListShowsUseCase:
    def __init__(self, *, movie_repo: IMovieRepo, show_repo: IShowRepo) -> None:
        self.movie_repo = movie_repo
        self.show_repo = show_repo

    @classmethod
    @inject
    def depends(
        cls,
        movie_repo: IMovieRepo = Depends(Provide[Container.movie_repo]),
        show_repo: IShowRepo = Depends(Provide[Container.show_repo]),
    ) -> Self:
        return cls(movie_repo=movie_repo, show_repo=show_repo)

    @Logger.io
    async def list_upcoming_movies(self) -> list[Movie]:
        """Distinct movies that still have a future show, earliest show first."""
        shows = await self.show_repo.list_upcoming(now=utc_now())
        movie_ids = list(dict.fromkeys(show.movie_id for show in shows))
        movies = await self.movie_repo.get_by_ids(movie_ids=movie_ids)

        Logger.base.info(f'🌟 [LIST_SHOWS] {len(movie_ids)} movie(s) across {len(shows)} show(s)')
        return [movies[movie_id] for movie_id in movie_ids if movie_id in movies]

    @Logger.io
    async def get_show_schedule(self, *, movie_id: int) -> tuple[Movie, dict[str, list[dict[str, Any]]]]:
        """
        Upcoming shows of one movie grouped by UTC calendar date.

        Returns:
            (movie, {'YYYY-MM-DD': [{'time': datetime, 'showId': str}, ...]})
        """
        movie = await self.movie_repo.get_by_id(movie_id=movie_id)
        if movie is None:
            raise NotFoundError('Movie not found')

        date_time: dict[str, list[dict[str, Any]]] = {}
        for show in await self.show_repo.list_upcoming(now=utc_now(), movie_id=movie_id):
            date_key = show.show_date_time.date().isoformat()
            date_time.setdefault(date_key, []).append(
                {'time': show.show_date_time, 'showId': str(show.id)}
            )
        return movie, date_time
