from typing import Any, Optional, Self

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError, UpstreamError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.catalog.app.interface.i_movie_catalog_client import IMovieCatalogClient
from src.service.catalog.domain.trailer_selection import (
    FEATURED_LANGUAGE,
    TRAILER_COUNT,
    is_future_release,
    to_trailer,
)


class MovieCatalogUseCase:
    """Read-through access to the third-party movie catalog (search, details, trailers)."""

    MAX_UPCOMING_PAGES = 10
    MAX_FILLER_PAGES = 5

    def __init__(self, *, catalog_client: IMovieCatalogClient, page_delay: float = 0.1) -> None:
        self.catalog_client = catalog_client
        self.page_delay = page_delay
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        catalog_client: IMovieCatalogClient = Depends(Provide[Container.movie_catalog_client]),
    ) -> Self:
        return cls(catalog_client=catalog_client)

    @Logger.io
    async def search_movies(
        self,
        *,
        query: Optional[str] = None,
        movie_type: str = 'now_playing',
        page: int = 1,
        language: Optional[str] = None,
        region: Optional[str] = None,
    ) -> dict[str, Any]:
        data = await self.catalog_client.search_movies(
            query=query, movie_type=movie_type, page=page, language=language, region=region
        )
        return {
            'results': data.get('results') or [],
            'totalPages': data.get('total_pages', 0),
            'totalResults': data.get('total_results', 0),
            'currentPage': page,
        }

    @Logger.io
    async def get_movie_details(self, *, movie_id: int) -> dict[str, Any]:
        details = await self.catalog_client.get_movie_details(movie_id=movie_id)
        credits = await self.catalog_client.get_movie_credits(movie_id=movie_id)
        return {
            'id': details.get('id'),
            'title': details.get('title'),
            'overview': details.get('overview'),
            'poster_path': details.get('poster_path'),
            'backdrop_path': details.get('backdrop_path'),
            'genres': details.get('genres') or [],
            'cast': credits.get('cast') or [],
            'crew': credits.get('crew') or [],
            'release_date': details.get('release_date'),
            'original_language': details.get('original_language'),
            'tagline': details.get('tagline') or '',
            'vote_average': details.get('vote_average'),
            'runtime': details.get('runtime'),
            'production_companies': details.get('production_companies') or [],
            'production_countries': details.get('production_countries') or [],
            'spoken_languages': details.get('spoken_languages') or [],
        }

    @Logger.io
    async def get_movie_videos(self, *, movie_id: int) -> list[dict[str, Any]]:
        return await self.catalog_client.get_movie_videos(movie_id=movie_id)

    @Logger.io
    async def get_upcoming_trailers(self) -> list[dict[str, Any]]:
        """
        Featured trailers for the home page.

        1. Hindi movies releasing after today from up to 10 upcoming pages, best rated first
        2. Top up to 5 with other upcoming releases, most popular first
        3. Attach the best YouTube video of each (movie kept without video on lookup failure)
        """
        with self.tracer.start_as_current_span('use_case.get_upcoming_trailers'):
            today = utc_now().date().isoformat()

            featured = await self._collect_featured(today=today)
            featured.sort(key=lambda m: m.get('vote_average') or 0, reverse=True)

            if len(featured) < TRAILER_COUNT:
                featured += await self._collect_fillers(
                    today=today,
                    exclude={m.get('id') for m in featured},
                    needed=TRAILER_COUNT - len(featured),
                )
            selected = featured[:TRAILER_COUNT]

            trailers = []
            for movie in selected:
                try:
                    videos = await self.catalog_client.get_movie_videos(movie_id=movie['id'])
                except (UpstreamError, NotFoundError) as e:
                    Logger.base.warning(f'🎬 [TRAILERS] No videos for {movie.get("id")}: {e}')
                    videos = []
                trailers.append(to_trailer(movie, videos))

            Logger.base.info(f'🎬 [TRAILERS] Selected {len(trailers)} trailer(s)')
            return trailers

    async def _collect_featured(self, *, today: str) -> list[dict[str, Any]]:
        movies: list[dict[str, Any]] = []
        page, total_pages = 1, 1
        while page <= min(total_pages, self.MAX_UPCOMING_PAGES):
            try:
                data = await self.catalog_client.get_upcoming(page=page)
            except UpstreamError as e:
                Logger.base.warning(f'🎬 [TRAILERS] Upcoming page {page} failed, stopping: {e}')
                break
            total_pages = int(data.get('total_pages') or 1)
            movies += [
                m
                for m in data.get('results') or []
                if m.get('original_language') == FEATURED_LANGUAGE and is_future_release(m, today=today)
            ]
            page += 1
            await anyio.sleep(self.page_delay)
        return movies

    async def _collect_fillers(
        self, *, today: str, exclude: set[Any], needed: int
    ) -> list[dict[str, Any]]:
        fillers: list[dict[str, Any]] = []
        for page in range(1, self.MAX_FILLER_PAGES + 1):
            if len(fillers) >= needed:
                break
            try:
                data = await self.catalog_client.get_upcoming(page=page)
            except UpstreamError as e:
                Logger.base.warning(f'🎬 [TRAILERS] Filler page {page} failed, stopping: {e}')
                break
            for movie in data.get('results') or []:
                if movie.get('id') in exclude or not is_future_release(movie, today=today):
                    continue
                exclude.add(movie.get('id'))
                fillers.append(movie)
            await anyio.sleep(self.page_delay)

        fillers.sort(key=lambda m: m.get('popularity') or 0, reverse=True)
        return fillers[:needed]
