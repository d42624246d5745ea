from typing import Any, Optional

import httpx

from src.platform.config.core_setting import settings
from src.platform.http.retry_policy import RetryPolicy
from src.platform.http.upstream_client import UpstreamHttpClient
from src.platform.logging.loguru_io import Logger
from src.service.catalog.app.interface.i_movie_catalog_client import IMovieCatalogClient


class TmdbClient(UpstreamHttpClient, IMovieCatalogClient):
    """TMDB v3 over httpx, authenticated with a v4 read-access bearer token."""

    SERVICE_NAME = 'tmdb'
    UNAVAILABLE_MESSAGE = 'Movie database temporarily unavailable. Please try again later.'
    REJECTED_MESSAGE = 'Invalid API configuration. Please contact support.'
    RATE_LIMITED_MESSAGE = 'Too many requests. Please wait a moment and try again.'
    NOT_FOUND_MESSAGE = 'Movie not found'
    FAILED_MESSAGE = 'Failed to fetch movie data. Please try again.'

    DEFAULT_LANGUAGE = 'en-US'

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        token = api_key if api_key is not None else settings.TMDB_API_KEY.get_secret_value()
        super().__init__(
            base_url=base_url or settings.TMDB_BASE_URL,
            headers={'Authorization': f'Bearer {token}', 'Accept': 'application/json'},
            timeout=timeout or settings.TMDB_TIMEOUT_SECONDS,
            retry_policy=retry_policy
            or RetryPolicy(
                max_attempts=settings.TMDB_MAX_ATTEMPTS,
                base_delay=settings.TMDB_RETRY_BASE_DELAY,
                max_delay=settings.TMDB_RETRY_MAX_DELAY,
            ),
            transport=transport,
        )

    async def _get_json(self, path: str, *, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        response = await self._request('GET', path, params=params)
        return response.json()

    @Logger.io
    async def get_movie_details(self, *, movie_id: int) -> dict[str, Any]:
        return await self._get_json(f'/movie/{movie_id}')

    @Logger.io
    async def get_movie_credits(self, *, movie_id: int) -> dict[str, Any]:
        return await self._get_json(f'/movie/{movie_id}/credits')

    @Logger.io
    async def get_movie_videos(self, *, movie_id: int) -> list[dict[str, Any]]:
        data = await self._get_json(f'/movie/{movie_id}/videos')
        return list(data.get('results') or [])

    @Logger.io
    async def search_movies(
        self,
        *,
        query: Optional[str],
        movie_type: str = 'now_playing',
        page: int = 1,
        language: Optional[str] = None,
        region: Optional[str] = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {'language': self.DEFAULT_LANGUAGE, 'page': page}
        if language:
            params['with_original_language'] = language
        if region:
            params['region'] = region

        if query and query.strip():
            params['query'] = query.strip()
            return await self._get_json('/search/movie', params=params)
        return await self._get_json(f'/movie/{movie_type}', params=params)

    @Logger.io
    async def get_upcoming(self, *, page: int = 1) -> dict[str, Any]:
        return await self._get_json(
            '/movie/upcoming', params={'language': self.DEFAULT_LANGUAGE, 'page': page}
        )
