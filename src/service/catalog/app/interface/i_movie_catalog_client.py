"""
Movie Catalog Client Interface

Third-party movie database (TMDB v3). Implementations retry transient
failures and raise the upstream error family from
`src.platform.exception.exceptions` with stable, user-facing messages.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class IMovieCatalogClient(ABC):
    @abstractmethod
    async def get_movie_details(self, *, movie_id: int) -> dict[str, Any]:
        pass

    @abstractmethod
    async def get_movie_credits(self, *, movie_id: int) -> dict[str, Any]:
        pass

    @abstractmethod
    async def get_movie_videos(self, *, movie_id: int) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    async def search_movies(
        self,
        *,
        query: Optional[str],
        movie_type: str = 'now_playing',
        page: int = 1,
        language: Optional[str] = None,
        region: Optional[str] = None,
    ) -> dict[str, Any]:
        """Free-text search when `query` is set, otherwise the `movie_type` list (now_playing, upcoming...)."""
        pass

    @abstractmethod
    async def get_upcoming(self, *, page: int = 1) -> dict[str, Any]:
        pass
