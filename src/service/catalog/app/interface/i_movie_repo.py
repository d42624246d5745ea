from abc import ABC, abstractmethod
from typing import Optional, Sequence

from src.service.catalog.domain.entity.movie_entity import Movie


class IMovieRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, movie_id: int) -> Optional[Movie]:
        pass

    @abstractmethod
    async def get_by_ids(self, *, movie_ids: Sequence[int]) -> dict[int, Movie]:
        pass

    @abstractmethod
    async def create(self, *, movie: Movie) -> Movie:
        """
        Insert the movie snapshot.

        Concurrent first references race on the primary key; the loser gets
        the row the winner stored.
        """
        pass
