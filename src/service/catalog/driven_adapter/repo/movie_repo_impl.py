from typing import AsyncContextManager, Callable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import ensure_utc
from src.service.catalog.app.interface.i_movie_repo import IMovieRepo
from src.service.catalog.domain.entity.movie_entity import Movie
from src.service.catalog.driven_adapter.model.movie_model import MovieModel


class MovieRepoImpl(IMovieRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @staticmethod
    def _to_entity(db_movie: MovieModel) -> Movie:
        return Movie(
            id=db_movie.id,
            title=db_movie.title,
            overview=db_movie.overview,
            poster_path=db_movie.poster_path,
            backdrop_path=db_movie.backdrop_path,
            genres=list(db_movie.genres or []),
            casts=list(db_movie.casts or []),
            release_date=db_movie.release_date,
            original_language=db_movie.original_language,
            tagline=db_movie.tagline,
            vote_average=db_movie.vote_average,
            runtime=db_movie.runtime,
            created_at=ensure_utc(db_movie.created_at),
        )

    @Logger.io
    async def get_by_id(self, *, movie_id: int) -> Optional[Movie]:
        async with self.session_factory() as session:
            db_movie = await session.get(MovieModel, movie_id)
            return self._to_entity(db_movie) if db_movie else None

    @Logger.io
    async def get_by_ids(self, *, movie_ids: Sequence[int]) -> dict[int, Movie]:
        if not movie_ids:
            return {}
        async with self.session_factory() as session:
            result = await session.execute(
                select(MovieModel).where(MovieModel.id.in_(set(movie_ids)))
            )
            return {m.id: self._to_entity(m) for m in result.scalars().all()}

    @Logger.io
    async def create(self, *, movie: Movie) -> Movie:
        async with self.session_factory() as session:
            session.add(
                MovieModel(
                    id=movie.id,
                    title=movie.title,
                    overview=movie.overview,
                    poster_path=movie.poster_path,
                    backdrop_path=movie.backdrop_path,
                    genres=movie.genres,
                    casts=movie.casts,
                    release_date=movie.release_date,
                    original_language=movie.original_language,
                    tagline=movie.tagline,
                    vote_average=movie.vote_average,
                    runtime=movie.runtime,
                )
            )
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                Logger.base.info(f'🎬 [MOVIE] {movie.id} cached concurrently, reusing stored row')
                db_movie = await session.get(MovieModel, movie.id)
                if db_movie is None:
                    raise
                return self._to_entity(db_movie)

        Logger.base.info(f'🎬 [MOVIE] Cached {movie.id} "{movie.title}"')
        return movie
