from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.platform.logging.loguru_io import Logger
from src.service.catalog.app.query.movie_catalog_use_case import MovieCatalogUseCase
from src.service.catalog.driving_adapter.http_controller.schema.tmdb_schema import (
    MovieDetailsResponse,
    MovieSearchResponse,
    MovieVideosResponse,
    TrailersResponse,
)


router = APIRouter()


@router.get('/trailers')
@Logger.io
async def get_upcoming_trailers(
    use_case: MovieCatalogUseCase = Depends(MovieCatalogUseCase.depends),
) -> TrailersResponse:
    return TrailersResponse(trailers=await use_case.get_upcoming_trailers())


@router.get('/search')
@Logger.io
async def search_movies(
    query: Optional[str] = None,
    movie_type: str = Query('now_playing', alias='movieType', pattern='^[a-z_]+$'),
    page: int = Query(1, ge=1),
    language: Optional[str] = None,
    region: Optional[str] = None,
    use_case: MovieCatalogUseCase = Depends(MovieCatalogUseCase.depends),
) -> MovieSearchResponse:
    result = await use_case.search_movies(
        query=query, movie_type=movie_type, page=page, language=language, region=region
    )
    return MovieSearchResponse(**result)


@router.get('/movie/{movie_id}')
@Logger.io
async def get_movie_details(
    movie_id: int,
    use_case: MovieCatalogUseCase = Depends(MovieCatalogUseCase.depends),
) -> MovieDetailsResponse:
    return MovieDetailsResponse(movie=await use_case.get_movie_details(movie_id=movie_id))


@router.get('/movie/{movie_id}/videos')
@Logger.io
async def get_movie_videos(
    movie_id: int,
    use_case: MovieCatalogUseCase = Depends(MovieCatalogUseCase.depends),
) -> MovieVideosResponse:
    return MovieVideosResponse(videos=await use_case.get_movie_videos(movie_id=movie_id))
