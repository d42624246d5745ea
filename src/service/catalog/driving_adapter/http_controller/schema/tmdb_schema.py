from typing import Any, List

from pydantic import BaseModel


class TrailersResponse(BaseModel):
    success: bool = True
    trailers: List[dict[str, Any]]


class MovieSearchResponse(BaseModel):
    success: bool = True
    results: List[dict[str, Any]]
    totalPages: int
    totalResults: int
    currentPage: int


class MovieDetailsResponse(BaseModel):
    success: bool = True
    movie: dict[str, Any]


class MovieVideosResponse(BaseModel):
    success: bool = True
    videos: List[dict[str, Any]]
