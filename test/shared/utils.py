"""Entity builders shared by fixtures and tests."""

from typing import Any

from src.service.catalog.domain.entity.movie_entity import Movie


def make_movie(movie_id: int = 550, title: str = 'Fight Club', **fields: Any) -> Movie:
    return Movie(
        id=movie_id,
        title=title,
        overview=fields.pop('overview', 'An insomniac office worker...'),
        poster_path=fields.pop('poster_path', '/poster.jpg'),
        backdrop_path=fields.pop('backdrop_path', '/backdrop.jpg'),
        genres=fields.pop('genres', [{'id': 18, 'name': 'Drama'}]),
        casts=fields.pop('casts', [{'name': 'Brad Pitt'}]),
        release_date=fields.pop('release_date', '1999-10-15'),
        original_language=fields.pop('original_language', 'en'),
        vote_average=fields.pop('vote_average', 8.4),
        runtime=fields.pop('runtime', 139),
        **fields,
    )
