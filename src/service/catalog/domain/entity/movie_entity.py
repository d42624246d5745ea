from datetime import datetime
from typing import Any, Optional

import attrs


@attrs.define
class Movie:
    """Catalog snapshot of a TMDB movie, cached on first reference and never refreshed."""

    id: int  # TMDB id
    title: str
    overview: str = ''
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    genres: list[dict[str, Any]] = attrs.field(factory=list)
    casts: list[dict[str, Any]] = attrs.field(factory=list)
    release_date: Optional[str] = None
    original_language: Optional[str] = None
    tagline: str = ''
    vote_average: float = 0.0
    runtime: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_tmdb(cls, *, details: dict[str, Any], credits: dict[str, Any]) -> 'Movie':
        return cls(
            id=int(details['id']),
            title=details.get('title') or '',
            overview=details.get('overview') or '',
            poster_path=details.get('poster_path'),
            backdrop_path=details.get('backdrop_path'),
            genres=list(details.get('genres') or []),
            casts=list(credits.get('cast') or []),
            release_date=details.get('release_date'),
            original_language=details.get('original_language'),
            tagline=details.get('tagline') or '',
            vote_average=float(details.get('vote_average') or 0.0),
            runtime=details.get('runtime'),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'overview': self.overview,
            'poster_path': self.poster_path,
            'backdrop_path': self.backdrop_path,
            'genres': self.genres,
            'casts': self.casts,
            'release_date': self.release_date,
            'original_language': self.original_language,
            'tagline': self.tagline,
            'vote_average': self.vote_average,
            'runtime': self.runtime,
        }
