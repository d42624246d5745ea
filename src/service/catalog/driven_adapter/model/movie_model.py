from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, BigInteger, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class MovieModel(Base):
    __tablename__ = 'movie'

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)  # TMDB id
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    overview: Mapped[str] = mapped_column(Text, nullable=False, default='')
    poster_path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    backdrop_path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    genres: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    casts: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    release_date: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    original_language: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    tagline: Mapped[str] = mapped_column(String(500), nullable=False, default='')
    vote_average: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    runtime: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f'<MovieModel(id={self.id}, title={self.title})>'
