from typing import Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.catalog.app.interface.i_movie_repo import IMovieRepo
from src.service.catalog.app.interface.i_show_repo import IShowRepo
from src.service.catalog.domain.entity.movie_entity import Movie
from src.service.catalog.domain.entity.show_entity import Show


@attrs.define(frozen=True)
class BookingDetail:
    booking: Booking
    show: Optional[Show]
    movie: Optional[Movie]


class ListMyBookingsUseCase:
    def __init__(
        self,
        *,
        booking_query_repo: IBookingQueryRepo,
        show_repo: IShowRepo,
        movie_repo: IMovieRepo,
    ) -> None:
        self.booking_query_repo = booking_query_repo
        self.show_repo = show_repo
        self.movie_repo = movie_repo

    @classmethod
    @inject
    def depends(
        cls,
        booking_query_repo: IBookingQueryRepo = Depends(Provide[Container.booking_query_repo]),
        show_repo: IShowRepo = Depends(Provide[Container.show_repo]),
        movie_repo: IMovieRepo = Depends(Provide[Container.movie_repo]),
    ) -> Self:
        return cls(booking_query_repo=booking_query_repo, show_repo=show_repo, movie_repo=movie_repo)

    @Logger.io
    async def execute(self, *, user_id: str) -> list[BookingDetail]:
        """Newest booking first, each with its show and movie."""
        bookings = await self.booking_query_repo.list_by_user(user_id=user_id)
        shows = await self.show_repo.get_by_ids(
            show_ids=list(dict.fromkeys(b.show_id for b in bookings))
        )
        movies = await self.movie_repo.get_by_ids(
            movie_ids=list(dict.fromkeys(s.movie_id for s in shows.values()))
        )

        details = []
        for booking in bookings:
            show = shows.get(booking.show_id)
            details.append(
                BookingDetail(
                    booking=booking,
                    show=show,
                    movie=movies.get(show.movie_id) if show else None,
                )
            )
        return details
