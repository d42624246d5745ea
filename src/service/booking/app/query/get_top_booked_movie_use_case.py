from typing import Any, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.catalog.app.interface.i_movie_repo import IMovieRepo
from src.service.catalog.app.interface.i_show_repo import IShowRepo


class GetTopBookedMovieUseCase:
    """
    Movie with the most paid bookings, with its totals.

    Before anything is paid, falls back to the movie of the most recently
    created show with zero totals.
    """

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
    async def execute(self) -> dict[str, Any]:
        stats = await self.booking_query_repo.get_top_booked_movie_stats()
        if stats:
            movie = await self.movie_repo.get_by_id(movie_id=stats['movie_id'])
            if movie:
                return {
                    **movie.to_dict(),
                    'totalBookings': stats['total_bookings'],
                    'totalSeats': stats['total_seats'],
                    'totalRevenue': float(stats['total_revenue']),
                }

        latest_show = await self.show_repo.get_latest_created()
        movie = (
            await self.movie_repo.get_by_id(movie_id=latest_show.movie_id) if latest_show else None
        )
        if not movie:
            raise NotFoundError('No movies found')

        return {
            **movie.to_dict(),
            'totalBookings': 0,
            'totalSeats': 0,
            'totalRevenue': 0.0,
        }
