from typing import Self
import uuid

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.catalog.app.interface.i_show_repo import IShowRepo


class GetOccupiedSeatsUseCase:
    def __init__(self, *, booking_query_repo: IBookingQueryRepo, show_repo: IShowRepo) -> None:
        self.booking_query_repo = booking_query_repo
        self.show_repo = show_repo

    @classmethod
    @inject
    def depends(
        cls,
        booking_query_repo: IBookingQueryRepo = Depends(Provide[Container.booking_query_repo]),
        show_repo: IShowRepo = Depends(Provide[Container.show_repo]),
    ) -> Self:
        return cls(booking_query_repo=booking_query_repo, show_repo=show_repo)

    @Logger.io
    async def execute(self, *, show_id: uuid.UUID) -> list[str]:
        show = await self.show_repo.get_by_id(show_id=show_id)
        if not show:
            raise NotFoundError('Show not found')
        occupied = await self.booking_query_repo.get_occupied_seats(show_id=show_id)
        return list(occupied)
