"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.booking.app.command import create_booking_use_case
from src.service.booking.app.query import (
    get_occupied_seats_use_case,
    get_top_booked_movie_use_case,
    list_my_bookings_use_case,
)
from src.service.catalog.app.command import add_shows_use_case
from src.service.catalog.app.query import list_shows_use_case, movie_catalog_use_case
from src.service.identity.app.command import sync_user_use_case
from src.service.identity.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    create_booking_use_case,
    get_occupied_seats_use_case,
    get_top_booked_movie_use_case,
    list_my_bookings_use_case,
    add_shows_use_case,
    list_shows_use_case,
    movie_catalog_use_case,
    sync_user_use_case,
    role_auth,
]
