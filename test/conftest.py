"""
Test Configuration and Fixtures

This module provides:
- Per-test SQLite database file (aiosqlite) for integration tests
- DI container isolation (singletons reset, third-party adapters overridden)
- Seed helpers for movies, shows and users
- An ASGI HTTP client against the test app (see test/test_main.py)

Architecture:
- Unit tests (test/**/unit/): mock every port with AsyncMock, no database
- Integration tests: real repositories on a fresh database file per test
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    # No background polling, no real SMTP during tests
    os.environ['JOB_RUNNER_ENABLED'] = 'false'
    os.environ['SMTP_HOST'] = ''


_early_setup_test_environment()

from collections.abc import AsyncIterator, Callable, Iterator  # noqa: E402
from datetime import datetime, timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402

from src.platform.config.core_setting import settings  # noqa: E402
from src.platform.config.di import Container, container  # noqa: E402
from src.platform.config.wire_modules import WIRE_MODULES  # noqa: E402
from src.platform.database.orm_db_setting import (  # noqa: E402
    Database,
    create_db_and_tables,
    dispose_engine,
)
from src.platform.scheduler.job_queue_impl import JobQueueImpl  # noqa: E402
from src.platform.types.utc_datetime import utc_now  # noqa: E402
from src.service.booking.driven_adapter.repo.booking_command_repo_impl import (  # noqa: E402
    BookingCommandRepoImpl,
)
from src.service.booking.driven_adapter.repo.booking_query_repo_impl import (  # noqa: E402
    BookingQueryRepoImpl,
)
from src.service.catalog.domain.entity.movie_entity import Movie  # noqa: E402
from src.service.catalog.domain.entity.show_entity import Show  # noqa: E402
from src.service.catalog.driven_adapter.repo.movie_repo_impl import MovieRepoImpl  # noqa: E402
from src.service.catalog.driven_adapter.repo.show_repo_impl import ShowRepoImpl  # noqa: E402
from src.service.identity.domain.entity.user_entity import User  # noqa: E402
from src.service.identity.driven_adapter.repo.user_repo_impl import UserRepoImpl  # noqa: E402
from src.service.identity.driving_adapter.http_controller.auth.jwt_auth import (  # noqa: E402
    JwtAuth,
)
from src.service.notification.driven_adapter.email.logging_email_sender import (  # noqa: E402
    LoggingEmailSender,
)
from test.fakes import FakePaymentGateway  # noqa: E402
from test.shared.utils import make_movie  # noqa: E402


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
async def database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AsyncIterator[Database]:
    """Fresh SQLite database file with every table created."""
    monkeypatch.setattr(settings, 'DATABASE_URL', f'sqlite+aiosqlite:///{tmp_path}/test.db')
    await dispose_engine()
    await create_db_and_tables()
    yield Database()
    await dispose_engine()


@pytest.fixture
def job_queue(database: Database) -> JobQueueImpl:
    return JobQueueImpl(session_factory=database.session)


@pytest.fixture
def movie_repo(database: Database) -> MovieRepoImpl:
    return MovieRepoImpl(session_factory=database.session)


@pytest.fixture
def show_repo(database: Database, job_queue: JobQueueImpl) -> ShowRepoImpl:
    return ShowRepoImpl(session_factory=database.session, job_queue=job_queue)


@pytest.fixture
def user_repo(database: Database) -> UserRepoImpl:
    return UserRepoImpl(session_factory=database.session)


@pytest.fixture
def booking_command_repo(database: Database, job_queue: JobQueueImpl) -> BookingCommandRepoImpl:
    return BookingCommandRepoImpl(session_factory=database.session, job_queue=job_queue)


@pytest.fixture
def booking_query_repo(database: Database) -> BookingQueryRepoImpl:
    return BookingQueryRepoImpl(session_factory=database.session)


# =============================================================================
# Seed helpers
# =============================================================================


@pytest.fixture
def seed_movie(movie_repo: MovieRepoImpl) -> Callable[..., Any]:
    async def _seed(movie_id: int = 550, title: str = 'Fight Club', **fields: Any) -> Movie:
        return await movie_repo.create(movie=make_movie(movie_id, title, **fields))

    return _seed


@pytest.fixture
def seed_show(show_repo: ShowRepoImpl) -> Callable[..., Any]:
    async def _seed(
        *,
        movie_id: int = 550,
        show_date_time: datetime | None = None,
        show_price: Decimal = Decimal('10.00'),
    ) -> Show:
        show = Show.create(
            movie_id=movie_id,
            show_date_time=show_date_time or utc_now() + timedelta(days=1),
            show_price=show_price,
        )
        await show_repo.create_many(shows=[show])
        return show

    return _seed


@pytest.fixture
def seed_user(user_repo: UserRepoImpl) -> Callable[..., Any]:
    async def _seed(user_id: str = 'user_1', name: str = 'Ada Lovelace', email: str | None = None) -> User:
        return await user_repo.upsert(
            user=User(id=user_id, name=name, email=email or f'{user_id}@example.com')
        )

    return _seed


# =============================================================================
# DI container + HTTP client
# =============================================================================


@pytest.fixture
def payment_gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def email_sender() -> LoggingEmailSender:
    return LoggingEmailSender()


@pytest.fixture
def di_container(
    database: Database,
    payment_gateway: FakePaymentGateway,
    email_sender: LoggingEmailSender,
) -> Iterator[Container]:
    """Global container wired for the test app with external adapters replaced."""
    container.reset_singletons()
    container.wire(modules=WIRE_MODULES)
    with (
        container.payment_gateway.override(payment_gateway),
        container.email_sender.override(email_sender),
    ):
        yield container
    container.unwire()
    container.reset_singletons()


@pytest.fixture
async def client(di_container: Container) -> AsyncIterator[httpx.AsyncClient]:
    from test.test_main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url='http://testserver') as http_client:
        yield http_client


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    def _headers(user_id: str = 'user_1', role: str | None = None) -> dict[str, str]:
        token = JwtAuth().create_jwt_token(user_id=user_id, role=role)
        return {'Authorization': f'Bearer {token}'}

    return _headers
