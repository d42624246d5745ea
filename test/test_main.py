"""
App under test: production routes and exception handlers, empty lifespan.

No tracing exporter, no job runner; the `database` and `di_container`
fixtures prepare tables and wiring per test, and jobs are driven
explicitly through JobRunner.run_once where a test needs them.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.platform.app_factory import create_app


@asynccontextmanager
async def no_background_work(app: FastAPI) -> AsyncIterator[None]:
    yield


app = create_app(lifespan=no_background_work, title_suffix=' (Test)', service_name='movie-booking-test')
