"""
FastAPI app factory shared by src/main.py and the test app.

The lifespan is the only difference between the two: production starts
tracing, the database and the job runner; tests prepare those in fixtures.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text

from src.platform.config.core_setting import settings
from src.platform.constant import route_constant as routes
from src.platform.database.orm_db_setting import get_engine
from src.platform.exception.exception_handlers import register_exception_handlers
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.service.booking.driving_adapter.http_controller import (
    booking_controller,
    payment_webhook_controller,
)
from src.service.catalog.driving_adapter.http_controller import show_controller, tmdb_controller
from src.service.identity.driving_adapter.http_controller import (
    admin_controller,
    identity_webhook_controller,
)


# (router, prefix, tag)
ROUTERS: list[tuple[APIRouter, str, str]] = [
    (booking_controller.router, routes.BOOKING_BASE, 'booking'),
    (payment_webhook_controller.router, routes.PAYMENT_BASE, 'payment'),
    (show_controller.router, routes.SHOW_BASE, 'show'),
    (tmdb_controller.router, routes.TMDB_BASE, 'tmdb'),
    (identity_webhook_controller.router, routes.IDENTITY_BASE, 'identity'),
    (admin_controller.router, routes.ADMIN_BASE, 'admin'),
]


def create_app(
    *,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]],
    title_suffix: str = '',
    service_name: str = settings.SERVICE_NAME,
) -> FastAPI:
    app = FastAPI(
        title=f'{settings.PROJECT_NAME}{title_suffix}',
        description='Movie catalog, seat booking with hosted checkout, and ticket emails',
        version=settings.VERSION,
        lifespan=lifespan,
    )

    # Instrument before routes are mounted
    TracingConfig(service_name=service_name).instrument_fastapi(app=app)

    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    register_exception_handlers(app)

    for router, prefix, tag in ROUTERS:
        app.include_router(router, prefix=prefix, tags=[tag])

    _register_operational_endpoints(app)
    return app


def _register_operational_endpoints(app: FastAPI) -> None:
    @app.get('/health')
    async def health_check() -> JSONResponse:
        """Liveness plus a database round trip; 503 when the database is unreachable."""
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text('SELECT 1'))
        except Exception as e:
            Logger.base.error(f'🩺 [HEALTH] Database check failed: {e!r}')
            return JSONResponse(
                status_code=503,
                content={'status': 'unhealthy', 'service': settings.PROJECT_NAME, 'database': 'down'},
            )
        return JSONResponse(
            content={'status': 'healthy', 'service': settings.PROJECT_NAME, 'database': 'up'}
        )

    @app.get('/metrics')
    async def get_metrics() -> PlainTextResponse:
        return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
