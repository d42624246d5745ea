"""
Movie booking API process.

Serves HTTP and, in the same event loop, runs the durable job runner that
releases expired seat holds, sends ticket emails, sweeps show reminders
and fans out new-show alerts.

    uvicorn src.main:app --host 0.0.0.0 --port 8000
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse
import uvicorn

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import create_db_and_tables, dispose_engine, get_engine
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    Logger.base.info(f'🚀 [{settings.SERVICE_NAME}] Starting up...')

    tracing = TracingConfig(service_name=settings.SERVICE_NAME)
    tracing.setup()
    container.wire(modules=WIRE_MODULES)

    tracing.instrument_sqlalchemy(engine=get_engine())
    await create_db_and_tables()
    Logger.base.info(f'🗄️  [{settings.SERVICE_NAME}] Database ready ({get_engine().url.get_backend_name()})')

    async with anyio.create_task_group() as tg:
        if settings.JOB_RUNNER_ENABLED:
            await container.job_runner().start(task_group=tg)
        else:
            Logger.base.warning(f'⏸️  [{settings.SERVICE_NAME}] Job runner disabled, holds will not expire')

        Logger.base.info(f'✅ [{settings.SERVICE_NAME}] Ready to serve requests')
        yield

        Logger.base.info(f'🛑 [{settings.SERVICE_NAME}] Shutting down...')
        tg.cancel_scope.cancel()

    # Pooled upstream clients first, then the engine the runner was using
    await container.movie_catalog_client().aclose()
    await container.payment_gateway().aclose()
    await dispose_engine()

    tracing.shutdown()
    container.unwire()
    Logger.base.info(f'👋 [{settings.SERVICE_NAME}] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/', include_in_schema=False)
async def root() -> RedirectResponse:
    return RedirectResponse(url='/docs')


if __name__ == '__main__':
    uvicorn.run('src.main:app', host='0.0.0.0', port=8000)
