"""
Loguru sinks and shared state for the @Logger.io decorator.

One bound logger is configured at import time: stdout always, plus hourly
rotated files when LOG_TO_FILE is on. Standard-library loggers (uvicorn,
sqlalchemy, httpx, aiosmtplib) are routed into the same sinks.

Every line carries the service context and, when a span is active, the
OpenTelemetry trace id, so an HTTP request and the jobs it schedules can be
followed across log lines.
"""

from contextvars import ContextVar
from datetime import datetime, timezone
from enum import StrEnum
import logging
import os
import sys
from typing import TYPE_CHECKING, Any

from loguru import logger as loguru_logger
from opentelemetry import trace


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger, Record

from src.platform.config.core_setting import settings


# Tests redirect files into test/test_log
LOG_DIR = os.environ.get('TEST_LOG_DIR') or settings.LOG_DIR

SENSITIVE_KEYWORDS = {
    'password',
    'token',
    'secret',
    'authorization',
    'stripe_signature',
    'card_number',
}

MAX_LOG_CONTENT_LENGTH = 500

chain_start_time_var: ContextVar[float] = ContextVar('chain_start_time_var', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth_var', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    TRACE_ID = 'trace_id'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'


def service_context() -> str:
    """`service@env:instance`, distinguishes API replicas sharing one sink."""
    instance = os.getenv('HOSTNAME') or str(os.getpid())
    return f'{settings.SERVICE_NAME}@{settings.DEPLOY_ENV}:{instance}'


def _current_trace_id() -> str:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return '-'
    return format(span_context.trace_id, '032x')


def _patch_trace_id(record: 'Record') -> None:
    record['extra'][ExtraField.TRACE_ID] = _current_trace_id()


def _default_extra() -> dict[str, Any]:
    return {
        ExtraField.SERVICE_CONTEXT: service_context(),
        ExtraField.TRACE_ID: '-',
        ExtraField.CHAIN_START_TIME: '',
        ExtraField.CALL_TARGET: '',
    }


class InterceptHandler(logging.Handler):
    """Route standard logging records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        custom_logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


io_log_format = ' | '.join(
    (
        f'<c>{{extra[{ExtraField.SERVICE_CONTEXT}]}}</>',
        '<lvl>{level:<8}</>',
        f'<m>{{extra[{ExtraField.TRACE_ID}]:.8}}</>',
        f'<c>{{file}}::{{function}}:{{line}}</>=><y>{{extra[{ExtraField.CALL_TARGET}]}}</>',
        '{message}',
        '<lk>{elapsed}</>',
        f'<lk>{{extra[{ExtraField.CHAIN_START_TIME}]:<18}}</>',
    )
)

min_log_level = settings.LOG_LEVEL.upper() or ('DEBUG' if settings.DEBUG else 'INFO')


def _log_file_path() -> str:
    prefix = 'test_' if os.environ.get('TEST_LOG_DIR') else ''
    return f'{LOG_DIR}/{prefix}{datetime.now(timezone.utc).strftime("%Y-%m-%d_%H")}.log'


loguru_logger.remove()
custom_logger: 'LoguruLogger' = loguru_logger.patch(_patch_trace_id).bind(**_default_extra())

custom_logger.add(sys.stdout, format=io_log_format, level=min_log_level, enqueue=True)

if settings.LOG_TO_FILE:
    custom_logger.add(
        _log_file_path(),
        format=io_log_format,
        rotation='1 hour',
        retention='7 days',
        compression='gz',
        enqueue=True,
        level=min_log_level,
    )

logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
