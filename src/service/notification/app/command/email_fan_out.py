"""
Independent delivery of many emails.

Each message is sent in its own task; a failure is logged and counted for
that recipient only, so one bad address never aborts the rest.
"""

from typing import Sequence

import anyio

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.notification.app.interface.i_email_sender import EmailMessage, IEmailSender


DEFAULT_CONCURRENCY = 10


async def send_all(
    *,
    email_sender: IEmailSender,
    messages: Sequence[EmailMessage],
    kind: str,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> tuple[int, int]:
    """Returns (sent, failed)."""
    limiter = anyio.CapacityLimiter(concurrency)
    counts = {'sent': 0, 'failed': 0}

    async def send_one(message: EmailMessage) -> None:
        async with limiter:
            try:
                await email_sender.send(message=message)
            except Exception as e:
                counts['failed'] += 1
                metrics.record_notification(kind=kind, result='failed')
                Logger.base.error(f'📧 [{kind.upper()}] Failed to email {message.to}: {e!r}')
                return
        counts['sent'] += 1
        metrics.record_notification(kind=kind, result='sent')

    async with anyio.create_task_group() as tg:
        for message in messages:
            tg.start_soon(send_one, message)  # pyrefly: ignore[bad-argument-type]

    return counts['sent'], counts['failed']
