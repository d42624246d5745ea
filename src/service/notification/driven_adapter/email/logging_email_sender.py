"""Email sender for local runs and tests: logs instead of delivering."""

from typing import List

from src.platform.logging.loguru_io import Logger
from src.service.notification.app.interface.i_email_sender import EmailMessage, IEmailSender


class LoggingEmailSender(IEmailSender):
    def __init__(self) -> None:
        self.sent_emails: List[EmailMessage] = []  # inspected by tests

    @Logger.io
    async def send(self, *, message: EmailMessage) -> None:
        self.sent_emails.append(message)
        images = ', '.join(image.filename for image in message.inline_images) or 'none'
        Logger.base.info(
            f'📧 [MOCK EMAIL] To: {message.to} | Subject: {message.subject} | Inline images: {images}'
        )
