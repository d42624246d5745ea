from email.message import EmailMessage as MimeMessage
from typing import Optional

import aiosmtplib

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.notification.app.interface.i_email_sender import EmailMessage, IEmailSender


class SmtpEmailSender(IEmailSender):
    def __init__(
        self,
        *,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        start_tls: Optional[bool] = None,
    ) -> None:
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.username = username if username is not None else settings.SMTP_USER
        self.password = (
            password if password is not None else settings.SMTP_PASSWORD.get_secret_value()
        )
        self.sender = sender or settings.SENDER_EMAIL
        self.start_tls = settings.SMTP_START_TLS if start_tls is None else start_tls

    def build_mime(self, *, message: EmailMessage) -> MimeMessage:
        mime = MimeMessage()
        mime['From'] = self.sender
        mime['To'] = message.to
        mime['Subject'] = message.subject
        mime.set_content('Please view this email in an HTML-capable client.')
        mime.add_alternative(message.html, subtype='html')

        if message.inline_images:
            html_part = mime.get_body(preferencelist=('html',))
            assert html_part is not None
            for image in message.inline_images:
                html_part.add_related(
                    image.content,
                    maintype='image',
                    subtype=image.subtype,
                    cid=f'<{image.cid}>',
                    filename=image.filename,
                    disposition='inline',
                )
        return mime

    @Logger.io
    async def send(self, *, message: EmailMessage) -> None:
        await aiosmtplib.send(
            self.build_mime(message=message),
            hostname=self.host,
            port=self.port,
            username=self.username or None,
            password=self.password or None,
            start_tls=self.start_tls,
        )
        Logger.base.info(f'📧 [SMTP] Sent "{message.subject}" to {message.to}')
