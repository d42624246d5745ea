from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.identity.app.interface.i_user_repo import IUserRepo
from src.service.notification.app.command.email_fan_out import send_all
from src.service.notification.app.interface.i_email_sender import EmailMessage, IEmailSender
from src.service.notification.domain import email_template
from src.service.notification.domain.dispatch_result import NewShowAlertResult


KIND = 'new_show'


class SendNewShowNotificationsUseCase:
    def __init__(self, *, user_repo: IUserRepo, email_sender: IEmailSender) -> None:
        self.user_repo = user_repo
        self.email_sender = email_sender
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def execute(self, *, movie_title: str) -> NewShowAlertResult:
        """Tell every known user about new shows of `movie_title`."""
        with self.tracer.start_as_current_span(
            'use_case.send_new_show_notifications', attributes={'movie.title': movie_title}
        ):
            users = await self.user_repo.list_all()
            messages = [
                EmailMessage(
                    to=user.email,
                    subject=email_template.new_show_subject(movie_title=movie_title),
                    html=email_template.render_new_show(user_name=user.name, movie_title=movie_title),
                )
                for user in users
            ]
            sent, failed = await send_all(
                email_sender=self.email_sender, messages=messages, kind=KIND
            )
            Logger.base.info(
                f'🆕 [NEW SHOW] Notifications sent to {sent}/{len(users)} users for new show: {movie_title}'
            )
            return NewShowAlertResult(sent=sent, failed=failed, movie_title=movie_title)
