from datetime import datetime, timedelta
from typing import Optional

from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.catalog.app.interface.i_movie_repo import IMovieRepo
from src.service.catalog.app.interface.i_show_repo import IShowRepo
from src.service.identity.app.interface.i_user_repo import IUserRepo
from src.service.notification.app.command.email_fan_out import send_all
from src.service.notification.app.interface.i_email_sender import EmailMessage, IEmailSender
from src.service.notification.domain import email_template
from src.service.notification.domain.dispatch_result import ReminderSweepResult


KIND = 'show_reminder'


class SendShowRemindersUseCase:
    """
    Periodic sweep: remind every seat holder of shows starting soon.

    The window is [now + slack, now + lead + slack). With the sweep running
    every `lead` hours, consecutive windows are contiguous and disjoint, so a
    show is covered by exactly one sweep. The job passes the start of its
    interval bucket as `now`, which keeps a late or retried sweep on its own
    window.
    """

    def __init__(
        self,
        *,
        show_repo: IShowRepo,
        movie_repo: IMovieRepo,
        booking_query_repo: IBookingQueryRepo,
        user_repo: IUserRepo,
        email_sender: IEmailSender,
        lead_hours: Optional[int] = None,
        slack_minutes: Optional[int] = None,
    ) -> None:
        self.show_repo = show_repo
        self.movie_repo = movie_repo
        self.booking_query_repo = booking_query_repo
        self.user_repo = user_repo
        self.email_sender = email_sender
        self.lead = timedelta(hours=lead_hours or settings.REMINDER_LEAD_HOURS)
        self.slack = timedelta(
            minutes=settings.REMINDER_SLACK_MINUTES if slack_minutes is None else slack_minutes
        )
        self.tracer = trace.get_tracer(__name__)

    def window(self, *, now: datetime) -> tuple[datetime, datetime]:
        start = now + self.slack
        return start, start + self.lead

    @Logger.io
    async def execute(self, *, now: Optional[datetime] = None) -> ReminderSweepResult:
        with self.tracer.start_as_current_span('use_case.send_show_reminders') as span:
            start, end = self.window(now=now or utc_now())
            # A late sweep may reach back past shows that have already started
            started_before = utc_now()
            shows = [
                show
                for show in await self.show_repo.list_between(start=start, end=end)
                if show.show_date_time > started_before
            ]
            holders = await self.booking_query_repo.get_holders_by_show(
                show_ids=[show.id for show in shows]
            )
            movies = await self.movie_repo.get_by_ids(
                movie_ids=list(dict.fromkeys(show.movie_id for show in shows))
            )
            users = {
                user.id: user
                for user in await self.user_repo.get_by_ids(
                    user_ids=list({uid for ids in holders.values() for uid in ids})
                )
            }

            messages = []
            for show in shows:
                movie = movies.get(show.movie_id)
                if not movie:
                    continue
                for user_id in holders.get(show.id, []):
                    user = users.get(user_id)
                    if not user:
                        continue
                    messages.append(
                        EmailMessage(
                            to=user.email,
                            subject=email_template.show_reminder_subject(movie_title=movie.title),
                            html=email_template.render_show_reminder(
                                user_name=user.name,
                                movie_title=movie.title,
                                show_date_time=show.show_date_time,
                            ),
                        )
                    )

            if not messages:
                Logger.base.info(
                    f'⏰ [REMINDERS] No reminders to send for {start.isoformat()} - {end.isoformat()}'
                )
                return ReminderSweepResult(shows=len(shows))

            sent, failed = await send_all(
                email_sender=self.email_sender, messages=messages, kind=KIND
            )
            span.set_attribute('reminder.sent', sent)
            span.set_attribute('reminder.failed', failed)
            Logger.base.info(
                f'⏰ [REMINDERS] {sent} reminder(s) sent successfully, {failed} failed'
            )
            return ReminderSweepResult(sent=sent, failed=failed, shows=len(shows))
