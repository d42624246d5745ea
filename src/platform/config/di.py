"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings, settings
from src.platform.database.orm_db_setting import Database
from src.platform.scheduler.job_queue_impl import JobQueueImpl
from src.platform.scheduler.job_runner import JobRunner, PeriodicTrigger, merge_kind_handlers
from src.platform.scheduler.scheduled_job import JobKind
from src.service.booking.app.command.confirm_booking_payment_use_case import (
    ConfirmBookingPaymentUseCase,
)
from src.service.booking.app.command.release_unpaid_booking_use_case import (
    ReleaseUnpaidBookingUseCase,
)
from src.service.booking.driven_adapter.payment.stripe_payment_gateway import StripePaymentGateway
from src.service.booking.driven_adapter.payment.stripe_webhook_verifier import (
    StripeWebhookVerifier,
)
from src.service.booking.driven_adapter.repo.booking_command_repo_impl import (
    BookingCommandRepoImpl,
)
from src.service.booking.driven_adapter.repo.booking_query_repo_impl import BookingQueryRepoImpl
from src.service.booking.driving_adapter.job_handler.booking_job_handler import BookingJobHandler
from src.service.catalog.driven_adapter.repo.movie_repo_impl import MovieRepoImpl
from src.service.catalog.driven_adapter.repo.show_repo_impl import ShowRepoImpl
from src.service.catalog.driven_adapter.tmdb.tmdb_client import TmdbClient
from src.service.identity.driven_adapter.repo.user_repo_impl import UserRepoImpl
from src.service.identity.driving_adapter.http_controller.auth.jwt_auth import JwtAuth
from src.service.notification.app.command.send_booking_confirmation_use_case import (
    SendBookingConfirmationUseCase,
)
from src.service.notification.app.command.send_new_show_notifications_use_case import (
    SendNewShowNotificationsUseCase,
)
from src.service.notification.app.command.send_show_reminders_use_case import (
    SendShowRemindersUseCase,
)
from src.service.notification.driven_adapter.email.logging_email_sender import LoggingEmailSender
from src.service.notification.driven_adapter.email.smtp_email_sender import SmtpEmailSender
from src.service.notification.driven_adapter.qr_code.qr_code_generator import QrCodeGenerator
from src.service.notification.driving_adapter.job_handler.notification_job_handler import (
    NotificationJobHandler,
)


def _email_backend() -> str:
    return 'smtp' if settings.SMTP_HOST else 'log'


def _reminder_interval_seconds() -> int:
    return settings.REMINDER_INTERVAL_HOURS * 3600


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (uses AsyncEngineManager, engine bound per event loop)
    database = providers.Singleton(Database)

    # Durable job queue (outbox writes go through the same session as the business rows)
    job_queue = providers.Singleton(JobQueueImpl, session_factory=database.provided.session)

    # Repositories (stateless - use session_factory per call)
    movie_repo = providers.Singleton(MovieRepoImpl, session_factory=database.provided.session)
    show_repo = providers.Singleton(
        ShowRepoImpl, session_factory=database.provided.session, job_queue=job_queue
    )
    booking_command_repo = providers.Singleton(
        BookingCommandRepoImpl, session_factory=database.provided.session, job_queue=job_queue
    )
    booking_query_repo = providers.Singleton(
        BookingQueryRepoImpl, session_factory=database.provided.session
    )
    user_repo = providers.Singleton(UserRepoImpl, session_factory=database.provided.session)

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)

    # Third-party clients (one pooled httpx client each, closed on shutdown)
    movie_catalog_client = providers.Singleton(TmdbClient)
    payment_gateway = providers.Singleton(StripePaymentGateway)
    stripe_webhook_verifier = providers.Singleton(StripeWebhookVerifier)

    # Notification channel (log-only when SMTP is not configured)
    email_sender = providers.Selector(
        providers.Callable(_email_backend),
        smtp=providers.Singleton(SmtpEmailSender),
        log=providers.Singleton(LoggingEmailSender),
    )
    qr_code_generator = providers.Singleton(QrCodeGenerator)

    # Use cases reached from jobs and webhooks (no FastAPI `depends`)
    confirm_booking_payment_use_case = providers.Singleton(
        ConfirmBookingPaymentUseCase, booking_command_repo=booking_command_repo
    )
    release_unpaid_booking_use_case = providers.Singleton(
        ReleaseUnpaidBookingUseCase,
        booking_command_repo=booking_command_repo,
        booking_query_repo=booking_query_repo,
        payment_gateway=payment_gateway,
        confirm_booking_payment_use_case=confirm_booking_payment_use_case,
    )
    send_booking_confirmation_use_case = providers.Singleton(
        SendBookingConfirmationUseCase,
        booking_query_repo=booking_query_repo,
        show_repo=show_repo,
        movie_repo=movie_repo,
        user_repo=user_repo,
        email_sender=email_sender,
        qr_code_generator=qr_code_generator,
    )
    send_show_reminders_use_case = providers.Singleton(
        SendShowRemindersUseCase,
        show_repo=show_repo,
        movie_repo=movie_repo,
        booking_query_repo=booking_query_repo,
        user_repo=user_repo,
        email_sender=email_sender,
    )
    send_new_show_notifications_use_case = providers.Singleton(
        SendNewShowNotificationsUseCase, user_repo=user_repo, email_sender=email_sender
    )

    # Job handlers + runner
    booking_job_handler = providers.Singleton(
        BookingJobHandler, release_unpaid_booking_use_case=release_unpaid_booking_use_case
    )
    notification_job_handler = providers.Singleton(
        NotificationJobHandler,
        send_booking_confirmation_use_case=send_booking_confirmation_use_case,
        send_show_reminders_use_case=send_show_reminders_use_case,
        send_new_show_notifications_use_case=send_new_show_notifications_use_case,
    )
    job_runner = providers.Singleton(
        JobRunner,
        job_queue=job_queue,
        handlers=providers.Callable(
            merge_kind_handlers, booking_job_handler, notification_job_handler
        ),
        periodic_triggers=providers.List(
            providers.Factory(
                PeriodicTrigger,
                kind=JobKind.SHOW_REMINDERS,
                interval_seconds=providers.Callable(_reminder_interval_seconds),
            ),
        ),
    )


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
