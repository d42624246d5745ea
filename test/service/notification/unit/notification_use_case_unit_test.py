"""
Unit tests for the notification use cases and job handler

Test Coverage:
1. send_all: one failing recipient never aborts the others
2. Reminder sweep: window, one email per holder, partial failure counts,
   late sweeps keep their bucket window and skip started shows
3. New-show alert: one email per user
4. Booking confirmation: skip unpaid, inline QR ticket, send failure re-raised
5. Job handler payload validation, reminder sweep anchored on its bucket start
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
import uuid

import orjson
import pytest

from src.platform.scheduler.scheduled_job import BUCKET_START_PAYLOAD_KEY, JobKind
from src.platform.types.utc_datetime import utc_now
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.catalog.domain.entity.movie_entity import Movie
from src.service.catalog.domain.entity.show_entity import Show
from src.service.identity.domain.entity.user_entity import User
from src.service.notification.app.command.email_fan_out import send_all
from src.service.notification.app.command.send_booking_confirmation_use_case import (
    SendBookingConfirmationUseCase,
)
from src.service.notification.app.command.send_new_show_notifications_use_case import (
    SendNewShowNotificationsUseCase,
)
from src.service.notification.app.command.send_show_reminders_use_case import (
    SendShowRemindersUseCase,
)
from src.service.notification.app.interface.i_email_sender import EmailMessage
from src.service.notification.domain.dispatch_result import ReminderSweepResult
from src.service.notification.driven_adapter.email.logging_email_sender import LoggingEmailSender
from src.service.notification.driving_adapter.job_handler.notification_job_handler import (
    NotificationJobHandler,
)


pytestmark = pytest.mark.unit

NOW = datetime(2030, 5, 1, 0, 0, tzinfo=timezone.utc)


def _failing_sender(*bad_addresses: str) -> AsyncMock:
    sender = AsyncMock()

    async def send(*, message: EmailMessage) -> None:
        if message.to in bad_addresses:
            raise ConnectionError('mailbox unavailable')

    sender.send.side_effect = send
    return sender


class TestSendAll:
    @pytest.mark.asyncio
    async def test_failures_are_isolated(self):
        sender = _failing_sender('bad@example.com')
        messages = [
            EmailMessage(to=address, subject='s', html='h')
            for address in ('a@example.com', 'bad@example.com', 'c@example.com')
        ]

        sent, failed = await send_all(email_sender=sender, messages=messages, kind='test')

        assert (sent, failed) == (2, 1)
        assert sender.send.await_count == 3

    @pytest.mark.asyncio
    async def test_nothing_to_send(self):
        assert await send_all(email_sender=AsyncMock(), messages=[], kind='test') == (0, 0)


class TestSendShowReminders:
    def setup_method(self):
        self.show = Show(
            id=uuid.uuid4(),
            movie_id=550,
            show_date_time=NOW + timedelta(hours=8, minutes=5),
            show_price=Decimal('10.00'),
        )
        self.show_repo = AsyncMock()
        self.show_repo.list_between.return_value = [self.show]
        self.movie_repo = AsyncMock()
        self.movie_repo.get_by_ids.return_value = {550: Movie(id=550, title='Fight Club')}
        self.booking_query_repo = AsyncMock()
        self.booking_query_repo.get_holders_by_show.return_value = {self.show.id: ['u1', 'u2']}
        self.user_repo = AsyncMock()
        self.user_repo.get_by_ids.return_value = [
            User(id='u1', name='Ada', email='ada@example.com'),
            User(id='u2', name='Grace', email='grace@example.com'),
        ]

    def _use_case(self, email_sender) -> SendShowRemindersUseCase:
        return SendShowRemindersUseCase(
            show_repo=self.show_repo,
            movie_repo=self.movie_repo,
            booking_query_repo=self.booking_query_repo,
            user_repo=self.user_repo,
            email_sender=email_sender,
            lead_hours=8,
            slack_minutes=10,
        )

    def test_window(self):
        start, end = self._use_case(AsyncMock()).window(now=NOW)

        assert start == NOW + timedelta(minutes=10)
        assert end == NOW + timedelta(hours=8, minutes=10)

    @pytest.mark.asyncio
    async def test_reminds_every_holder(self):
        # Given
        sender = LoggingEmailSender()

        # When
        result = await self._use_case(sender).execute(now=NOW)

        # Then
        assert (result.sent, result.failed, result.shows) == (2, 0, 1)
        assert sorted(m.to for m in sender.sent_emails) == ['ada@example.com', 'grace@example.com']
        assert all(m.subject == 'Reminder: Your movie Fight Club is starting soon!' for m in sender.sent_emails)
        self.show_repo.list_between.assert_awaited_once_with(
            start=NOW + timedelta(minutes=10), end=NOW + timedelta(hours=8, minutes=10)
        )

    @pytest.mark.asyncio
    async def test_one_failed_recipient(self):
        sender = _failing_sender('grace@example.com')

        result = await self._use_case(sender).execute(now=NOW)

        assert (result.sent, result.failed) == (1, 1)
        assert sender.send.await_count == 2

    @pytest.mark.asyncio
    async def test_no_shows_in_window(self):
        self.show_repo.list_between.return_value = []
        self.booking_query_repo.get_holders_by_show.return_value = {}
        self.movie_repo.get_by_ids.return_value = {}
        self.user_repo.get_by_ids.return_value = []
        sender = AsyncMock()

        result = await self._use_case(sender).execute(now=NOW)

        assert result.total == 0
        sender.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_late_sweep_skips_shows_already_started(self):
        # Given: a sweep for a past bucket, one show already running
        bucket_start = utc_now() - timedelta(hours=2)
        started = Show(
            id=uuid.uuid4(),
            movie_id=550,
            show_date_time=utc_now() - timedelta(minutes=30),
            show_price=Decimal('10.00'),
        )
        upcoming = Show(
            id=uuid.uuid4(),
            movie_id=550,
            show_date_time=utc_now() + timedelta(hours=3),
            show_price=Decimal('10.00'),
        )
        self.show_repo.list_between.return_value = [started, upcoming]
        self.booking_query_repo.get_holders_by_show.return_value = {upcoming.id: ['u1']}
        sender = LoggingEmailSender()

        # When
        result = await self._use_case(sender).execute(now=bucket_start)

        # Then: the window stays anchored on the bucket, only the upcoming show is reminded
        self.show_repo.list_between.assert_awaited_once_with(
            start=bucket_start + timedelta(minutes=10),
            end=bucket_start + timedelta(hours=8, minutes=10),
        )
        self.booking_query_repo.get_holders_by_show.assert_awaited_once_with(show_ids=[upcoming.id])
        assert (result.sent, result.shows) == (1, 1)
        assert [m.to for m in sender.sent_emails] == ['ada@example.com']


class TestSendNewShowNotifications:
    @pytest.mark.asyncio
    async def test_every_user_is_notified(self):
        user_repo = AsyncMock()
        user_repo.list_all.return_value = [
            User(id='u1', name='Ada', email='ada@example.com'),
            User(id='u2', name='Grace', email='grace@example.com'),
        ]
        sender = LoggingEmailSender()

        result = await SendNewShowNotificationsUseCase(
            user_repo=user_repo, email_sender=sender
        ).execute(movie_title='Dune')

        assert (result.sent, result.failed, result.movie_title) == (2, 0, 'Dune')
        assert {m.subject for m in sender.sent_emails} == {'New Show Alert: Dune is now playing!'}


class TestSendBookingConfirmation:
    def setup_method(self):
        self.show = Show(
            id=uuid.uuid4(),
            movie_id=550,
            show_date_time=NOW + timedelta(days=1),
            show_price=Decimal('10.00'),
        )
        self.booking = Booking.create(
            user_id='u1',
            show_id=self.show.id,
            selected_seats=['A1', 'A2'],
            show_price=Decimal('10.00'),
        )
        self.booking.is_paid = True
        self.booking_query_repo = AsyncMock()
        self.booking_query_repo.get_by_id.return_value = self.booking
        self.show_repo = AsyncMock()
        self.show_repo.get_by_id.return_value = self.show
        self.movie_repo = AsyncMock()
        self.movie_repo.get_by_id.return_value = Movie(id=550, title='Fight Club')
        self.user_repo = AsyncMock()
        self.user_repo.get_by_id.return_value = User(id='u1', name='Ada', email='ada@example.com')
        self.qr_code_generator = MagicMock()
        self.qr_code_generator.generate_png.return_value = b'\x89PNGqr'

    def _use_case(self, email_sender) -> SendBookingConfirmationUseCase:
        return SendBookingConfirmationUseCase(
            booking_query_repo=self.booking_query_repo,
            show_repo=self.show_repo,
            movie_repo=self.movie_repo,
            user_repo=self.user_repo,
            email_sender=email_sender,
            qr_code_generator=self.qr_code_generator,
        )

    @pytest.mark.asyncio
    async def test_sends_ticket_with_inline_qr(self):
        # Given
        sender = LoggingEmailSender()

        # When
        assert await self._use_case(sender).execute(booking_id=self.booking.id) is True

        # Then
        (message,) = sender.sent_emails
        assert message.to == 'ada@example.com'
        assert message.subject == 'Booking Confirmation : Fight Club booked!'
        (image,) = message.inline_images
        assert image.cid == 'qrcode'
        assert image.content == b'\x89PNGqr'

        qr_payload = orjson.loads(self.qr_code_generator.generate_png.call_args.kwargs['data'])
        assert qr_payload['bookingId'] == str(self.booking.id)
        assert qr_payload['seats'] == ['A1', 'A2']
        assert qr_payload['amount'] == 20.0
        assert qr_payload['verificationCode'] == self.booking.verification_code

    @pytest.mark.asyncio
    async def test_unpaid_booking_is_skipped(self):
        self.booking.is_paid = False
        sender = AsyncMock()

        assert await self._use_case(sender).execute(booking_id=self.booking.id) is False
        sender.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_user_is_skipped(self):
        self.user_repo.get_by_id.return_value = None
        sender = AsyncMock()

        assert await self._use_case(sender).execute(booking_id=self.booking.id) is False
        sender.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_send_failure_propagates_for_retry(self):
        sender = _failing_sender('ada@example.com')

        with pytest.raises(ConnectionError):
            await self._use_case(sender).execute(booking_id=self.booking.id)


class TestNotificationJobHandler:
    def setup_method(self):
        self.confirmation = AsyncMock()
        self.reminders = AsyncMock()
        self.new_show = AsyncMock()
        self.handlers = NotificationJobHandler(
            send_booking_confirmation_use_case=self.confirmation,
            send_show_reminders_use_case=self.reminders,
            send_new_show_notifications_use_case=self.new_show,
        ).get_kind_handlers()

    def test_kinds(self):
        assert set(self.handlers) == {
            JobKind.BOOKING_CONFIRMED,
            JobKind.SHOW_REMINDERS,
            JobKind.NEW_SHOW,
        }

    @pytest.mark.asyncio
    async def test_booking_confirmed_parses_id(self):
        booking_id = uuid.uuid4()

        await self.handlers[JobKind.BOOKING_CONFIRMED]({'booking_id': str(booking_id)})

        self.confirmation.execute.assert_awaited_once_with(booking_id=booking_id)

    @pytest.mark.asyncio
    async def test_reminder_sweep_uses_bucket_start(self):
        self.reminders.execute.return_value = ReminderSweepResult(sent=3, failed=1, shows=2)

        result = await self.handlers[JobKind.SHOW_REMINDERS](
            {BUCKET_START_PAYLOAD_KEY: '2030-05-01T08:00:00+00:00'}
        )

        assert result == {'sent': 3, 'failed': 1}
        self.reminders.execute.assert_awaited_once_with(
            now=datetime(2030, 5, 1, 8, 0, tzinfo=timezone.utc)
        )

    @pytest.mark.asyncio
    async def test_reminder_sweep_without_bucket_uses_current_time(self):
        self.reminders.execute.return_value = ReminderSweepResult()

        await self.handlers[JobKind.SHOW_REMINDERS]({})

        self.reminders.execute.assert_awaited_once_with(now=None)

    @pytest.mark.asyncio
    async def test_missing_fields(self):
        with pytest.raises(ValueError, match='booking_id'):
            await self.handlers[JobKind.BOOKING_CONFIRMED]({})
        with pytest.raises(ValueError, match='movie_title'):
            await self.handlers[JobKind.NEW_SHOW]({'movie_id': 550})
