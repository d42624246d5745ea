from prometheus_client import Counter, Histogram


class BookingMetrics:
    """
    Movie Booking Core Metrics Collector

    Tracks seat reservation outcomes, the reconciliation job runner and calls
    to upstream services (TMDB, payment gateway, SMTP).
    """

    def __init__(self):
        # ========== Seat Reservation Business Metrics ==========
        self.booking_requests = Counter(
            'booking_requests_total',
            'Total booking requests',
            ['result'],  # result: created/conflict/rejected
        )

        self.booking_duration = Histogram(
            'booking_duration_seconds',
            'Booking request processing time',
            ['result'],
            buckets=[0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0],
        )

        self.booking_releases = Counter(
            'booking_releases_total',
            'Unpaid booking reconciliation outcomes',
            ['outcome'],  # outcome: released/already_paid/confirmed_late/not_found
        )

        self.payments_confirmed = Counter(
            'booking_payments_confirmed_total', 'Bookings marked paid', ['source']
        )

        # ========== Job Runner Metrics ==========
        self.jobs_processed = Counter(
            'scheduled_jobs_processed_total',
            'Scheduled jobs processed',
            ['kind', 'result'],  # result: done/retry/failed
        )

        self.job_duration = Histogram(
            'scheduled_job_duration_seconds',
            'Scheduled job handler duration',
            ['kind'],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
        )

        # ========== Upstream Call Metrics ==========
        self.upstream_requests = Counter(
            'upstream_requests_total',
            'Outbound calls to third-party services',
            ['service', 'result'],  # service: tmdb/stripe/smtp
        )

        self.upstream_retries = Counter(
            'upstream_retries_total', 'Retried outbound calls', ['service']
        )

        self.notifications_sent = Counter(
            'notifications_sent_total',
            'Emails handed to the email sender',
            ['kind', 'result'],  # kind: confirmation/reminder/new_show
        )

    # ========== Helper Methods ==========

    def record_booking(self, *, result: str, duration: float):
        self.booking_requests.labels(result=result).inc()
        self.booking_duration.labels(result=result).observe(duration)

    def record_release(self, *, outcome: str):
        self.booking_releases.labels(outcome=outcome).inc()

    def record_payment_confirmed(self, *, source: str):
        self.payments_confirmed.labels(source=source).inc()

    def record_job(self, *, kind: str, result: str, duration: float):
        self.jobs_processed.labels(kind=kind, result=result).inc()
        self.job_duration.labels(kind=kind).observe(duration)

    def record_upstream(self, *, service: str, result: str):
        self.upstream_requests.labels(service=service, result=result).inc()

    def record_upstream_retry(self, *, service: str):
        self.upstream_retries.labels(service=service).inc()

    def record_notification(self, *, kind: str, result: str):
        self.notifications_sent.labels(kind=kind, result=result).inc()


# Global metrics instance
metrics = BookingMetrics()
