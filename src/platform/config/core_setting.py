from pathlib import Path
from typing import List

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Movie Booking System'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # Security (JWTs are issued by the identity provider, verified here)
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ALGORITHM: str = 'HS256'
    ADMIN_ROLE: str = 'admin'
    IDENTITY_WEBHOOK_SECRET: SecretStr = SecretStr('test_identity_webhook_secret')

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'movie_booking'
    POSTGRES_PORT: int = 5432
    DATABASE_URL: str = ''  # Full override, e.g. sqlite+aiosqlite:///:memory: in tests

    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800
    DB_POOL_PRE_PING: bool = True

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        password = self.POSTGRES_PASSWORD.get_secret_value()
        return f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'

    # TMDB movie catalog
    TMDB_BASE_URL: str = 'https://api.themoviedb.org/3'
    TMDB_API_KEY: SecretStr = SecretStr('')
    TMDB_TIMEOUT_SECONDS: float = 20.0
    TMDB_MAX_ATTEMPTS: int = 6  # 1 call + 5 retries
    TMDB_RETRY_BASE_DELAY: float = 1.5
    TMDB_RETRY_MAX_DELAY: float = 30.0

    # Stripe Checkout
    STRIPE_BASE_URL: str = 'https://api.stripe.com/v1'
    STRIPE_SECRET_KEY: SecretStr = SecretStr('')
    STRIPE_WEBHOOK_SECRET: SecretStr = SecretStr('test_stripe_webhook_secret')
    STRIPE_WEBHOOK_TOLERANCE_SECONDS: int = 300
    PAYMENT_CURRENCY: str = 'usd'
    PAYMENT_TIMEOUT_SECONDS: float = 15.0
    PAYMENT_MAX_ATTEMPTS: int = 3
    PAYMENT_RETRY_BASE_DELAY: float = 0.5

    # Seat hold: drives both the checkout expiry and the reconciliation due time.
    # Stripe rejects checkout expiries under 30 minutes from when the request
    # arrives; the extra minutes cover the DB write and request retries.
    BOOKING_HOLD_MINUTES: int = Field(default=35, ge=32)
    # Checkout return URLs fall back to this when the request carries no Origin header
    FRONTEND_URL: str = 'http://localhost:5173'

    # SMTP (empty host -> log-only sender)
    SMTP_HOST: str = ''
    SMTP_PORT: int = 587
    SMTP_USER: str = ''
    SMTP_PASSWORD: SecretStr = SecretStr('')
    SMTP_START_TLS: bool = True
    SENDER_EMAIL: str = 'no-reply@showza.local'
    CINEMA_NAME: str = 'ShowZa Cinema'
    BRAND_NAME: str = 'ShowZa'
    DISPLAY_TIMEZONE: str = 'Asia/Kolkata'

    # Durable job runner
    JOB_RUNNER_ENABLED: bool = True
    JOB_POLL_INTERVAL_SECONDS: float = 1.0
    JOB_BATCH_SIZE: int = 20
    JOB_LEASE_SECONDS: int = 120
    JOB_MAX_ATTEMPTS: int = 5
    JOB_RETRY_BASE_DELAY_SECONDS: float = 5.0

    # Reminder sweep
    REMINDER_INTERVAL_HOURS: int = 8
    REMINDER_LEAD_HOURS: int = 8
    REMINDER_SLACK_MINUTES: int = 10

    # Logging (stdout always; rotating files when LOG_TO_FILE)
    SERVICE_NAME: str = 'movie-booking'
    DEPLOY_ENV: str = 'local_dev'
    LOG_LEVEL: str = ''  # empty -> DEBUG when DEBUG else INFO
    LOG_TO_FILE: bool = True
    LOG_DIR: str = str(_PROJECT_ROOT / 'logs')

    # Tracing
    OTEL_EXPORTER_OTLP_ENDPOINT: str = ''
    OTEL_CONSOLE_EXPORT: bool = False


settings = Settings()  # type: ignore
