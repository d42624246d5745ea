class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class AuthenticationError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


# ============================ Upstream (catalog / payment) ============================


class UpstreamError(CustomBaseError):
    """Generic upstream failure; message is always user-facing, never the raw upstream body."""

    retryable: bool = False

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message, status_code)


class UpstreamUnavailableError(UpstreamError):
    retryable = True

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)


class UpstreamRejectedError(UpstreamError):
    """Bad credentials or configuration on our side - never retried."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 502)


class RateLimitedError(UpstreamError):
    retryable = True

    def __init__(self, message: str) -> None:
        super().__init__(message, 429)
