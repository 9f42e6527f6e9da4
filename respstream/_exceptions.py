"""Typed error hierarchy for HTTP failures and stream decoding."""

from __future__ import annotations


class RespStreamError(Exception):
    """Base exception for all respstream errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        request_id: str | None = None,
        method: str | None = None,
        path: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.request_id = request_id
        self.method = method
        self.path = path


class AuthenticationError(RespStreamError):
    """401: invalid or missing API key."""


class PermissionDeniedError(RespStreamError):
    """403: insufficient permissions."""


class NotFoundError(RespStreamError):
    """404: resource does not exist."""


class ConflictError(RespStreamError):
    """409: resource conflicts with current state."""


class ValidationError(RespStreamError):
    """400/422: invalid request parameters."""


class RateLimitError(RespStreamError):
    """429: too many requests."""


class APIError(RespStreamError):
    """500+ or unexpected server-side error."""


class DecodeError(RespStreamError):
    """A payload could not be decoded into a typed record.

    Raised per event; a stream keeps going after one of these.
    """

    def __init__(self, message: str, *, payload: str | None = None, cause: Exception | None = None):
        super().__init__(message)
        self.payload = payload
        self.cause = cause


class TransportError(RespStreamError):
    """The underlying connection failed. Fatal to the stream it happened on."""

    def __init__(self, message: str, *, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class FrameTooLargeError(TransportError):
    """A single frame grew past the configured buffer limit.

    ``frames`` holds the frames completed by the same chunk, which are still
    deliverable.
    """

    def __init__(self, message: str, *, frames: list[str] | None = None):
        super().__init__(message)
        self.frames = frames or []


# Map HTTP status codes to exception classes.
STATUS_MAP: dict[int, type[RespStreamError]] = {
    400: ValidationError,
    401: AuthenticationError,
    403: PermissionDeniedError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
    429: RateLimitError,
}
