"""Exception hierarchy for the CORS relay."""

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a proxy failure."""

    MISSING_TARGET = "MissingTarget"
    INVALID_TARGET = "InvalidTarget"
    UPSTREAM_FAILURE = "UpstreamFailure"
    REQUEST_TOO_LARGE = "RequestTooLarge"


class ProxyError(Exception):
    """Base exception for all proxy errors.

    Attributes:
        kind: Failure category
        message: Human-readable message returned to the caller
        details: Underlying cause text (optional)
        status_code: HTTP status the error maps to
    """

    kind: ErrorKind
    status_code: int = 500

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class MissingTargetError(ProxyError):
    """Raised when the `target` query parameter is absent or empty."""

    kind = ErrorKind.MISSING_TARGET
    status_code = 400

    def __init__(self, message: str = "Target URL is required. Use `/?target=YOUR_URL`.") -> None:
        super().__init__(message)


class InvalidTargetError(ProxyError):
    """Raised when the target cannot be parsed as an absolute http(s) URL."""

    kind = ErrorKind.INVALID_TARGET
    status_code = 400

    def __init__(self, message: str = "Invalid target URL provided.") -> None:
        super().__init__(message)


class UpstreamFailureError(ProxyError):
    """Raised when the outbound request could not complete."""

    kind = ErrorKind.UPSTREAM_FAILURE
    status_code = 502

    def __init__(
        self,
        details: str,
        message: str = "Proxy failed to fetch the target URL.",
    ) -> None:
        super().__init__(message, details=details)


class RequestTooLargeError(ProxyError):
    """Request body exceeds size limit."""

    kind = ErrorKind.REQUEST_TOO_LARGE
    status_code = 413

    def __init__(self, message: str = "Request body too large") -> None:
        super().__init__(message)
