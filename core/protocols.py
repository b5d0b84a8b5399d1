"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard, FileLogger)."""

    def log_request(
        self,
        method: str,
        target: str,
        headers: dict[str, str],
        *,
        mode: str,
    ) -> None: ...
    def log_response(self, method: str, target: str, status: int) -> None: ...
    def log_preflight(self, full: bool) -> None: ...
    def log_error(self, kind: str, status: int, message: str) -> None: ...
