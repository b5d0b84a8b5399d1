"""Request and response data types shared by the pipeline and host bindings."""

import base64
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from dataclasses import dataclass, field

from core.target import NormalizedTarget

SUPPORTED_METHODS = ("GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
BODY_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


@dataclass(frozen=True)
class ProxyRequest:
    """Inbound request as seen by the pipeline, independent of the host runtime."""

    method: str
    target: str | None
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | str | None = None
    body_is_base64: bool = False

    @classmethod
    def from_pairs(
        cls,
        method: str,
        target: str | None,
        header_pairs: Iterable[tuple[str, str]],
        body: bytes | str | None = None,
        body_is_base64: bool = False,
    ) -> "ProxyRequest":
        """Build a request from raw header pairs; later duplicates win."""
        headers: dict[str, str] = {}
        for key, value in header_pairs:
            headers[key.lower()] = value
        return cls(method.upper(), target, headers, body, body_is_base64)

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def payload(self) -> bytes | None:
        """Return the decoded body for methods that carry one."""
        if self.method not in BODY_METHODS or not self.body:
            return None
        if self.body_is_base64:
            return base64.b64decode(self.body)
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body


@dataclass(frozen=True)
class OutboundRequest:
    """Request issued to the upstream target."""

    method: str
    target: NormalizedTarget
    headers: dict[str, str]
    body: bytes | None = None


@dataclass
class ProxyResponse:
    """Response handed back to the host binding.

    Carries either a fixed `body` or an upstream `stream` of raw bytes. The
    binding decides how the bytes travel (streamed or base64-wrapped).
    """

    status_code: int
    headers: list[tuple[str, str]]
    body: bytes = b""
    stream: AsyncIterator[bytes] | None = None
    close: Callable[[], Awaitable[None]] | None = None

    def header(self, name: str) -> str | None:
        """Return the last value of a header, case-insensitively."""
        name = name.lower()
        value = None
        for key, val in self.headers:
            if key.lower() == name:
                value = val
        return value

    async def iter_body(self) -> AsyncIterator[bytes]:
        """Yield body bytes, closing the upstream response when done or cancelled."""
        if self.stream is None:
            if self.body:
                yield self.body
            return
        try:
            async for chunk in self.stream:
                yield chunk
        finally:
            await self.aclose()

    async def read(self) -> bytes:
        """Buffer the whole body."""
        return b"".join([chunk async for chunk in self.iter_body()])

    async def aclose(self) -> None:
        if self.close is not None:
            await self.close()
