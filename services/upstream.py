"""HTTP forwarding to the caller-specified target."""

from collections.abc import AsyncIterator

import httpx

from core.config import Config
from core.exceptions import UpstreamFailureError
from core.headers import encode_header_value
from core.models import OutboundRequest


def build_http_client(
    config: Config,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the pooled client used for all outbound requests."""
    limits = httpx.Limits(
        max_connections=config.limits.max_connections,
        max_keepalive_connections=config.limits.max_keepalive_connections,
    )
    return httpx.AsyncClient(
        timeout=config.upstream.timeout,
        limits=limits,
        follow_redirects=True,
        max_redirects=config.upstream.max_redirects,
        transport=transport,
    )


def describe_error(error: Exception) -> str:
    """Return the transport error text, falling back to the exception type."""
    return str(error) or type(error).__name__


class UpstreamResponse:
    """Streamed upstream response; the body is read lazily as raw bytes."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> list[tuple[str, str]]:
        return list(self._response.headers.multi_items())

    async def iter_raw(self) -> AsyncIterator[bytes]:
        """Yield the body exactly as received (no content-encoding decoding)."""
        try:
            async for chunk in self._response.aiter_raw():
                yield chunk
        except httpx.RequestError as e:
            raise UpstreamFailureError(describe_error(e)) from e

    async def aclose(self) -> None:
        await self._response.aclose()


class UpstreamClient:
    """Issue exactly one outbound request per proxied call, following redirects."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def forward(self, outbound: OutboundRequest) -> UpstreamResponse:
        """Send the request and return once upstream headers have arrived."""
        headers = [
            (encode_header_value(name), encode_header_value(value))
            for name, value in outbound.headers.items()
        ]
        try:
            request = self._client.build_request(
                outbound.method,
                outbound.target.url,
                headers=headers,
                content=outbound.body,
            )
            response = await self._client.send(request, stream=True, follow_redirects=True)
        except httpx.RequestError as e:
            raise UpstreamFailureError(describe_error(e)) from e
        return UpstreamResponse(response)
