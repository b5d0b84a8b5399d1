"""FastAPI route handlers (ASGI host binding)."""

import asyncio
from collections.abc import AsyncIterator, Awaitable

from fastapi import Request, Response
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from core.exceptions import ProxyError
from core.headers import encode_header_value
from core.models import ProxyRequest, ProxyResponse
from core.protocols import RequestLogger

DISCONNECT_POLL_INTERVAL = 0.1
CLIENT_CLOSED_REQUEST = 499


async def parse_request(request: Request) -> ProxyRequest:
    """Convert a Starlette request into a ProxyRequest."""
    body = await request.body()
    return ProxyRequest.from_pairs(
        request.method,
        request.query_params.get("target"),
        request.headers.items(),
        body or None,
    )


def to_native_response(proxy_response: ProxyResponse, logger: RequestLogger) -> Response:
    """Convert a ProxyResponse into a FastAPI response, streaming upstream bodies."""
    if proxy_response.stream is None:
        response = Response(content=proxy_response.body, status_code=proxy_response.status_code)
    else:
        response = StreamingResponse(
            _stream_body(proxy_response, logger),
            status_code=proxy_response.status_code,
            background=BackgroundTask(proxy_response.aclose),
        )
    response.raw_headers.extend(
        (name.lower().encode("latin-1"), encode_header_value(value))
        for name, value in proxy_response.headers
    )
    return response


async def _stream_body(proxy_response: ProxyResponse, logger: RequestLogger) -> AsyncIterator[bytes]:
    """Relay the upstream body; a failure after headers were sent aborts the connection."""
    try:
        async for chunk in proxy_response.iter_body():
            yield chunk
    except ProxyError as e:
        logger.log_error(e.kind.value, e.status_code, e.details or e.message)
        raise


async def _wait_for_disconnect(request: Request, interval: float) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(interval)


async def run_until_disconnected(
    request: Request,
    pending: Awaitable[ProxyResponse],
    logger: RequestLogger,
    interval: float = DISCONNECT_POLL_INTERVAL,
) -> ProxyResponse:
    """Await the pipeline, cancelling the outbound call if the client goes away."""
    task = asyncio.ensure_future(pending)
    watcher = asyncio.ensure_future(_wait_for_disconnect(request, interval))
    try:
        await asyncio.wait({task, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        watcher.cancel()
        if not task.done() and not watcher.done():
            task.cancel()

    if task.done() and not task.cancelled():
        return task.result()

    task.cancel()
    try:
        late = await task
    except asyncio.CancelledError:
        late = None
    if late is not None:
        await late.aclose()
    logger.log_error("ClientDisconnected", CLIENT_CLOSED_REQUEST, "Client disconnected before upstream responded")
    return ProxyResponse(status_code=CLIENT_CLOSED_REQUEST, headers=[])


async def handle_proxy(request: Request, logger: RequestLogger) -> Response:
    """Handle any method on `/` by relaying to the `target` query parameter."""
    proxy_request = await parse_request(request)
    service = request.app.state.proxy_service
    proxy_response = await run_until_disconnected(request, service.handle(proxy_request), logger)
    return to_native_response(proxy_response, logger)
