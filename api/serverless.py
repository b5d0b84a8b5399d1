"""Serverless host binding for API Gateway / Netlify style events.

The event transport can only carry text, so every response body is returned
base64-encoded with `isBase64Encoded` set, whatever its content type.
"""

import asyncio
import base64
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx

from core.config import Config
from core.cors import CorsPolicy
from core.exceptions import ProxyError
from core.headers import HeaderBuilder
from core.models import ProxyRequest, ProxyResponse
from core.protocols import RequestLogger
from services.proxy_service import ProxyService
from services.upstream import UpstreamClient, build_http_client
from ui.log_utils import FileLogger

EventHandler = Callable[[dict[str, Any], Any], dict[str, Any]]

# Function platforms only allow writes under the temp directory.
SERVERLESS_LOG_ROOT = Path(tempfile.gettempdir()) / "cors-relay" / "logs"

_default_handler: EventHandler | None = None


def parse_event(event: dict[str, Any]) -> ProxyRequest:
    """Convert a v1 or v2 proxy event into a ProxyRequest."""
    method = event.get("httpMethod") or (
        event.get("requestContext", {}).get("http", {}).get("method", "GET")
    )
    params = event.get("queryStringParameters") or {}

    header_pairs: list[tuple[str, str]] = []
    for key, value in (event.get("headers") or {}).items():
        header_pairs.append((key, value))
    for key, values in (event.get("multiValueHeaders") or {}).items():
        for value in values or []:
            header_pairs.append((key, value))

    return ProxyRequest.from_pairs(
        method,
        params.get("target"),
        header_pairs,
        event.get("body"),
        bool(event.get("isBase64Encoded", False)),
    )


def to_event_response(proxy_response: ProxyResponse, body: bytes) -> dict[str, Any]:
    """Serialize a ProxyResponse; duplicated headers go to multiValueHeaders."""
    grouped: dict[str, list[str]] = {}
    for name, value in proxy_response.headers:
        if name.lower() == "content-length":
            continue
        grouped.setdefault(name, []).append(value)

    return {
        "statusCode": proxy_response.status_code,
        "headers": {name: values[-1] for name, values in grouped.items()},
        "multiValueHeaders": grouped,
        "body": base64.b64encode(body).decode("ascii"),
        "isBase64Encoded": True,
    }


async def handle_event(event: dict[str, Any], service: ProxyService) -> dict[str, Any]:
    """Run one event through the pipeline and buffer the response body."""
    proxy_response = await service.handle(parse_event(event))
    try:
        body = await proxy_response.read()
    except ProxyError as e:
        await proxy_response.aclose()
        proxy_response = service.translate_error(e)
        body = proxy_response.body
    return to_event_response(proxy_response, body)


def create_handler(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> EventHandler:
    """Create a synchronous `handler(event, context)` entry point."""
    policy = CorsPolicy.from_settings(config.cors)
    header_builder = HeaderBuilder(config.headers)

    async def _run(event: dict[str, Any]) -> dict[str, Any]:
        async with build_http_client(config, transport=transport) as client:
            service = ProxyService(
                upstream=UpstreamClient(client),
                policy=policy,
                header_builder=header_builder,
                logger=logger,
                max_body_size=config.limits.max_body_size,
            )
            return await handle_event(event, service)

    def handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
        return asyncio.run(_run(event))

    return handler


def handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    """Platform entry point, built with default settings on first invocation."""
    global _default_handler
    if _default_handler is None:
        logger = FileLogger(log_root=SERVERLESS_LOG_ROOT, write_requests=False)
        _default_handler = create_handler(Config(), logger)
    return _default_handler(event, context)
