"""Response translation: upstream header copy, CORS overlay and error bodies."""

import json
from collections.abc import Iterable

from core.cors import CorsPolicy
from core.exceptions import ProxyError
from core.headers import HOP_BY_HOP_HEADERS
from core.models import ProxyResponse


def build_response_headers(
    upstream_headers: Iterable[tuple[str, str]],
    policy: CorsPolicy,
) -> list[tuple[str, str]]:
    """Copy upstream headers (duplicates kept) and overlay the CORS policy."""
    copied = [
        (name, value)
        for name, value in upstream_headers
        if name.lower() not in HOP_BY_HOP_HEADERS
    ]
    return policy.apply(copied)


def error_response(error: ProxyError, policy: CorsPolicy) -> ProxyResponse:
    """Translate a ProxyError into a JSON response."""
    payload = {"error": error.message}
    if error.details is not None:
        payload["details"] = error.details
    headers = policy.apply([("Content-Type", "application/json")])
    return ProxyResponse(
        status_code=error.status_code,
        headers=headers,
        body=json.dumps(payload).encode("utf-8"),
    )
