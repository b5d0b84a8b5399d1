"""OPTIONS handling."""

from core.cors import CorsPolicy
from core.models import ProxyResponse

PREFLIGHT_HEADERS = (
    "origin",
    "access-control-request-method",
    "access-control-request-headers",
)


def is_preflight(headers: dict[str, str]) -> bool:
    """Check if an OPTIONS request carries the full set of CORS preflight headers."""
    lowered = {key.lower() for key in headers}
    return all(name in lowered for name in PREFLIGHT_HEADERS)


def handle_preflight(headers: dict[str, str], policy: CorsPolicy) -> ProxyResponse:
    """Answer an OPTIONS request without contacting upstream."""
    if is_preflight(headers):
        return ProxyResponse(status_code=204, headers=policy.headers())

    # Bare OPTIONS request
    return ProxyResponse(
        status_code=200,
        headers=policy.apply([("Allow", policy.methods_value)]),
    )
