"""Header filtering for upstream requests."""

from core.config import HeaderSettings
from core.target import NormalizedTarget

# Hop-by-hop headers that should NOT be forwarded (RFC 2616)
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "trailers",
        "transfer-encoding",
        "upgrade",
    }
)


def encode_header_value(value: str) -> bytes:
    """Encode a header value without assuming ASCII.

    Latin-1 restores the raw bytes of values decoded that way by the ASGI
    server; anything outside Latin-1 is sent as UTF-8.
    """
    try:
        return value.encode("latin-1")
    except UnicodeEncodeError:
        return value.encode("utf-8")


class HeaderBuilder:
    """Build upstream headers from the inbound request headers.

    `rewrite` mode forwards everything except hop-by-hop and host
    infrastructure headers and points Host/Origin/Referer at the target.
    `passthrough` mode forwards the allow-listed headers only.
    """

    def __init__(self, settings: HeaderSettings | None = None) -> None:
        settings = settings or HeaderSettings()
        self.mode = settings.mode
        self._forward = [name.lower() for name in settings.forward]
        self._strip = frozenset(name.lower() for name in settings.strip)
        self._strip_prefixes = tuple(prefix.lower() for prefix in settings.strip_prefixes)

    def build(self, headers: dict[str, str], target: NormalizedTarget) -> dict[str, str]:
        if self.mode == "passthrough":
            return self.build_passthrough_headers(headers)
        return self.build_rewrite_headers(headers, target)

    def build_passthrough_headers(self, headers: dict[str, str]) -> dict[str, str]:
        """Forward only the allow-listed headers."""
        lowered = {key.lower(): value for key, value in headers.items()}
        return {
            name: lowered[name]
            for name in self._forward
            if name in lowered and not self.is_infrastructure_header(name)
        }

    def build_rewrite_headers(
        self,
        headers: dict[str, str],
        target: NormalizedTarget,
    ) -> dict[str, str]:
        """Forward all safe headers and make the request look same-origin to the target."""
        upstream: dict[str, str] = {}
        for key, value in headers.items():
            key_lower = key.lower()
            if key_lower in HOP_BY_HOP_HEADERS or key_lower == "content-length":
                continue
            if self.is_infrastructure_header(key_lower):
                continue
            upstream[key_lower] = value

        upstream["host"] = target.host
        upstream["origin"] = target.origin
        upstream["referer"] = target.href
        return upstream

    def is_infrastructure_header(self, name: str) -> bool:
        """Check if a header identifies the hosting platform or the connecting client."""
        name = name.lower()
        return name in self._strip or name.startswith(self._strip_prefixes)
