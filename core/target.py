"""Target URL validation and normalization."""

import ipaddress
import re
from dataclasses import dataclass
from urllib.parse import urlsplit

import httpx

from core.exceptions import InvalidTargetError, MissingTargetError

DEFAULT_SCHEME = "https"
ALLOWED_SCHEMES = ("http", "https")

_SCHEME_PREFIX = re.compile(r"^https?://", re.IGNORECASE)
# Hostname label: letters (including IDN), digits, underscore, hyphen.
_HOST_LABEL = re.compile(r"^[\w-]+$")


@dataclass(frozen=True)
class NormalizedTarget:
    """An absolute http(s) URL that passed validation.

    Instances come only from `NormalizedTarget.parse`.
    """

    url: str
    scheme: str
    host: str
    origin: str
    href: str

    @classmethod
    def parse(cls, raw: str | None) -> "NormalizedTarget":
        """Validate a raw `target` parameter and normalize it.

        Raises:
            MissingTargetError: raw is absent or blank
            InvalidTargetError: raw is not a usable absolute http(s) URL
        """
        if raw is None or not raw.strip():
            raise MissingTargetError()

        candidate = raw.strip()
        if not _SCHEME_PREFIX.match(candidate):
            candidate = f"{DEFAULT_SCHEME}://{candidate}"

        try:
            parts = urlsplit(candidate)
            parts.port  # validates the port component
        except ValueError as e:
            raise InvalidTargetError() from e

        if parts.scheme.lower() not in ALLOWED_SCHEMES:
            raise InvalidTargetError()
        if any(ch.isspace() or not ch.isprintable() for ch in parts.netloc):
            raise InvalidTargetError()
        if not _is_valid_host(parts.hostname, bracketed="[" in parts.netloc):
            raise InvalidTargetError()

        try:
            url = httpx.URL(candidate)
        except httpx.InvalidURL as e:
            raise InvalidTargetError() from e

        host = url.netloc.decode("ascii")
        origin = f"{url.scheme}://{host}"
        href = str(url)
        return cls(url=href, scheme=url.scheme, host=host, origin=origin, href=href)


def _is_valid_host(hostname: str | None, *, bracketed: bool) -> bool:
    if not hostname:
        return False
    if bracketed:
        try:
            return ipaddress.ip_address(hostname.split("%", 1)[0]).version == 6
        except ValueError:
            return False
    labels = hostname[:-1].split(".") if hostname.endswith(".") else hostname.split(".")
    return all(label and _HOST_LABEL.match(label) for label in labels)
