"""CORS policy applied to every relay response."""

from dataclasses import dataclass

from core.config import CorsSettings


@dataclass(frozen=True)
class CorsPolicy:
    """Immutable cross-origin policy."""

    allow_origin: str = "*"
    allow_methods: tuple[str, ...] = ("GET", "HEAD", "POST", "PUT", "DELETE", "OPTIONS")
    allow_headers: tuple[str, ...] = ("Content-Type", "Authorization", "Accept")

    @classmethod
    def from_settings(cls, settings: CorsSettings) -> "CorsPolicy":
        return cls(
            allow_origin=settings.allow_origin,
            allow_methods=tuple(m.upper() for m in settings.allow_methods),
            allow_headers=tuple(settings.allow_headers),
        )

    @property
    def methods_value(self) -> str:
        return ", ".join(self.allow_methods)

    def headers(self) -> list[tuple[str, str]]:
        return [
            ("Access-Control-Allow-Origin", self.allow_origin),
            ("Access-Control-Allow-Methods", self.methods_value),
            ("Access-Control-Allow-Headers", ", ".join(self.allow_headers)),
        ]

    def apply(self, headers: list[tuple[str, str]]) -> list[tuple[str, str]]:
        """Overlay policy headers, dropping any same-named header already present."""
        policy = self.headers()
        names = {name.lower() for name, _ in policy}
        kept = [(name, value) for name, value in headers if name.lower() not in names]
        return kept + policy
