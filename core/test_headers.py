import pytest

from core.config import HeaderSettings
from core.headers import HeaderBuilder, encode_header_value
from core.target import NormalizedTarget

INBOUND = {
    "host": "relay.example.net",
    "origin": "https://app.example.org",
    "referer": "https://app.example.org/page",
    "content-type": "application/json",
    "authorization": "Bearer token123",
    "accept": "application/json",
    "user-agent": "test-agent",
    "x-custom": "keep-me",
    "cf-connecting-ip": "203.0.113.7",
    "cf-ipcountry": "NL",
    "cf-ray": "8a1b2c3d4e5f-AMS",
    "cf-visitor": '{"scheme":"https"}',
    "x-nf-client-connection-ip": "203.0.113.7",
    "x-nf-geo": "eyJjaXR5IjoiQW1zdGVyZGFtIn0=",
    "x-forwarded-for": "203.0.113.7",
    "x-amzn-trace-id": "Root=1-abc",
    "connection": "keep-alive",
    "transfer-encoding": "chunked",
    "content-length": "42",
}


@pytest.fixture
def target():
    return NormalizedTarget.parse("https://api.example.com:8443/v1/data?x=1")


class TestRewriteMode:
    def test_host_origin_referer_point_at_target(self, target):
        headers = HeaderBuilder(HeaderSettings(mode="rewrite")).build(INBOUND, target)

        assert headers["host"] == "api.example.com:8443"
        assert headers["origin"] == "https://api.example.com:8443"
        assert headers["referer"] == "https://api.example.com:8443/v1/data?x=1"

    def test_other_headers_pass_through(self, target):
        headers = HeaderBuilder(HeaderSettings(mode="rewrite")).build(INBOUND, target)

        assert headers["content-type"] == "application/json"
        assert headers["authorization"] == "Bearer token123"
        assert headers["accept"] == "application/json"
        assert headers["user-agent"] == "test-agent"
        assert headers["x-custom"] == "keep-me"

    def test_infrastructure_headers_removed(self, target):
        headers = HeaderBuilder(HeaderSettings(mode="rewrite")).build(INBOUND, target)

        for name in (
            "cf-connecting-ip",
            "cf-ipcountry",
            "cf-ray",
            "cf-visitor",
            "x-nf-client-connection-ip",
            "x-nf-geo",
            "x-forwarded-for",
            "x-amzn-trace-id",
        ):
            assert name not in headers

    def test_hop_by_hop_and_length_removed(self, target):
        headers = HeaderBuilder(HeaderSettings(mode="rewrite")).build(INBOUND, target)

        assert "connection" not in headers
        assert "transfer-encoding" not in headers
        assert "content-length" not in headers

    def test_mixed_case_names(self, target):
        headers = HeaderBuilder().build({"CF-Ray": "abc", "X-Trace": "1"}, target)

        assert "cf-ray" not in headers
        assert headers["x-trace"] == "1"


class TestPassthroughMode:
    def test_only_allow_listed_headers(self, target):
        headers = HeaderBuilder(HeaderSettings(mode="passthrough")).build(INBOUND, target)

        assert headers == {
            "content-type": "application/json",
            "authorization": "Bearer token123",
            "accept": "application/json",
        }

    def test_absent_headers_are_skipped(self, target):
        headers = HeaderBuilder(HeaderSettings(mode="passthrough")).build(
            {"accept": "*/*", "cookie": "a=b"}, target
        )

        assert headers == {"accept": "*/*"}

    def test_infrastructure_header_never_forwarded_even_if_allow_listed(self, target):
        settings = HeaderSettings(mode="passthrough", forward=["Accept", "CF-Connecting-IP"])
        headers = HeaderBuilder(settings).build(INBOUND, target)

        assert headers == {"accept": "application/json"}


def test_default_mode_is_rewrite():
    assert HeaderBuilder().mode == "rewrite"


class TestNonAsciiValues:
    def test_rewrite_keeps_value_unchanged(self, target):
        headers = HeaderBuilder().build({"x-user": "Zoë", "x-raw": "caf\xe9\xff"}, target)

        assert headers["x-user"] == "Zoë"
        assert headers["x-raw"] == "caf\xe9\xff"

    def test_passthrough_keeps_value_unchanged(self, target):
        headers = HeaderBuilder(HeaderSettings(mode="passthrough")).build(
            {"authorization": "Bearer Zoë"}, target
        )

        assert headers == {"authorization": "Bearer Zoë"}

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("plain", b"plain"),
            ("Zoë", b"Zo\xeb"),
            ("caf\xe9\xff", b"caf\xe9\xff"),
            ("✓ ok", "✓ ok".encode("utf-8")),
        ],
    )
    def test_encode_header_value(self, value, expected):
        assert encode_header_value(value) == expected
