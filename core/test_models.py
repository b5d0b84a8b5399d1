import base64

import pytest

from core.models import ProxyRequest, ProxyResponse


class TestProxyRequest:
    def test_from_pairs_lowercases_and_last_write_wins(self):
        request = ProxyRequest.from_pairs(
            "get",
            "example.com",
            [("Accept", "text/html"), ("X-Dup", "1"), ("x-dup", "2")],
        )

        assert request.method == "GET"
        assert request.headers == {"accept": "text/html", "x-dup": "2"}
        assert request.header("ACCEPT") == "text/html"

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
    def test_payload_for_body_methods(self, method):
        request = ProxyRequest(method, "example.com", body=b"\x00\x01payload")
        assert request.payload() == b"\x00\x01payload"

    @pytest.mark.parametrize("method", ["GET", "HEAD", "OPTIONS"])
    def test_no_payload_for_bodyless_methods(self, method):
        request = ProxyRequest(method, "example.com", body=b"ignored")
        assert request.payload() is None

    def test_empty_body_is_none(self):
        assert ProxyRequest("POST", "example.com", body=b"").payload() is None

    def test_base64_body_is_decoded(self):
        raw = bytes(range(256))
        request = ProxyRequest(
            "POST",
            "example.com",
            body=base64.b64encode(raw).decode("ascii"),
            body_is_base64=True,
        )
        assert request.payload() == raw

    def test_text_body_is_utf8_encoded(self):
        assert ProxyRequest("PUT", "example.com", body="héllo").payload() == "héllo".encode()


class TestProxyResponse:
    @pytest.mark.asyncio
    async def test_read_fixed_body(self):
        response = ProxyResponse(200, [], body=b"abc")
        assert await response.read() == b"abc"

    @pytest.mark.asyncio
    async def test_read_stream_closes_upstream(self):
        closed = []

        async def stream():
            yield b"a"
            yield b"b"

        async def close():
            closed.append(True)

        response = ProxyResponse(200, [], stream=stream(), close=close)

        assert await response.read() == b"ab"
        assert closed == [True]

    def test_header_lookup_is_case_insensitive(self):
        response = ProxyResponse(200, [("Content-Type", "text/plain"), ("set-cookie", "a"), ("Set-Cookie", "b")])
        assert response.header("content-type") == "text/plain"
        assert response.header("SET-COOKIE") == "b"
        assert response.header("missing") is None
