import json

from core.cors import CorsPolicy
from core.exceptions import (
    InvalidTargetError,
    MissingTargetError,
    RequestTooLargeError,
    UpstreamFailureError,
)
from core.responses import build_response_headers, error_response


class TestBuildResponseHeaders:
    def test_copies_upstream_headers_and_drops_hop_by_hop(self):
        upstream = [
            ("content-type", "image/png"),
            ("content-disposition", 'attachment; filename="a.png"'),
            ("content-encoding", "gzip"),
            ("connection", "keep-alive"),
            ("transfer-encoding", "chunked"),
            ("x-upstream", "1"),
        ]

        result = build_response_headers(upstream, CorsPolicy())
        names = [name.lower() for name, _ in result]

        assert ("content-type", "image/png") in result
        assert ("content-disposition", 'attachment; filename="a.png"') in result
        assert ("content-encoding", "gzip") in result
        assert ("x-upstream", "1") in result
        assert "connection" not in names
        assert "transfer-encoding" not in names

    def test_cors_wins_over_upstream(self):
        upstream = [("Access-Control-Allow-Origin", "https://upstream.example")]

        result = build_response_headers(upstream, CorsPolicy())

        assert [v for k, v in result if k.lower() == "access-control-allow-origin"] == ["*"]


class TestErrorResponse:
    def test_missing_target(self):
        response = error_response(MissingTargetError(), CorsPolicy())

        assert response.status_code == 400
        assert json.loads(response.body) == {
            "error": "Target URL is required. Use `/?target=YOUR_URL`."
        }
        assert response.header("Content-Type") == "application/json"
        assert response.header("Access-Control-Allow-Origin") == "*"

    def test_invalid_target(self):
        response = error_response(InvalidTargetError(), CorsPolicy())

        assert response.status_code == 400
        assert json.loads(response.body) == {"error": "Invalid target URL provided."}

    def test_upstream_failure_carries_details(self):
        response = error_response(
            UpstreamFailureError("[Errno -2] Name or service not known"), CorsPolicy()
        )

        assert response.status_code == 502
        assert json.loads(response.body) == {
            "error": "Proxy failed to fetch the target URL.",
            "details": "[Errno -2] Name or service not known",
        }
        assert response.header("Access-Control-Allow-Headers") == "Content-Type, Authorization, Accept"

    def test_request_too_large(self):
        response = error_response(RequestTooLargeError(), CorsPolicy())

        assert response.status_code == 413
        assert json.loads(response.body) == {"error": "Request body too large"}
