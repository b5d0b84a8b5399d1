"""Pipeline orchestration for relay requests."""

from core.cors import CorsPolicy
from core.exceptions import ProxyError, RequestTooLargeError
from core.headers import HeaderBuilder
from core.models import OutboundRequest, ProxyRequest, ProxyResponse
from core.preflight import handle_preflight, is_preflight
from core.protocols import RequestLogger
from core.responses import build_response_headers, error_response
from core.target import NormalizedTarget
from services.upstream import UpstreamClient, UpstreamResponse


class ProxyService:
    """Run a ProxyRequest through preflight, validation, forwarding and translation."""

    def __init__(
        self,
        upstream: UpstreamClient,
        policy: CorsPolicy,
        header_builder: HeaderBuilder,
        logger: RequestLogger,
        max_body_size: int | None = None,
    ) -> None:
        self._upstream = upstream
        self._policy = policy
        self._headers = header_builder
        self._logger = logger
        self._max_body_size = max_body_size

    @property
    def policy(self) -> CorsPolicy:
        return self._policy

    async def handle(self, request: ProxyRequest) -> ProxyResponse:
        """Handle one inbound request. ProxyErrors never escape this method."""
        if request.method == "OPTIONS":
            self._logger.log_preflight(is_preflight(request.headers))
            return handle_preflight(request.headers, self._policy)

        try:
            outbound = self.prepare(request)
            self._logger.log_request(
                outbound.method,
                outbound.target.url,
                outbound.headers,
                mode=self._headers.mode,
            )
            upstream = await self._upstream.forward(outbound)
        except ProxyError as e:
            return self.translate_error(e)

        self._logger.log_response(outbound.method, outbound.target.url, upstream.status_code)
        return self.build_response(upstream)

    def prepare(self, request: ProxyRequest) -> OutboundRequest:
        """Validate the target and build the outbound request."""
        target = NormalizedTarget.parse(request.target)
        body = request.payload()
        if self._max_body_size is not None and body and len(body) > self._max_body_size:
            raise RequestTooLargeError()
        headers = self._headers.build(request.headers, target)
        return OutboundRequest(request.method, target, headers, body)

    def build_response(self, upstream: UpstreamResponse) -> ProxyResponse:
        return ProxyResponse(
            status_code=upstream.status_code,
            headers=build_response_headers(upstream.headers, self._policy),
            stream=upstream.iter_raw(),
            close=upstream.aclose,
        )

    def translate_error(self, error: ProxyError) -> ProxyResponse:
        self._logger.log_error(error.kind.value, error.status_code, error.details or error.message)
        return error_response(error, self._policy)
