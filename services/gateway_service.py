"""Request preparation for the upstream: auth gate, path rewrite, headers."""

from collections.abc import Mapping

from core.config import Config
from core.gate import AuthGate
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import PreparedRequest
from core.rewrite import PathRewriter


class GatewayService:
    """Decide whether a request may pass and where it goes."""

    def __init__(
        self,
        config: Config,
        logger: RequestLogger,
        header_builder: HeaderBuilder,
        gate: AuthGate | None = None,
        rewriter: PathRewriter | None = None,
    ) -> None:
        self._logger = logger
        self._headers = header_builder
        self._gate = gate or AuthGate.from_settings(config.auth)
        self._rewriter = rewriter or PathRewriter(config.upstream.base_url)

    def authorize(self, method: str, path: str, headers: Mapping[str, str]) -> bool:
        """Run the auth gate, logging rejections."""
        if self._gate.allows(headers):
            return True
        self._logger.log_rejected(method, path)
        return False

    def prepare(
        self,
        method: str,
        path: str,
        query: str,
        headers: list[tuple[bytes, bytes]],
    ) -> PreparedRequest:
        """Build the upstream request for an already authorized inbound request."""
        target_url = self._rewriter.rewrite(path, query)
        upstream_headers = self._headers.build_upstream_headers(headers)
        self._logger.log_forward(method, path, target_url)
        return PreparedRequest(method, target_url, upstream_headers)
