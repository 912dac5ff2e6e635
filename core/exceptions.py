"""Custom exception hierarchy for the authenticating proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class UpstreamError(ProxyError):
    """Raised when forwarding to the upstream fails.

    Attributes:
        message: Error message
        status_code: HTTP status code to answer the caller with
        target: Forward Target URL that was being requested (optional)
    """

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        target: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.target = target


class UpstreamTimeoutError(UpstreamError):
    """Raised when the upstream request times out."""

    def __init__(
        self,
        message: str,
        target: str | None = None,
    ) -> None:
        super().__init__(message, status_code=504, target=target)


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to connect to the upstream."""

    def __init__(
        self,
        message: str,
        target: str | None = None,
    ) -> None:
        super().__init__(message, status_code=502, target=target)


class UpstreamProtocolError(UpstreamError):
    """Upstream answered with something that is not valid HTTP."""

    def __init__(
        self,
        message: str,
        target: str | None = None,
    ) -> None:
        super().__init__(message, status_code=502, target=target)
