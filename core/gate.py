"""Authorization header presence check."""

from collections.abc import Mapping

from core.config import AuthSettings

MISSING_AUTH_ERROR = "No authorization header set"


class AuthGate:
    """Let a request through only if it carries an authorization header.

    The header value is never inspected beyond being non-empty.
    """

    def __init__(self, enforce: bool = True, header_name: str = "authorization"):
        self.enforce = enforce
        self.header_name = header_name.lower()

    @classmethod
    def from_settings(cls, settings: AuthSettings) -> "AuthGate":
        return cls(enforce=settings.enforce_auth, header_name=settings.header_name)

    def allows(self, headers: Mapping[str, str]) -> bool:
        """Return True if the request may be forwarded."""
        if not self.enforce:
            return True
        return bool(self._lookup(headers))

    def _lookup(self, headers: Mapping[str, str]) -> str | None:
        # Starlette's Headers is already case-insensitive, plain dicts are not
        for key, value in headers.items():
            if key.lower() == self.header_name:
                return value
        return None
