"""Header filtering for forwarded requests and relayed responses.

Headers travel as raw ``(name, value)`` byte pairs so values are relayed
without any decoding.
"""

from collections.abc import Iterable

RawHeaders = list[tuple[bytes, bytes]]

HOP_BY_HOP = frozenset(
    {
        b"connection",
        b"keep-alive",
        b"proxy-authenticate",
        b"proxy-authorization",
        b"te",
        b"trailer",
        b"transfer-encoding",
        b"upgrade",
    }
)


class HeaderBuilder:
    """Build upstream request headers and downstream response headers."""

    def build_upstream_headers(self, headers: Iterable[tuple[bytes, bytes]]) -> RawHeaders:
        """Pass through inbound headers except hop-by-hop ones and host.

        httpx sets host from the Forward Target. content-length is kept so a
        streamed body is not re-sent chunked.
        """
        headers = list(headers)
        skip = _connection_tokens(headers) | HOP_BY_HOP | {b"host"}
        return [(key, value) for key, value in headers if key.lower() not in skip]

    def build_response_headers(self, headers: Iterable[tuple[bytes, bytes]]) -> RawHeaders:
        """Pass through upstream response headers except hop-by-hop ones, names lowercased."""
        headers = list(headers)
        skip = _connection_tokens(headers) | HOP_BY_HOP
        return [(key.lower(), value) for key, value in headers if key.lower() not in skip]


def _connection_tokens(headers: RawHeaders) -> set[bytes]:
    """Header names listed in Connection are hop-by-hop too."""
    tokens: set[bytes] = set()
    for key, value in headers:
        if key.lower() == b"connection":
            tokens.update(t.strip().lower() for t in value.split(b",") if t.strip())
    return tokens
