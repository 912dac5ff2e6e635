"""Path rewriting - builds the Forward Target from the inbound path."""


def strip_first_segment(path: str) -> str:
    """Drop the leading slash and the first path segment.

    ``/iip/foo/bar`` -> ``foo/bar``, ``/foo`` -> ``""``, ``/iip/foo/`` -> ``foo/``.
    """
    return "/".join(path.split("/")[2:])


class PathRewriter:
    """Map inbound paths onto the upstream base URL."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def rewrite(self, path: str, query: str = "") -> str:
        """Return the Forward Target for an inbound path and raw query string."""
        target = f"{self.base_url}/{strip_first_segment(path)}"
        if query:
            target += f"?{query}"
        return target
