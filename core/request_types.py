"""Shared request data types."""

from dataclasses import dataclass

import httpx


@dataclass(frozen=True)
class ProxyRequest:
    """A validated request to fetch a target through the proxy."""

    target_url: str
    method: str = "GET"
    body: bytes | None = None
    content_type: str | None = None


@dataclass(frozen=True)
class FetchOutcome:
    """Classified upstream response, consumed once by the response writer."""

    status_code: int
    reason_phrase: str
    content_type: str
    final_url: str
    body_text: str | None = None
    body_bytes: bytes | None = None
    encoding: str | None = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_html(self) -> bool:
        return "text/html" in self.content_type.lower()

    @property
    def is_text(self) -> bool:
        return self.body_text is not None


@dataclass(frozen=True)
class RewriteContext:
    """URLs the rewriter needs for one document."""

    base_url: str
    app_origin: str
    target_url: str

    @classmethod
    def for_request(cls, target_url: str, app_origin: str) -> "RewriteContext":
        url = httpx.URL(target_url)
        host = url.netloc.decode("ascii")
        return cls(
            base_url=f"{url.scheme}://{host}",
            app_origin=app_origin.rstrip("/"),
            target_url=target_url,
        )
