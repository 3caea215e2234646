"""HTTP fetching of proxied targets."""

import asyncio

import httpx

from core.exceptions import UpstreamConnectionError, UpstreamTimeoutError
from core.request_types import FetchOutcome, ProxyRequest

DEFAULT_CONTENT_TYPE = "text/html"
TEXT_CONTENT_TYPES = ("text/html", "text/plain")


class UpstreamClient:
    """Fetch targets with a hard wall-clock timeout."""

    def __init__(self, client: httpx.AsyncClient, timeout: float) -> None:
        self._client = client
        self._timeout = timeout

    async def fetch(self, request: ProxyRequest, headers: dict[str, str]) -> FetchOutcome:
        """Issue the outbound request and classify the response.

        Raises:
            UpstreamTimeoutError: the whole exchange exceeded the timeout
            UpstreamConnectionError: DNS, connection, TLS or protocol failure
        """
        try:
            async with asyncio.timeout(self._timeout):
                response = await self._client.request(
                    request.method,
                    request.target_url,
                    headers=headers,
                    content=request.body if request.method == "POST" else None,
                )
        except (TimeoutError, httpx.TimeoutException) as e:
            raise UpstreamTimeoutError() from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(str(e) or type(e).__name__) from e

        return classify_response(response)


def classify_response(response: httpx.Response) -> FetchOutcome:
    """Buffer the body as text for HTML/plain text, as bytes otherwise."""
    content_type = response.headers.get("content-type") or DEFAULT_CONTENT_TYPE
    common = {
        "status_code": response.status_code,
        "reason_phrase": response.reason_phrase,
        "content_type": content_type,
        "final_url": str(response.url),
    }
    if any(kind in content_type.lower() for kind in TEXT_CONTENT_TYPES):
        return FetchOutcome(**common, body_text=response.text, encoding=response.encoding)
    return FetchOutcome(**common, body_bytes=response.content)
