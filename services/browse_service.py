"""Fetch-and-rewrite orchestration for browse requests."""

from fastapi import Response

from core.exceptions import UpstreamHttpError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import FetchOutcome, ProxyRequest, RewriteContext
from core.rewriter import HtmlRewriter
from services.upstream import UpstreamClient


class BrowseService:
    """Fetch a target and turn the outcome into the proxy's response."""

    def __init__(
        self,
        upstream: UpstreamClient,
        header_builder: HeaderBuilder,
        rewriter: HtmlRewriter,
        logger: RequestLogger,
    ) -> None:
        self._upstream = upstream
        self._headers = header_builder
        self._rewriter = rewriter
        self._logger = logger

    async def browse(self, request: ProxyRequest, app_origin: str) -> Response:
        """Fetch ``request.target_url`` and build the response.

        GET keeps strict status handling except for non-2xx pages that still
        carry HTML; POST is always answered with 200.
        """
        upstream_headers = self._headers.build_browser_headers(
            request.content_type if request.method == "POST" else None
        )
        outcome = await self._upstream.fetch(request, upstream_headers)

        if request.method == "GET" and not outcome.is_success and not _is_renderable(outcome):
            raise UpstreamHttpError(outcome.status_code, outcome.reason_phrase)

        if outcome.is_text:
            response = self._text_response(outcome, request, app_origin)
            kind = "html" if outcome.is_html else "text"
        else:
            response = Response(
                content=outcome.body_bytes,
                status_code=200,
                headers=self._headers.build_passthrough_headers(outcome.content_type),
            )
            kind = "binary"

        self._logger.log_fetch(
            request.method,
            request.target_url,
            response.status_code,
            kind=kind,
            upstream_status=outcome.status_code,
        )
        return response

    def _text_response(
        self,
        outcome: FetchOutcome,
        request: ProxyRequest,
        app_origin: str,
    ) -> Response:
        content = outcome.body_text or ""
        if outcome.is_html:
            context = RewriteContext.for_request(request.target_url, app_origin)
            content = self._rewriter.rewrite(content, context)

        # Re-encode with the charset the mirrored Content-Type declares
        encoding = outcome.encoding or "utf-8"
        errors = "xmlcharrefreplace" if outcome.is_html else "replace"
        return Response(
            content=content.encode(encoding, errors=errors),
            status_code=200,
            headers=self._headers.build_text_headers(outcome.content_type),
        )


def _is_renderable(outcome: FetchOutcome) -> bool:
    """Non-2xx pages often still carry usable HTML (403/429 interstitials)."""
    return outcome.is_html and bool(outcome.body_text)
