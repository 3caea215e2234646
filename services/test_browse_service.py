import pytest

from core.exceptions import UpstreamHttpError
from core.headers import HeaderBuilder
from core.request_types import FetchOutcome, ProxyRequest
from core.rewriter import HtmlRewriter
from services.browse_service import BrowseService

APP = "http://proxy.test"


class StubUpstream:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    async def fetch(self, request, headers):
        self.calls.append((request, headers))
        return self.outcome


def _outcome(status=200, content_type="text/html", text=None, data=None, encoding="utf-8"):
    return FetchOutcome(
        status_code=status,
        reason_phrase="Forbidden" if status == 403 else "OK",
        content_type=content_type,
        final_url="https://example.com/",
        body_text=text,
        body_bytes=data,
        encoding=encoding if text is not None else None,
    )


def _service(upstream, logger):
    return BrowseService(upstream, HeaderBuilder(["agent/1.0"]), HtmlRewriter(), logger)


@pytest.mark.asyncio
async def test_html_is_reencoded_with_declared_charset(recording_logger):
    upstream = StubUpstream(
        _outcome(content_type="text/html; charset=iso-8859-1", text="<p>café</p>", encoding="iso-8859-1")
    )

    response = await _service(upstream, recording_logger).browse(
        ProxyRequest("https://example.com/"), APP
    )

    assert response.body.startswith("<p>café</p>".encode("iso-8859-1"))
    assert response.headers["content-type"] == "text/html; charset=iso-8859-1"


@pytest.mark.asyncio
async def test_get_only_sends_content_type_for_post(recording_logger):
    upstream = StubUpstream(_outcome(text="ok"))
    service = _service(upstream, recording_logger)

    await service.browse(ProxyRequest("https://example.com/", content_type="text/plain"), APP)
    await service.browse(
        ProxyRequest("https://example.com/", method="POST", body=b"x", content_type="text/plain"),
        APP,
    )

    get_headers = upstream.calls[0][1]
    post_headers = upstream.calls[1][1]
    assert "Content-Type" not in get_headers
    assert post_headers["Content-Type"] == "text/plain"


@pytest.mark.asyncio
async def test_get_non_2xx_binary_raises_with_upstream_status(recording_logger):
    upstream = StubUpstream(_outcome(status=403, content_type="image/png", data=b"\x00"))

    with pytest.raises(UpstreamHttpError) as exc_info:
        await _service(upstream, recording_logger).browse(ProxyRequest("https://example.com/"), APP)

    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "Failed to fetch: 403 Forbidden"
    assert recording_logger.fetches == []


@pytest.mark.asyncio
async def test_post_non_2xx_binary_is_served_with_200(recording_logger):
    upstream = StubUpstream(_outcome(status=403, content_type="application/pdf", data=b"%PDF"))

    response = await _service(upstream, recording_logger).browse(
        ProxyRequest("https://example.com/", method="POST", body=b""), APP
    )

    assert response.status_code == 200
    assert response.body == b"%PDF"
    assert recording_logger.fetches[0]["kind"] == "binary"
    assert recording_logger.fetches[0]["upstream_status"] == 403
