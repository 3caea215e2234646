import asyncio

import httpx
import pytest

from core.exceptions import UpstreamConnectionError, UpstreamTimeoutError
from core.request_types import ProxyRequest
from services.upstream import UpstreamClient, classify_response

HEADERS = {"User-Agent": "agent/1.0"}
REQUEST = httpx.Request("GET", "https://example.com/")


def _client(handler, timeout=2.0):
    return UpstreamClient(
        httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True),
        timeout,
    )


def test_classify_html_as_text():
    response = httpx.Response(
        200,
        headers={"content-type": "text/html; charset=utf-8"},
        content="<p>é</p>".encode(),
        request=REQUEST,
    )
    outcome = classify_response(response)

    assert outcome.body_text == "<p>é</p>"
    assert outcome.body_bytes is None
    assert outcome.is_html and outcome.is_text


def test_classify_defaults_missing_content_type_to_html():
    outcome = classify_response(httpx.Response(200, content=b"<p>x</p>", request=REQUEST))
    assert outcome.content_type == "text/html"
    assert outcome.is_html


def test_classify_plain_text_is_not_html():
    outcome = classify_response(
        httpx.Response(200, headers={"content-type": "text/plain"}, content=b"hi", request=REQUEST)
    )
    assert outcome.body_text == "hi"
    assert not outcome.is_html


def test_classify_binary_keeps_bytes():
    payload = b"\x89PNG\r\n\x1a\n\x00\x01"
    outcome = classify_response(
        httpx.Response(200, headers={"content-type": "image/png"}, content=payload, request=REQUEST)
    )
    assert outcome.body_bytes == payload
    assert outcome.body_text is None


@pytest.mark.asyncio
async def test_fetch_follows_redirects():
    def handler(request):
        if request.url.path == "/old":
            return httpx.Response(301, headers={"location": "https://example.com/new"})
        return httpx.Response(200, headers={"content-type": "text/html"}, text="new")

    outcome = await _client(handler).fetch(ProxyRequest("https://example.com/old"), HEADERS)

    assert outcome.status_code == 200
    assert outcome.final_url == "https://example.com/new"
    assert outcome.body_text == "new"


@pytest.mark.asyncio
async def test_fetch_forwards_post_body_and_headers():
    captured = {}

    def handler(request):
        captured["method"] = request.method
        captured["body"] = request.content
        captured["content_type"] = request.headers.get("content-type")
        captured["user_agent"] = request.headers.get("user-agent")
        return httpx.Response(200, text="ok")

    request = ProxyRequest(
        "https://example.com/form",
        method="POST",
        body=b"a=1&b=2",
        content_type="application/x-www-form-urlencoded",
    )
    headers = {**HEADERS, "Content-Type": request.content_type}
    await _client(handler).fetch(request, headers)

    assert captured == {
        "method": "POST",
        "body": b"a=1&b=2",
        "content_type": "application/x-www-form-urlencoded",
        "user_agent": "agent/1.0",
    }


@pytest.mark.asyncio
async def test_fetch_times_out_on_wall_clock():
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200)

    with pytest.raises(UpstreamTimeoutError) as exc_info:
        await _client(handler, timeout=0.05).fetch(ProxyRequest("https://slow.example"), HEADERS)
    assert exc_info.value.status_code == 504


@pytest.mark.asyncio
async def test_transport_timeout_is_a_timeout():
    def handler(request):
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(UpstreamTimeoutError):
        await _client(handler).fetch(ProxyRequest("https://slow.example"), HEADERS)


@pytest.mark.asyncio
async def test_connection_failure_is_reported_with_reason():
    def handler(request):
        raise httpx.ConnectError("Name or service not known", request=request)

    with pytest.raises(UpstreamConnectionError) as exc_info:
        await _client(handler).fetch(ProxyRequest("https://nowhere.invalid"), HEADERS)
    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Failed to fetch content: Name or service not known"
