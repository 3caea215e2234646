"""FastAPI route handlers."""

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from core.config import Config
from core.exceptions import ProxyError, RequestTooLargeError
from core.headers import CORS_HEADERS
from core.protocols import RequestLogger
from core.request_types import ProxyRequest
from core.target_url import parse_target_url
from ui.log_utils import write_incoming_log

MAX_BODY_SIZE = 50 * 1024 * 1024  # 50MB


async def handle_browse(
    request: Request,
    config: Config,
    logger: RequestLogger,
) -> Response:
    """Handle GET/POST /api/proxy/browse.

    Every failure is turned into a JSON error body here; nothing propagates
    to the server.
    """
    try:
        target_url = parse_target_url(request.query_params, request.url.query)
        proxy_request = await _build_proxy_request(request, target_url)

        if config.proxy.debug:
            write_incoming_log(
                request.method,
                request.url.path,
                dict(request.headers),
                target_url,
                body_size=len(proxy_request.body or b""),
            )

        browse_service = request.app.state.browse_service
        return await browse_service.browse(proxy_request, _app_origin(request, config))
    except ProxyError as e:
        logger.log_error(request.method, e.status_code, e.message)
        return JSONResponse({"error": e.message}, status_code=e.status_code)
    except Exception as e:
        logger.log_error(request.method, 500, f"Internal server error: {e}")
        return JSONResponse(
            {"error": "Internal server error", "details": str(e)},
            status_code=500,
        )


async def handle_options() -> Response:
    """Answer CORS preflight without touching the target."""
    return Response(status_code=200, headers=CORS_HEADERS)


async def _build_proxy_request(request: Request, target_url: str) -> ProxyRequest:
    if request.method != "POST":
        return ProxyRequest(target_url=target_url, method="GET")

    raw_body = await request.body()
    if len(raw_body) > MAX_BODY_SIZE:
        raise RequestTooLargeError()
    return ProxyRequest(
        target_url=target_url,
        method="POST",
        body=raw_body,
        content_type=request.headers.get("content-type"),
    )


def _app_origin(request: Request, config: Config) -> str:
    """Origin rewritten links point back to."""
    if config.proxy.public_origin:
        return config.proxy.public_origin.rstrip("/")
    return f"{request.url.scheme}://{request.url.netloc}"
