import httpx
import pytest

from core.config import Config, FetchSettings, ProxySettings


class RecordingLogger:
    """RequestLogger that keeps every call for assertions."""

    def __init__(self):
        self.fetches = []
        self.errors = []

    def log_fetch(self, method, url, status, *, kind, upstream_status=None):
        self.fetches.append(
            {
                "method": method,
                "url": url,
                "status": status,
                "kind": kind,
                "upstream_status": upstream_status,
            }
        )

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))


class CountingTransport(httpx.MockTransport):
    """MockTransport that remembers the requests it served."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        async def recording_handler(request):
            self.requests.append(request)
            result = handler(request)
            if hasattr(result, "__await__"):
                result = await result
            return result

        super().__init__(recording_handler)


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def config():
    return Config(
        proxy=ProxySettings(debug=False),
        fetch=FetchSettings(timeout=2.0),
    )
