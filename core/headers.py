"""Header construction for upstream requests and proxy responses."""

import random
from collections.abc import Sequence

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

PASSTHROUGH_CACHE_CONTROL = "public, max-age=86400"


class HeaderBuilder:
    """Build upstream request headers and proxy response headers."""

    def __init__(self, user_agents: Sequence[str]) -> None:
        if not user_agents:
            raise ValueError("at least one user agent is required")
        self._user_agents = tuple(user_agents)

    def pick_user_agent(self) -> str:
        return random.choice(self._user_agents)

    def build_browser_headers(self, content_type: str | None = None) -> dict[str, str]:
        """Headers of an ordinary browser navigation with a rotated identity."""
        upstream = {
            "User-Agent": self.pick_user_agent(),
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
            "Accept-Encoding": "gzip, deflate, br",
            "Connection": "keep-alive",
            "Upgrade-Insecure-Requests": "1",
            "Sec-Fetch-Dest": "document",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-Site": "none",
            "Sec-Fetch-User": "?1",
            "Cache-Control": "max-age=0",
        }
        if content_type:
            upstream["Content-Type"] = content_type
        return upstream

    def build_text_headers(self, content_type: str) -> dict[str, str]:
        """Headers for rewritten or plain text responses."""
        return {
            "Content-Type": content_type,
            **CORS_HEADERS,
            "X-Content-Type-Options": "nosniff",
            **NO_CACHE_HEADERS,
        }

    def build_passthrough_headers(self, content_type: str) -> dict[str, str]:
        """Headers for binary payloads served byte-for-byte."""
        return {
            "Content-Type": content_type,
            **CORS_HEADERS,
            "X-Content-Type-Options": "nosniff",
            "Cache-Control": PASSTHROUGH_CACHE_CONTROL,
        }
