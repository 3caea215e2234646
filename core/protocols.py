"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard)."""

    def log_fetch(
        self,
        method: str,
        url: str,
        status: int,
        *,
        kind: str,
        upstream_status: int | None = None,
    ) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
