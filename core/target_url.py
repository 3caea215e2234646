"""Target URL extraction and validation."""

import re
from collections.abc import Mapping
from urllib.parse import unquote

import httpx

from core.exceptions import InvalidUrlError, MissingParameterError

URL_PARAM = "url"
ALLOWED_SCHEMES = ("http", "https")

# Matches the proxy's own parameter at the start of the query or after a separator
_RAW_URL_TOKEN = re.compile(r"(?:^|[&;])url=(?P<value>[^&;].*)$", re.DOTALL)


def extract_target_url(query_params: Mapping[str, str], raw_query: str) -> str:
    """Return the target URL from the query, falling back to a raw scan.

    The raw scan covers targets whose own query string was not encoded and
    collides with the proxy's parameter parsing.
    """
    target = query_params.get(URL_PARAM)
    if target:
        return target

    match = _RAW_URL_TOKEN.search(raw_query or "")
    if match:
        return unquote(match.group("value"))

    raise MissingParameterError()


def validate_target_url(target: str) -> str:
    """Ensure the target parses as an absolute http(s) URL."""
    target = target.strip()
    try:
        url = httpx.URL(target)
    except httpx.InvalidURL as e:
        raise InvalidUrlError() from e

    if url.scheme not in ALLOWED_SCHEMES or not url.host:
        raise InvalidUrlError()
    return target


def parse_target_url(query_params: Mapping[str, str], raw_query: str) -> str:
    """Extract and validate in one step."""
    return validate_target_url(extract_target_url(query_params, raw_query))
