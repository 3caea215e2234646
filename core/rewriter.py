"""HTML rewriting so links, resources and forms route back through the proxy."""

import html
import re
from collections.abc import Callable
from urllib.parse import quote, urljoin

from core.client_script import render_link_fixup_script
from core.request_types import RewriteContext

PROXY_PATH = "/api/proxy/browse"

# Schemes the browser cannot fetch through the proxy
SKIPPED_SCHEMES = ("javascript:", "mailto:", "tel:", "sms:", "about:", "data:")

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"

_HEAD_OPEN = re.compile(r"<head(?:\s[^>]*)?>", re.IGNORECASE)
_BODY_CLOSE = re.compile(r"</body\s*>", re.IGNORECASE)
_FORM_OPEN = re.compile(r"<form(?=[\s/>])(?P<attrs>[^>]*)>", re.IGNORECASE)
_ACTION_NAME = re.compile(r"(?:^|\s)action\s*(?:=|(?=[\s/>]|$))", re.IGNORECASE)
_QUOTED_VALUE = re.compile(r"\"[^\"]*\"|'[^']*'")


def _attribute_patterns(name: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    """Double- and single-quoted patterns for one attribute name.

    The name must follow whitespace so data-href or srcset never match.
    """
    prefix = rf"(?P<prefix>\s{name}\s*=\s*)"
    return (
        re.compile(prefix + r'(?P<quote>")(?P<value>[^"]*)"', re.IGNORECASE),
        re.compile(prefix + r"(?P<quote>')(?P<value>[^']*)'", re.IGNORECASE),
    )


_HREF_PATTERNS = _attribute_patterns("href")
_SRC_PATTERNS = _attribute_patterns("src")
_ACTION_PATTERNS = _attribute_patterns("action")


def is_proxyable(value: str) -> bool:
    """Return True if an attribute value should be routed through the proxy."""
    candidate = value.strip().lower()
    if not candidate or candidate.startswith("#"):
        return False
    return not candidate.startswith(SKIPPED_SCHEMES)


def resolve_url(value: str, base_url: str) -> str | None:
    """Join a possibly relative value onto the base, None if it cannot be parsed."""
    try:
        return urljoin(base_url, value.strip())
    except ValueError:
        return None


def build_proxy_url(app_origin: str, absolute_url: str) -> str:
    """Proxy endpoint URL that fetches ``absolute_url``."""
    return f"{app_origin}{PROXY_PATH}?url={quote(absolute_url, safe=_URI_COMPONENT_SAFE)}"


class HtmlRewriter:
    """Rewrite href, src and action attributes of an HTML document.

    The transformation is textual: every byte outside a rewritten attribute
    value is preserved as-is.
    """

    def rewrite(self, content: str, context: RewriteContext) -> str:
        content = self._rewrite_attribute(content, _HREF_PATTERNS, context)
        content = self._rewrite_attribute(content, _SRC_PATTERNS, context)
        content = self._rewrite_forms(content, context)
        content = self._insert_base_tag(content, context)
        return self._inject_script(content, context)

    def _rewrite_attribute(
        self,
        content: str,
        patterns: tuple[re.Pattern[str], re.Pattern[str]],
        context: RewriteContext,
    ) -> str:
        replace = self._attribute_replacer(context)
        for pattern in patterns:
            content = pattern.sub(replace, content)
        return content

    def _attribute_replacer(self, context: RewriteContext) -> Callable[[re.Match[str]], str]:
        def replace(match: re.Match[str]) -> str:
            proxied = self._proxy_value(match.group("value"), context)
            if proxied is None:
                return match.group(0)
            return _format_attribute(match, proxied)

        return replace

    def _proxy_value(self, raw_value: str, context: RewriteContext) -> str | None:
        """Proxied form of an attribute value, None to leave it untouched."""
        value = html.unescape(raw_value)
        if not is_proxyable(value):
            return None
        absolute = resolve_url(value, context.base_url)
        if absolute is None:
            return None
        return build_proxy_url(context.app_origin, absolute)

    def _rewrite_forms(self, content: str, context: RewriteContext) -> str:
        fallback_action = build_proxy_url(context.app_origin, context.target_url)

        def replace_action(match: re.Match[str]) -> str:
            if not match.group("value").strip():
                return _format_attribute(match, fallback_action)
            proxied = self._proxy_value(match.group("value"), context)
            if proxied is None:
                return match.group(0)
            return _format_attribute(match, proxied)

        def replace_form(match: re.Match[str]) -> str:
            tag_open = match.group(0)[:5]
            attrs = match.group("attrs")
            # Values are blanked so "Quick action" in a label is not an attribute
            if not _ACTION_NAME.search(_QUOTED_VALUE.sub('""', attrs)):
                # A form without action submits to the current page
                return f'{tag_open} action="{fallback_action}"{attrs}>'
            for pattern in _ACTION_PATTERNS:
                attrs = pattern.sub(replace_action, attrs)
            return f"{tag_open}{attrs}>"

        return _FORM_OPEN.sub(replace_form, content)

    def _insert_base_tag(self, content: str, context: RewriteContext) -> str:
        base_tag = f'<base href="{html.escape(context.base_url)}/">'
        return _HEAD_OPEN.sub(lambda m: m.group(0) + base_tag, content, count=1)

    def _inject_script(self, content: str, context: RewriteContext) -> str:
        script = render_link_fixup_script(context)
        closing = None
        for closing in _BODY_CLOSE.finditer(content):
            pass
        if closing is None:
            return content + script
        return content[: closing.start()] + script + content[closing.start():]


def _format_attribute(match: re.Match[str], value: str) -> str:
    quote_char = match.group("quote")
    if quote_char == "'":
        value = value.replace("'", "&#39;")
    return f"{match.group('prefix')}{quote_char}{value}{quote_char}"


def rewrite_html(content: str, base_url: str, app_origin: str, target_url: str) -> str:
    """Rewrite ``content`` so it browses through the proxy at ``app_origin``."""
    context = RewriteContext(base_url=base_url, app_origin=app_origin, target_url=target_url)
    return HtmlRewriter().rewrite(content, context)
