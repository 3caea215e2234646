"""Client-side script that proxies anchors added after the page loads."""

from core.request_types import RewriteContext

_JS_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "<": "\\x3c",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

_SCRIPT_TEMPLATE = """<script>
(function() {
  var proxyPath = '/api/proxy/browse?url=';
  var skippedSchemes = ['javascript:', 'mailto:', 'tel:', 'sms:', 'about:', 'data:'];
  var params = new URLSearchParams(window.location.search);
  var targetUrl = params.get('url') || '__TARGET_URL__';
  var baseUrl = '__BASE_URL__';
  try {
    baseUrl = new URL(targetUrl).origin;
  } catch (e) {}
  var appOrigin = window.location.origin || '__APP_ORIGIN__';
  var proxyPrefix = appOrigin + proxyPath;

  function isProxyable(value) {
    if (!value) return false;
    var candidate = value.trim().toLowerCase();
    if (!candidate || candidate.charAt(0) === '#') return false;
    for (var i = 0; i < skippedSchemes.length; i++) {
      if (candidate.indexOf(skippedSchemes[i]) === 0) return false;
    }
    return true;
  }

  function resolve(value) {
    try {
      return new URL(value.trim(), baseUrl + '/').href;
    } catch (e) {
      return null;
    }
  }

  function fixLinks() {
    var anchors = document.querySelectorAll('a[href]');
    for (var i = 0; i < anchors.length; i++) {
      var href = anchors[i].getAttribute('href');
      if (!isProxyable(href) || href.indexOf(proxyPrefix) === 0) continue;
      var absolute = resolve(href);
      if (absolute) {
        anchors[i].setAttribute('href', proxyPrefix + encodeURIComponent(absolute));
      }
    }
  }

  fixLinks();
  if (document.body) {
    new MutationObserver(fixLinks).observe(document.body, {childList: true, subtree: true});
  }
})();
</script>"""


def js_string(value: str) -> str:
    """Escape a value for embedding in a single-quoted JavaScript literal."""
    return "".join(_JS_ESCAPES.get(char, char) for char in value)


def render_link_fixup_script(context: RewriteContext) -> str:
    """Render the script with the request's URLs baked in as fallbacks."""
    return (
        _SCRIPT_TEMPLATE.replace("__TARGET_URL__", js_string(context.target_url))
        .replace("__BASE_URL__", js_string(context.base_url))
        .replace("__APP_ORIGIN__", js_string(context.app_origin))
    )
