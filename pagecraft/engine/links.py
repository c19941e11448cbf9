"""Link label and URL sanitization."""

import re
from urllib.parse import quote, urlsplit

ALLOWED_LINK_SCHEMES = frozenset({"http", "https", "mailto", "tel"})
DEFAULT_LINK_LABEL = "Open Link"
MAX_LINK_LABEL_LENGTH = 120

_URL_SCHEME_PREFIX = re.compile(r"^[a-zA-Z][a-zA-Z\d+.-]*:")
_LIKELY_HOST_PREFIX = re.compile(
    r"^(localhost(?::\d+)?|(?:[a-z0-9-]+\.)+[a-z]{2,})(?:[/:?#]|$)",
    re.IGNORECASE,
)
_VALID_HOST = re.compile(r"^[^\s\"<>%\\^`{|}]+$")
_URL_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_URL_QUERY_SAFE = _URL_PATH_SAFE + "?"


def sanitize_link_label(label: object) -> str:
    """Trimmed label, capped in length, with a default when empty."""
    trimmed = label.strip() if isinstance(label, str) else ""
    if not trimmed:
        return DEFAULT_LINK_LABEL
    return trimmed[:MAX_LINK_LABEL_LENGTH]


def sanitize_link_url(url: object) -> str:
    """Normalize a user-entered URL, or return "" when it is not allowed.

    Bare hosts ("example.com/page") get an https:// prefix. Only http, https,
    mailto and tel survive.
    """
    raw = url.strip() if isinstance(url, str) else ""
    if not raw:
        return ""

    if _URL_SCHEME_PREFIX.match(raw) or raw.startswith("//"):
        candidate = raw
    elif _LIKELY_HOST_PREFIX.match(raw):
        candidate = f"https://{raw}"
    else:
        candidate = raw

    try:
        parsed = urlsplit(candidate)
    except ValueError:
        return ""

    scheme = parsed.scheme.lower()
    if scheme not in ALLOWED_LINK_SCHEMES:
        return ""

    if scheme in ("http", "https"):
        try:
            hostname = parsed.hostname
            parsed.port  # raises on a malformed port
        except ValueError:
            return ""
        if not hostname or not _VALID_HOST.match(hostname):
            return ""
        # Keep the URL stable across repeated sanitization
        return parsed._replace(
            scheme=scheme,
            netloc=parsed.netloc.lower(),
            path=quote(parsed.path or "/", safe=_URL_PATH_SAFE),
            query=quote(parsed.query, safe=_URL_QUERY_SAFE),
            fragment=quote(parsed.fragment, safe=_URL_QUERY_SAFE),
        ).geturl()

    return candidate
