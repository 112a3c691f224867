# utils/log_sanitizer.py
"""
Masks credentials, tokens and cookie values before they reach a log line.
"""

import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

MASK = "***"

_SENSITIVE_QUERY_KEYS = re.compile(r"^(api[-_]?key|token|auth|access[-_]?token|password)$", re.IGNORECASE)
_CREDENTIALS_IN_URL = re.compile(r"://([^:/@\s]+):([^@/\s]+)@")
_BEARER = re.compile(r"(Bearer\s+)([A-Za-z0-9\-._~+/]+=*)", re.IGNORECASE)
_JWT = re.compile(r"\beyJ[A-Za-z0-9\-._~+/]+=*")
_AUTH_HEADER = re.compile(r"(Authorization:\s*)(\S+)", re.IGNORECASE)
_SET_COOKIE = re.compile(r"(Set-Cookie:\s*)([^;]+)", re.IGNORECASE)
_JSON_COOKIE = re.compile(r'("cookie"\s*:\s*")([^"]+)"', re.IGNORECASE)
_COOKIE_PAIR = re.compile(r"(\bcookie\s*=\s*)([^;\s]+)", re.IGNORECASE)
_QUERY_TOKEN = re.compile(r"([?&](?:api[-_]?key|token|auth)=)([^&\s]+)", re.IGNORECASE)


def sanitize_url(url: str) -> str:
    """Replace user:password and sensitive query values in a URL with ***."""
    if not url:
        return url
    try:
        parts = urlsplit(url)
    except ValueError:
        return _CREDENTIALS_IN_URL.sub(f"://{MASK}:{MASK}@", url)

    netloc = parts.netloc
    if "@" in netloc:
        host = netloc.rsplit("@", 1)[1]
        netloc = f"{MASK}:{MASK}@{host}"

    query = parts.query
    if query:
        pairs = parse_qsl(query, keep_blank_values=True)
        if any(_SENSITIVE_QUERY_KEYS.match(key) for key, _ in pairs):
            query = urlencode([(key, MASK if _SENSITIVE_QUERY_KEYS.match(key) else value) for key, value in pairs],
                              safe="*")

    if netloc == parts.netloc and query == parts.query:
        return url
    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))


def sanitize_text(text: str) -> str:
    """Mask tokens, cookies and URL credentials found anywhere in free text."""
    if not text:
        return text
    sanitized = _CREDENTIALS_IN_URL.sub(f"://{MASK}:{MASK}@", text)
    sanitized = _BEARER.sub(rf"\1{MASK}", sanitized)
    sanitized = _JWT.sub(f"eyJ{MASK}", sanitized)
    sanitized = _AUTH_HEADER.sub(rf"\1{MASK}", sanitized)
    sanitized = _SET_COOKIE.sub(rf"\1{MASK}", sanitized)
    sanitized = _JSON_COOKIE.sub(rf'\1{MASK}"', sanitized)
    sanitized = _COOKIE_PAIR.sub(rf"\1{MASK}", sanitized)
    sanitized = _QUERY_TOKEN.sub(rf"\1{MASK}", sanitized)
    return sanitized
