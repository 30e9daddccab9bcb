"""
Header redaction for logs.

Request headers routinely carry credentials (Authorization, API keys,
cookies); everything logged by the plugin goes through ``sanitize_headers``.
"""

import re
from typing import Any, Dict, List

REDACTED = "[REDACTED]"

SENSITIVE_HEADER_NAMES = {
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "x-auth-token",
    "x-access-token",
    "www-authenticate",
}

# Substrings that mark a custom header as sensitive
SENSITIVE_KEY_PARTS = ("token", "secret", "password", "passwd", "api_key", "apikey", "credential", "session")

SENSITIVE_VALUE_PATTERNS: List[re.Pattern] = [
    re.compile(r"^Bearer\s+\S+", re.IGNORECASE),
    re.compile(r"^Basic\s+[A-Za-z0-9+/=]+", re.IGNORECASE),
    # JWT (header.payload.signature)
    re.compile(r"^eyJ[A-Za-z0-9\-_]+\.eyJ[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+$"),
]


def _is_sensitive_key(key: Any) -> bool:
    if not isinstance(key, str):
        return False
    key_lower = key.lower()
    if key_lower in SENSITIVE_HEADER_NAMES:
        return True
    normalized = key_lower.replace("-", "_")
    return any(part in normalized for part in SENSITIVE_KEY_PARTS)


def _is_sensitive_value(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return any(pattern.search(value) for pattern in SENSITIVE_VALUE_PATTERNS)


def sanitize_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of headers with credential-bearing values redacted.

    Args:
        headers: Header mapping

    Returns:
        New mapping; the input is not modified
    """
    result = {}
    for key, value in (headers or {}).items():
        if _is_sensitive_key(key) or _is_sensitive_value(value):
            result[key] = REDACTED
        else:
            result[key] = value
    return result
