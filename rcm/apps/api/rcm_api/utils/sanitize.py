"""Secret / credential sanitizer for log output.

Two-tier string processing:
 1. > MAX_STR_LOG   → truncate + sha256, never run regex
 2. ≤ MAX_STR_LOG   → regex replacement of bearer tokens, JWTs and bcrypt hashes

Dict values under sensitive keys (passwords, hashes, tokens, keys) are always
replaced, whatever their length.
"""

import hashlib
import re
import traceback
from typing import Any

MAX_STR_LOG: int = 2048
MAX_DEPTH: int = 6

REDACTED = "[REDACTED]"

_SENSITIVE_KEYS: frozenset[str] = frozenset({
    "password", "password_hash", "authorization", "cookie",
    "token", "access_token", "refresh_token",
    "apikey", "api_key", "service_role_key", "secret",
})

_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"Bearer \S+"),
    # bcrypt: $2a$/$2b$/$2y$ + cost + 53 chars of salt+hash
    re.compile(r"\$2[aby]\$\d{2}\$[./A-Za-z0-9]{53}"),
    # JWT: three base64url segments, header starts with eyJ
    re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"),
]


def sanitize_str(s: str) -> str:
    """Return ``s`` with credentials replaced; overly long strings are truncated."""
    if not isinstance(s, str):
        return s  # type: ignore[return-value]

    n = len(s)
    if n > MAX_STR_LOG:
        digest = hashlib.sha256(s.encode("utf-8", errors="replace")).hexdigest()[:16]
        return f"[TRUNCATED len={n} sha256={digest}]"

    result = s
    for pattern in _PATTERNS:
        result = pattern.sub(REDACTED, result)
    return result


def sanitize_obj(obj: Any, depth: int = 0) -> Any:
    """Recursively sanitize a log extra value.

    - dict: redact sensitive keys, recurse others
    - list/tuple: recurse each element
    - str: run sanitize_str()
    - other: return as-is
    """
    if depth >= MAX_DEPTH:
        return "[DEPTH_LIMIT]"

    if isinstance(obj, dict):
        result: dict[str, Any] = {}
        for key, value in obj.items():
            if isinstance(key, str) and key.lower() in _SENSITIVE_KEYS:
                result[key] = REDACTED
            else:
                result[key] = sanitize_obj(value, depth + 1)
        return result

    if isinstance(obj, (list, tuple)):
        return [sanitize_obj(item, depth + 1) for item in obj]

    if isinstance(obj, str):
        return sanitize_str(obj)

    return obj


def is_sensitive_key(key: str) -> bool:
    return key.lower() in _SENSITIVE_KEYS


def sanitize_exc(exc_info: tuple) -> str:
    """Format an exc_info tuple into a sanitized traceback string (no locals)."""
    _type, value, _tb = exc_info
    if value is None:
        return ""
    try:
        te = traceback.TracebackException.from_exception(value, capture_locals=False)
        return sanitize_str("".join(te.format()))
    except Exception:
        return "[TRACEBACK_FORMAT_ERROR]"
