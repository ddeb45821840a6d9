"""Helpers for safe debug logging.

The shared AppState document carries tenant personal data (contact
details, identity documents, signatures).  This module provides a small
utility to redact those fields before emitting DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "email",
        "phone",
        "phonenumber",
        "currentlandlordphone",
        "password",
        "signature",
        "dob",
        "verificationidnumber",
        "verificationurl",
        "passportphotourl",
        "profilepictureurl",
        "token",
        "authorization",
    }
)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs.

    Inline ``data:`` URLs (uploaded images and signatures) are replaced by
    their length, other long strings are truncated.
    """
    if _depth > 20:
        return "<max-depth>"

    if value is None or isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, str):
        if value.startswith("data:"):
            return f"<data-url:{len(value)}b>"
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"

    if isinstance(value, Mapping):
        return {
            str(key): "<redacted>"
            if str(key).lower() in _SENSITIVE_VALUE_KEYS
            else redact_for_log(item, max_string=max_string, _depth=_depth + 1)
            for key, item in value.items()
        }

    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]

    return repr(value)


def summarize_state(document: Mapping[str, Any]) -> dict[str, Any]:
    """Collection sizes of a serialized AppState, for one-line log records."""
    summary: dict[str, Any] = {}
    for key, value in document.items():
        if isinstance(value, list):
            summary[key] = len(value)
    current = document.get("currentUser")
    summary["currentUser"] = current.get("id") if isinstance(current, Mapping) else None
    return summary


def describe_validation_error(exc: ValidationError) -> str:
    """Error count and locations of *exc* without the offending input values."""
    locations = sorted({".".join(str(part) for part in error["loc"]) or "<root>" for error in exc.errors()})
    return f"{exc.error_count()} error(s) at {', '.join(locations)}"
