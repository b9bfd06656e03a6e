"""Helpers for safe debug logging.

Player feeds carry platform account identifiers (Steam, Rockstar license,
Discord, IP address). This module masks them before payload fragments are
written to logs, keeping only the platform prefix (``steam:<redacted>``) so a
log line still tells which kind of identifier was involved.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_IDENTIFIER_KEYS: frozenset[str] = frozenset(
    {
        "steamidentifier",
        "identifier",
        "identifiers",
        "license",
        "license2",
        "discord",
        "ip",
        "endpoint",
        "token",
    }
)

_MAX_DEPTH = 8
_REDACTED = "<redacted>"


def mask_identifier(value: Any) -> Any:
    """Mask an identifier, or every identifier of a list, keeping ``platform:`` prefixes."""
    if isinstance(value, str):
        platform, sep, _ = value.partition(":")
        return f"{platform}:{_REDACTED}" if sep and platform.isalnum() else _REDACTED
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [mask_identifier(item) for item in value]
    return _REDACTED


def redact_for_log(value: Any, *, max_string: int = 256) -> Any:
    """Return a copy of *value* with identifiers masked and long strings cut."""
    return _redact(value, max_string, 0)


def _redact(value: Any, max_string: int, depth: int) -> Any:
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"

    if value is None or isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if depth >= _MAX_DEPTH:
        return "<max-depth>"

    if isinstance(value, Mapping):
        return {
            str(key): mask_identifier(item)
            if str(key).lower() in _IDENTIFIER_KEYS
            else _redact(item, max_string, depth + 1)
            for key, item in value.items()
        }

    if isinstance(value, Sequence):
        return [_redact(item, max_string, depth + 1) for item in value]

    return repr(value)
