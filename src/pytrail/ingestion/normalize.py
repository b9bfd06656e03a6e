"""Lenient field readers.

Player feeds are loosely typed: a field may be absent, ``None``, or carry a
value of the wrong type. The readers below return a zero default in all of
those cases and log a warning only when a value is present but unusable.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from pytrail._redact import redact_for_log

_logger = logging.getLogger(__name__)


def _warn_unreadable(value: Any, key: str, kind: str) -> None:
    _logger.warning("Unable to read %r (%s) as %s", redact_for_log(value, max_string=64), key, kind)


def is_number(value: Any) -> bool:
    """Return True for ints and floats, excluding bools."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def as_finite_float(value: Any) -> float | None:
    """Return *value* as a finite float, or ``None`` for non-numbers, NaN, infinities and ints too large for a float."""
    if not is_number(value):
        return None
    try:
        result = float(value)
    except OverflowError:
        return None
    return result if math.isfinite(result) else None


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (``-2.5 -> -3``)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def get_float(key: str, data: Mapping[str, Any]) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    result = as_finite_float(value)
    if result is not None:
        return result
    _warn_unreadable(value, key, "float")
    return 0.0


def get_int(key: str, data: Mapping[str, Any], *, ignore_invalid: bool = False) -> int:
    """Read an integer; floats are truncated toward zero."""
    value = data.get(key)
    if value is None:
        return 0
    result = as_finite_float(value)
    if result is not None:
        return int(result)
    if not ignore_invalid:
        _warn_unreadable(value, key, "int")
    return 0


def get_string(key: str, data: Mapping[str, Any], *, try_float: bool = False) -> str:
    """Read a string.

    With ``try_float`` a numeric value is rendered without decimals, which is
    how vehicle model hashes arrive from some servers.
    """
    value = data.get(key)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if try_float:
        number = as_finite_float(value)
        if number is not None:
            return f"{number:.0f}"
    _warn_unreadable(value, key, "string")
    return ""


def get_bool(key: str, data: Mapping[str, Any]) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    _warn_unreadable(value, key, "bool")
    return False


def get_map(key: str, data: Mapping[str, Any]) -> Mapping[str, Any] | None:
    """Read a nested mapping.

    A bool is accepted silently and yields ``None``: feeds send ``false`` in
    place of an object when e.g. no character is loaded.
    """
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, Mapping):
        return value
    if not isinstance(value, bool):
        _warn_unreadable(value, key, "map or bool")
    return None


def read_xyz(coords: Mapping[str, Any]) -> tuple[float, float, float] | None:
    """Return the finite numeric ``x``, ``y``, ``z`` of a coordinate mapping, if all present."""
    x, y, z = (as_finite_float(coords.get(axis)) for axis in ("x", "y", "z"))
    if x is None or y is None or z is None:
        return None
    return x, y, z


def movement_data(data: Mapping[str, Any]) -> str:
    """Render ``"x,y,z,heading[,speed]"`` with one decimal.

    Speed is appended only when non-zero. Returns an empty string when the
    record carries no usable coordinates.
    """
    coords = get_map("coords", data)
    if coords is None:
        return ""

    xyz = read_xyz(coords)
    if xyz is None:
        _warn_unreadable(coords, "coords", "xyz")
        return ""

    x, y, z = xyz
    heading = get_float("heading", data)
    speed = get_float("speed", data)

    text = f"{x:.1f},{y:.1f},{z:.1f},{heading:.1f}"
    if speed != 0:
        text += f",{speed:.1f}"
    return text
