"""Turn raw player records into position samples.

A record contributes a sample only when it is a mapping with numeric
coordinates, a loaded character, visible status, and a steam identifier.
Anything else is skipped without affecting the rest of the cycle.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, NamedTuple

from pytrail._redact import redact_for_log
from pytrail.ingestion.normalize import read_xyz, round_half_away
from pytrail.models.history import Sample

_logger = logging.getLogger(__name__)


class TrackedPosition(NamedTuple):
    identity: str
    sample: Sample


def normalize_identity(identifier: str) -> str:
    """Make an identifier safe to use as a file name (``steam:11`` -> ``steam_11``)."""
    return identifier.replace(":", "_")


def extract_position(record: Any, timestamp: int) -> TrackedPosition | None:
    """Return the identity and rounded position of *record*, or ``None`` if it is not tracked."""
    if not isinstance(record, Mapping):
        _logger.debug("Skipping non-mapping player record: %r", redact_for_log(record, max_string=64))
        return None

    coords = record.get("coords")
    if coords is None:
        return None

    # `character` is a mapping when loaded, false while in character selection.
    if record.get("character") is False:
        return None
    if record.get("invisible") is True:
        return None

    if not isinstance(coords, Mapping):
        _logger.debug("Skipping player with unreadable coords: %r", redact_for_log(record))
        return None
    xyz = read_xyz(coords)
    if xyz is None:
        _logger.debug("Skipping player with non-numeric coords: %r", redact_for_log(record))
        return None

    identifier = record.get("steamIdentifier")
    if not isinstance(identifier, str) or not identifier:
        _logger.debug("Skipping player without steam identifier: %r", redact_for_log(record))
        return None

    x, y, z = xyz
    sample = Sample(x=round_half_away(x), y=round_half_away(y), z=round_half_away(z), timestamp=timestamp)
    return TrackedPosition(normalize_identity(identifier), sample)
