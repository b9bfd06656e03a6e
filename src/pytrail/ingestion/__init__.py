"""Ingestion layer.

Lenient readers over raw player feed records and the extraction of tracked
positions from them.
"""

from pytrail.ingestion.players import TrackedPosition, extract_position, normalize_identity

__all__ = ["TrackedPosition", "extract_position", "normalize_identity"]
