"""Data models for player history and outbound summaries."""

from pytrail.models.history import DAY_MAP_ADAPTER, DayMap, Sample, copy_day_map
from pytrail.models.summary import (
    CompactCharacter,
    CompactDutyPlayer,
    CompactPlayer,
    CompactVehicle,
    OnDutyPlayer,
)

__all__ = [
    "DAY_MAP_ADAPTER",
    "CompactCharacter",
    "CompactDutyPlayer",
    "CompactPlayer",
    "CompactVehicle",
    "DayMap",
    "OnDutyPlayer",
    "Sample",
    "copy_day_map",
]
