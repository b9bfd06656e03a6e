"""Position history models."""

from __future__ import annotations

from typing import TypeAlias

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class Sample(BaseModel):
    """One recorded position of a player.

    Parameters
    ----------
    x, y, z : int
        World coordinates, rounded to whole units.
    timestamp : int
        Unix time (seconds) of the polling cycle that observed the position.
        Serialized as ``t``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    x: int
    y: int
    z: int
    timestamp: int = Field(alias="t")


DayMap: TypeAlias = dict[str, list[Sample]]
"""Samples of one identity keyed by ``YYYY-MM-DD`` day."""

DAY_MAP_ADAPTER: TypeAdapter[DayMap] = TypeAdapter(DayMap)


def copy_day_map(days: DayMap) -> DayMap:
    """Shallow per-bucket copy; samples are immutable and shared."""
    return {day: list(samples) for day, samples in days.items()}
