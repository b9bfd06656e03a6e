"""Compact player summary models.

Outbound player lists are published with single-letter keys and without
zero-valued fields to keep the payload small. The models below carry readable
field names and map them to the short keys through ``serialization_alias``;
dump them with ``by_alias=True, exclude_defaults=True``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CompactCharacter(BaseModel):
    model_config = ConfigDict(frozen=True)

    flags: int = Field(default=0, serialization_alias="a")
    full_name: str = Field(default="", serialization_alias="b")
    id: int = Field(default=0, serialization_alias="c")


class CompactVehicle(BaseModel):
    model_config = ConfigDict(frozen=True)

    driving: bool = Field(default=False, serialization_alias="a")
    id: int = Field(default=0, serialization_alias="b")
    model: str = Field(default="", serialization_alias="c")
    name: str = Field(default="", serialization_alias="d")


class CompactPlayer(BaseModel):
    """Summary of one live player.

    ``movement`` is ``"x,y,z,heading[,speed]"`` with one decimal, see
    :func:`pytrail.ingestion.normalize.movement_data`.
    """

    model_config = ConfigDict(frozen=True)

    afk: int = Field(default=0, serialization_alias="a")
    character: CompactCharacter | None = Field(default=None, serialization_alias="b")
    movement: str = Field(default="", serialization_alias="c")
    flags: int = Field(default=0, serialization_alias="d")
    invisible_since: int = Field(default=0, serialization_alias="e")
    name: str = Field(default="", serialization_alias="f")
    source: int = Field(default=0, serialization_alias="g")
    steam: str = Field(default="", serialization_alias="h")
    vehicle: CompactVehicle | None = Field(default=None, serialization_alias="i")


class OnDutyPlayer(BaseModel):
    """A player currently on duty, as reported by the server's duty list."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    department: str = ""
    character_id: int = 0
    steam_identifier: str = ""


class CompactDutyPlayer(BaseModel):
    model_config = ConfigDict(frozen=True)

    department: str = Field(default="", serialization_alias="a")
    character_id: int = Field(default=0, serialization_alias="b")
    steam_identifier: str = Field(default="", serialization_alias="c")
