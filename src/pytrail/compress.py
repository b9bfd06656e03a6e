"""Compact player summaries for outbound publication."""

from __future__ import annotations

import gzip
import io
import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ValidationError

from pytrail.ingestion.normalize import get_bool, get_int, get_map, get_string, movement_data
from pytrail.models.summary import (
    CompactCharacter,
    CompactDutyPlayer,
    CompactPlayer,
    CompactVehicle,
    OnDutyPlayer,
)

_logger = logging.getLogger(__name__)


def compress_player(player: Mapping[str, Any]) -> CompactPlayer:
    character_data = get_map("character", player)
    character: CompactCharacter | None = None
    if character_data is not None:
        character = CompactCharacter(
            flags=get_int("flags", character_data),
            full_name=get_string("fullName", character_data),
            id=get_int("id", character_data),
        )

    vehicle_data = get_map("vehicle", player)
    vehicle: CompactVehicle | None = None
    if vehicle_data is not None:
        vehicle = CompactVehicle(
            driving=get_bool("driving", vehicle_data),
            id=get_int("id", vehicle_data),
            model=get_string("model", vehicle_data, try_float=True),
            name=get_string("name", vehicle_data),
        )

    return CompactPlayer(
        afk=get_int("afkSince", player, ignore_invalid=True),
        character=character,
        movement=movement_data(player),
        flags=get_int("flags", player),
        invisible_since=get_int("invisible_since", player),
        name=get_string("name", player),
        source=get_int("source", player),
        steam=get_string("steamIdentifier", player),
        vehicle=vehicle,
    )


def compress_players(players: Iterable[Any]) -> list[CompactPlayer]:
    """Summarize raw player records; non-mapping entries are skipped."""
    compressed: list[CompactPlayer] = []
    for player in players:
        if not isinstance(player, Mapping):
            _logger.debug("Skipping non-mapping player record of type %s", type(player).__name__)
            continue
        compressed.append(compress_player(player))
    return compressed


def compress_duty_players(players: Iterable[OnDutyPlayer | Mapping[str, Any]]) -> list[CompactDutyPlayer]:
    """Summarize duty entries, accepting parsed models or raw mappings."""
    compressed: list[CompactDutyPlayer] = []
    for player in players:
        if not isinstance(player, OnDutyPlayer):
            try:
                player = OnDutyPlayer.model_validate(player)
            except ValidationError:
                _logger.warning("Unable to read duty player entry", exc_info=True)
                continue
        compressed.append(
            CompactDutyPlayer(
                department=player.department,
                character_id=player.character_id,
                steam_identifier=player.steam_identifier,
            )
        )
    return compressed


def dump_compact(models: Sequence[BaseModel]) -> bytes:
    """JSON-encode summaries with their short keys, omitting zero values."""
    dumped = [model.model_dump(mode="json", by_alias=True, exclude_defaults=True) for model in models]
    return json.dumps(dumped, separators=(",", ":")).encode("utf-8")


def gzip_bytes(data: bytes) -> bytes:
    """Gzip *data*; on failure the error is logged and the partial buffer returned."""
    buffer = io.BytesIO()
    try:
        with gzip.GzipFile(fileobj=buffer, mode="wb") as handle:
            handle.write(data)
    except OSError:
        _logger.error("GZIP compression failed", exc_info=True)
    return buffer.getvalue()
