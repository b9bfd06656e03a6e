"""In-memory rolling position history.

This is the only component allowed to mutate tracked history. It is fed one
player list per polling cycle and keeps, per server scope and identity, the
samples of the last seven days that are backed by a :class:`HistoryRepository`.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, tzinfo
from typing import Any

from pytrail._constants import DAY_FORMAT, FLUSH_INTERVAL, RETENTION
from pytrail.exceptions import TrailStorageError
from pytrail.ingestion.players import TrackedPosition, extract_position
from pytrail.models.history import DayMap, Sample, copy_day_map
from pytrail.state.repository import HistoryRepository

_logger = logging.getLogger(__name__)

_EPOCH = datetime.fromtimestamp(0, tz=UTC)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class HistoryStore:
    """Per-server, per-identity, per-day position history.

    Only identities present in the latest cycle of a server are kept in
    memory; everything else lives in the repository until the identity shows
    up again.
    """

    def __init__(
        self,
        repository: HistoryRepository,
        *,
        clock: Callable[[], datetime] = _utcnow,
        tz: tzinfo | None = None,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._tz = tz
        self._lock = threading.Lock()
        self._servers: dict[str, dict[str, DayMap]] = {}
        self._last_flush = _EPOCH

    @property
    def last_flush(self) -> datetime:
        with self._lock:
            return self._last_flush

    def _day_key(self, now: datetime) -> str:
        return now.astimezone(self._tz).strftime(DAY_FORMAT)

    def _day_start(self, day: str) -> datetime | None:
        try:
            parsed = datetime.strptime(day, DAY_FORMAT)
        except ValueError:
            return None
        if self._tz is None:
            return parsed.astimezone()
        return parsed.replace(tzinfo=self._tz)

    def ingest(self, records: Iterable[Any], server: str) -> None:
        """Record one polling cycle of *server*.

        All samples of the cycle share one timestamp. Never raises for bad
        records or storage failures; those are logged and skipped.
        """
        now = self._clock()
        if now.tzinfo is None:
            now = now.astimezone()
        day = self._day_key(now)
        timestamp = int(now.timestamp())

        positions: list[TrackedPosition] = []
        for record in records:
            position = extract_position(record, timestamp)
            if position is not None:
                positions.append(position)
        seen = dict.fromkeys(position.identity for position in positions)

        with self._lock:
            resident = self._servers.setdefault(server, {})
            missing = [identity for identity in seen if identity not in resident]

        # Cold identities are read without holding the table lock.
        loaded = {identity: self._load(server, identity) for identity in missing}

        with self._lock:
            resident = self._servers[server]
            for identity, days in loaded.items():
                resident.setdefault(identity, days)

            for position in positions:
                days = resident.get(position.identity)
                if days is None:
                    # Evicted by a concurrent cycle between the two lock sections.
                    days = resident[position.identity] = self._load(server, position.identity)
                days.setdefault(day, []).append(position.sample)

            for identity in seen:
                self._sweep(resident[identity], now)

            pending: dict[str, DayMap] = {}
            if now - self._last_flush > FLUSH_INTERVAL:
                pending = {identity: copy_day_map(resident[identity]) for identity in seen}
                self._last_flush = now

            for identity in [identity for identity in resident if identity not in seen]:
                del resident[identity]

        for identity, days in pending.items():
            try:
                self._repository.save(server, identity, days)
            except TrailStorageError as exc:
                _logger.warning("Flushing history failed: %s", exc)
            except Exception:
                _logger.warning("Flushing history of %s failed", identity, exc_info=True)

    def _load(self, server: str, identity: str) -> DayMap:
        try:
            return self._repository.load(server, identity)
        except Exception:
            _logger.warning("Loading history of %s failed; starting empty", identity, exc_info=True)
            return {}

    def _sweep(self, days: DayMap, now: datetime) -> None:
        for day in list(days):
            start = self._day_start(day)
            if start is None or now - start > RETENTION:
                del days[day]

    def get_history(self, server: str, identity: str) -> DayMap:
        """Copy of the resident history of *identity*, empty when not in memory."""
        with self._lock:
            days = self._servers.get(server, {}).get(identity)
            return copy_day_map(days) if days is not None else {}

    def get_samples(self, server: str, identity: str, day: str) -> list[Sample]:
        with self._lock:
            return list(self._servers.get(server, {}).get(identity, {}).get(day, []))

    def resident_identities(self, server: str) -> set[str]:
        with self._lock:
            return set(self._servers.get(server, {}))

    def servers(self) -> set[str]:
        with self._lock:
            return set(self._servers)
