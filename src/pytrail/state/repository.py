"""Durable storage of per-identity position history.

The store talks to storage only through :class:`HistoryRepository`, so tests
and alternative backends can pass any object with matching ``load`` / ``save``
methods.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from pytrail._constants import DEFAULT_HISTORY_DIR, HISTORY_FILE_SUFFIX
from pytrail.config import TrailConfig
from pytrail.exceptions import TrailStorageError
from pytrail.models.history import DAY_MAP_ADAPTER, DayMap, copy_day_map

_logger = logging.getLogger(__name__)


class HistoryRepository(Protocol):
    """Structural storage interface used by :class:`pytrail.state.store.HistoryStore`."""

    def load(self, server: str, identity: str) -> DayMap:
        """Return the stored day map, or an empty one when nothing usable is stored.

        Must not raise for missing or corrupt data.
        """
        ...

    def save(self, server: str, identity: str, days: DayMap) -> None:
        """Replace the stored day map. Raises :class:`TrailStorageError` on failure."""
        ...


class JsonFileHistoryRepository:
    """One JSON file per identity under a base directory.

    With ``per_server=False`` files live directly in ``base_dir`` and are
    shared by every server scope; ``per_server=True`` adds a sub-directory per
    scope.
    """

    def __init__(
        self,
        base_dir: str | os.PathLike[str] = DEFAULT_HISTORY_DIR,
        *,
        per_server: bool = False,
        dir_mode: int = 0o755,
        file_mode: int = 0o644,
    ) -> None:
        self._base_dir = Path(base_dir)
        self._per_server = per_server
        self._dir_mode = dir_mode
        self._file_mode = file_mode

    @classmethod
    def from_config(cls, config: TrailConfig) -> JsonFileHistoryRepository:
        return cls(
            config.history_dir,
            per_server=config.per_server,
            dir_mode=config.dir_mode,
            file_mode=config.file_mode,
        )

    def path_for(self, server: str, identity: str) -> Path:
        """Return the history file of *identity*.

        Raises :class:`TrailStorageError` when the path would resolve outside
        ``base_dir``, e.g. for identities containing ``/`` or ``..``.
        """
        directory = self._base_dir
        if self._per_server:
            directory = directory / server.replace(os.sep, "_")
        path = directory / f"{identity}{HISTORY_FILE_SUFFIX}"

        base = self._base_dir.resolve()
        resolved = path.resolve()
        if resolved == base or not resolved.is_relative_to(base) or resolved.parent != directory.resolve():
            raise TrailStorageError(f"History path for {identity!r} leaves {self._base_dir}", identity=identity)
        return path

    def load(self, server: str, identity: str) -> DayMap:
        try:
            path = self.path_for(server, identity)
        except TrailStorageError:
            _logger.debug("Refusing to load history for %r: unsafe path", identity)
            return {}
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError:
            _logger.debug("History file %s is unreadable; starting empty", path, exc_info=True)
            return {}

        try:
            return DAY_MAP_ADAPTER.validate_json(raw)
        except ValidationError:
            _logger.debug("History file %s is corrupt; starting empty", path, exc_info=True)
            return {}

    def save(self, server: str, identity: str, days: DayMap) -> None:
        path = self.path_for(server, identity)
        payload = DAY_MAP_ADAPTER.dump_json(days, by_alias=True)

        tmp_name: str | None = None
        try:
            path.parent.mkdir(mode=self._dir_mode, parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "wb",
                dir=path.parent,
                prefix=f".{identity}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
            os.chmod(tmp_name, self._file_mode)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise TrailStorageError(f"Writing {path} failed: {exc}", identity=identity) from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

        _logger.debug("Flushed %d day(s) for %s to %s", len(days), identity, path)


class InMemoryHistoryRepository:
    """Repository keeping day maps in a dict; for tests and ephemeral runs."""

    def __init__(self, initial: dict[tuple[str, str], DayMap] | None = None) -> None:
        self.saved: dict[tuple[str, str], DayMap] = {
            key: copy_day_map(days) for key, days in (initial or {}).items()
        }
        self.save_count = 0

    def load(self, server: str, identity: str) -> DayMap:
        days = self.saved.get((server, identity))
        return copy_day_map(days) if days is not None else {}

    def save(self, server: str, identity: str, days: DayMap) -> None:
        self.saved[(server, identity)] = copy_day_map(days)
        self.save_count += 1
