"""Runtime configuration for pytrail."""

from __future__ import annotations

import dataclasses
import os
from datetime import tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pytrail._constants import DEFAULT_HISTORY_DIR
from pytrail.exceptions import TrailConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _parse_mode(name: str, value: str) -> int:
    try:
        return int(value, 8)
    except ValueError as exc:
        raise TrailConfigError(f"{name} must be an octal file mode, got {value!r}") from exc


def _parse_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise TrailConfigError(f"{name} must be a number, got {value!r}") from exc


def parse_servers(value: str) -> dict[str, str]:
    """Parse ``name=url,name=url`` into a mapping of server scope to feed URL."""
    servers: dict[str, str] = {}
    for chunk in value.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        name, sep, url = chunk.partition("=")
        name, url = name.strip(), url.strip()
        if not sep or not name or not url:
            raise TrailConfigError(f"server entry must look like NAME=URL, got {chunk!r}")
        servers[name] = url
    return servers


@dataclasses.dataclass(frozen=True)
class TrailConfig:
    """Tracker configuration.

    Parameters
    ----------
    history_dir : str
        Base directory of the per-identity history files.
    per_server : bool
        Store each server scope under its own sub-directory. When ``False``
        (the default) all scopes share ``history_dir`` and an identity seen on
        two servers ends up in a single file.
    dir_mode : int
        Permission bits of created history directories.
    file_mode : int
        Permission bits of written history files.
    time_zone : str or None
        IANA zone used for day-bucket keys. ``None`` uses the host's local zone.
    servers : dict
        Server scope name to player feed URL.
    poll_interval : float
        Seconds between two polling cycles.
    request_timeout : float
        Total timeout of one feed request in seconds.
    """

    history_dir: str = DEFAULT_HISTORY_DIR
    per_server: bool = False
    dir_mode: int = 0o755
    file_mode: int = 0o644
    time_zone: str | None = None
    servers: dict[str, str] = dataclasses.field(default_factory=dict)
    poll_interval: float = 10.0
    request_timeout: float = 10.0

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise TrailConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.request_timeout <= 0:
            raise TrailConfigError(f"request_timeout must be positive, got {self.request_timeout}")

    def tzinfo(self) -> tzinfo | None:
        """Resolve :attr:`time_zone`, ``None`` meaning the host's local zone."""
        if not self.time_zone:
            return None
        try:
            return ZoneInfo(self.time_zone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise TrailConfigError(f"unknown time zone {self.time_zone!r}") from exc

    @classmethod
    def from_env(cls, **overrides: Any) -> TrailConfig:
        """Create configuration from ``TRAIL_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        history_dir = env.get("TRAIL_HISTORY_DIR")
        if history_dir:
            config_kwargs["history_dir"] = history_dir

        if "per_server" not in overrides:
            config_kwargs["per_server"] = _env_bool(env.get("TRAIL_HISTORY_PER_SERVER"), False)

        _ENV_MODE_MAP = {
            "TRAIL_DIR_MODE": "dir_mode",
            "TRAIL_FILE_MODE": "file_mode",
        }
        for env_key, field_name in _ENV_MODE_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _parse_mode(env_key, val)

        time_zone = env.get("TRAIL_TIME_ZONE")
        if time_zone:
            config_kwargs["time_zone"] = time_zone

        servers = env.get("TRAIL_SERVERS")
        if servers is not None and "servers" not in overrides:
            config_kwargs["servers"] = parse_servers(servers)

        _ENV_FLOAT_MAP = {
            "TRAIL_POLL_INTERVAL": "poll_interval",
            "TRAIL_REQUEST_TIMEOUT": "request_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _parse_float(env_key, val)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
