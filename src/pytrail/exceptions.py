"""Custom exception hierarchy for pytrail."""

from __future__ import annotations


class TrailError(Exception):
    """Base exception for all pytrail errors."""


class TrailConfigError(TrailError):
    """Invalid or missing configuration."""


class TrailStorageError(TrailError):
    """Durable history could not be written."""

    def __init__(self, message: str, *, identity: str = "") -> None:
        self.identity = identity
        super().__init__(message)


class TrailTransportError(TrailError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)
