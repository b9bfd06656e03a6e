"""HTTP transport for server player feeds."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from pytrail._constants import USER_AGENT
from pytrail.exceptions import TrailTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the poller.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`PlayerFeedTransport`) concrete.
    """

    async def fetch_players(self, url: str) -> list[Any]:
        ...


class PlayerFeedTransport:
    """Fetch the live player list of a game server over HTTP."""

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float = 10.0) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def fetch_players(self, url: str) -> list[Any]:
        """GET *url* and return its player list.

        The feed is either a JSON list of player records or an object carrying
        them under ``players``.
        """
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise TrailTransportError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=url,
                    )
        except TrailTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise TrailTransportError(f"Request to {url} failed: {exc}", endpoint=url) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise TrailTransportError(f"Invalid JSON from {url}: {text[:200]}", endpoint=url) from exc

        if isinstance(body, dict):
            body = body.get("players")
        if not isinstance(body, list):
            raise TrailTransportError(f"Missing player list in response from {url}", endpoint=url)
        return body
