"""Player feed polling.

This module owns the periodic "fetch + ingest" loop. How records are turned
into history lives in :mod:`pytrail.state.store`; how they are fetched lives
in :mod:`pytrail._transport`.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

import aiohttp

from pytrail._transport import PlayerFeedTransport, Transport
from pytrail.compress import compress_players, dump_compact, gzip_bytes
from pytrail.config import TrailConfig
from pytrail.exceptions import TrailTransportError
from pytrail.state.store import HistoryStore

_logger = logging.getLogger(__name__)

SummaryCallback = Callable[[str, bytes], Awaitable[None] | None]


async def poll_once(
    store: HistoryStore,
    transport: Transport,
    server: str,
    url: str,
    *,
    on_summary: SummaryCallback | None = None,
) -> int:
    """Fetch one player list and record it.

    Parameters
    ----------
    on_summary
        Optional callback receiving the server name and the gzip'd compact
        player summary of this cycle.

    Returns
    -------
    int
        Number of records in the fetched list.
    """
    players = await transport.fetch_players(url)

    # File I/O in the store is blocking; keep it off the event loop.
    await asyncio.to_thread(store.ingest, players, server)

    if on_summary is not None:
        payload = gzip_bytes(dump_compact(compress_players(players)))
        result = on_summary(server, payload)
        if asyncio.iscoroutine(result):
            await result

    return len(players)


async def run_poller(
    config: TrailConfig,
    store: HistoryStore,
    *,
    transport: Transport | None = None,
    on_summary: SummaryCallback | None = None,
    stop: asyncio.Event | None = None,
) -> None:
    """Poll every configured server each ``poll_interval`` seconds until *stop* is set."""
    if not config.servers:
        _logger.warning("No servers configured; nothing to poll")
        return

    stop = stop or asyncio.Event()
    http_session: aiohttp.ClientSession | None = None
    if transport is None:
        http_session = aiohttp.ClientSession()
        transport = PlayerFeedTransport(http_session, timeout=config.request_timeout)

    try:
        while not stop.is_set():
            for server, url in config.servers.items():
                try:
                    count = await poll_once(store, transport, server, url, on_summary=on_summary)
                except TrailTransportError as exc:
                    _logger.warning("Polling %s failed: %s", server, exc)
                    continue
                except Exception:
                    _logger.exception("Polling cycle for %s failed", server)
                    continue
                _logger.debug("Polled %d player(s) from %s", count, server)

            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(stop.wait(), timeout=config.poll_interval)
    finally:
        if http_session is not None:
            await http_session.close()
