#!/usr/bin/env python3
"""Poll game-server player feeds and record position history.

Usage
-----
Configure servers through the environment or the command line::

    export TRAIL_SERVERS="c1=http://127.0.0.1:30120/players.json"
    python scripts/track_players.py

Options::

    --server NAME=URL    Add a server to poll (repeatable, overrides TRAIL_SERVERS)
    --history-dir DIR    Directory of the per-player history files
    --interval SECONDS   Seconds between polling cycles
    --once               Poll every server once and exit
    --verbose            Enable DEBUG logging
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

import aiohttp  # noqa: E402

from pytrail import HistoryStore, JsonFileHistoryRepository, TrailConfig, TrailError  # noqa: E402
from pytrail._transport import PlayerFeedTransport  # noqa: E402
from pytrail.config import parse_servers  # noqa: E402
from pytrail.poller import poll_once, run_poller  # noqa: E402


def _build_config(args: argparse.Namespace) -> TrailConfig:
    overrides: dict[str, Any] = {}
    if args.server:
        overrides["servers"] = parse_servers(",".join(args.server))
    if args.history_dir:
        overrides["history_dir"] = args.history_dir
    if args.interval is not None:
        overrides["poll_interval"] = args.interval
    return TrailConfig.from_env(**overrides)


async def _poll_all_once(config: TrailConfig, store: HistoryStore) -> int:
    failures = 0
    async with aiohttp.ClientSession() as session:
        transport = PlayerFeedTransport(session, timeout=config.request_timeout)
        for server, url in config.servers.items():
            try:
                count = await poll_once(store, transport, server, url)
            except TrailError as exc:
                print(f"{server}: {exc}", file=sys.stderr)
                failures += 1
                continue
            print(f"{server}: {count} player(s)")
    return 1 if failures else 0


async def _run_forever(config: TrailConfig, store: HistoryStore) -> int:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)
    await run_poller(config, store, stop=stop)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--server", action="append", metavar="NAME=URL", help="Server feed to poll")
    parser.add_argument("--history-dir", help="History directory")
    parser.add_argument("--interval", type=float, help="Seconds between cycles")
    parser.add_argument("--once", action="store_true", help="Poll once and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    try:
        config = _build_config(args)
        store = HistoryStore(JsonFileHistoryRepository.from_config(config), tz=config.tzinfo())
    except TrailError as exc:
        parser.error(str(exc))

    if not config.servers:
        parser.error("no servers configured (use --server or TRAIL_SERVERS)")

    if args.once:
        return asyncio.run(_poll_all_once(config, store))
    return asyncio.run(_run_forever(config, store))


if __name__ == "__main__":
    sys.exit(main())
