from __future__ import annotations

import asyncio
import gzip
import json
from datetime import UTC
from typing import Any

import pytest

from pytrail._transport import PlayerFeedTransport
from pytrail.config import TrailConfig
from pytrail.exceptions import TrailTransportError
from pytrail.poller import poll_once, run_poller
from pytrail.state.repository import InMemoryHistoryRepository
from pytrail.state.store import HistoryStore


def _player(identifier: str) -> dict:
    return {"steamIdentifier": identifier, "name": identifier, "coords": {"x": 1.0, "y": 2.0, "z": 3.0}}


class _FakeTransport:
    def __init__(self, feeds: dict[str, list[Any] | Exception]) -> None:
        self.feeds = feeds
        self.calls: list[str] = []

    async def fetch_players(self, url: str) -> list[Any]:
        self.calls.append(url)
        feed = self.feeds[url]
        if isinstance(feed, Exception):
            raise feed
        return feed


@pytest.mark.asyncio
async def test_poll_once_ingests_and_publishes_summary() -> None:
    store = HistoryStore(InMemoryHistoryRepository(), tz=UTC)
    transport = _FakeTransport({"http://c1": [_player("steam:1"), _player("steam:2")]})
    published: list[tuple[str, bytes]] = []

    count = await poll_once(store, transport, "c1", "http://c1", on_summary=lambda s, p: published.append((s, p)))

    assert count == 2
    assert store.resident_identities("c1") == {"steam_1", "steam_2"}
    ((server, payload),) = published
    assert server == "c1"
    assert [p["h"] for p in json.loads(gzip.decompress(payload))] == ["steam:1", "steam:2"]


@pytest.mark.asyncio
async def test_poll_once_awaits_async_summary_callback() -> None:
    store = HistoryStore(InMemoryHistoryRepository(), tz=UTC)
    transport = _FakeTransport({"http://c1": [_player("steam:1")]})
    received: list[str] = []

    async def _on_summary(server: str, payload: bytes) -> None:
        received.append(server)

    await poll_once(store, transport, "c1", "http://c1", on_summary=_on_summary)

    assert received == ["c1"]


@pytest.mark.asyncio
async def test_run_poller_continues_after_transport_failure() -> None:
    store = HistoryStore(InMemoryHistoryRepository(), tz=UTC)
    stop = asyncio.Event()
    transport = _FakeTransport(
        {
            "http://down": TrailTransportError("HTTP 502 from http://down", status_code=502),
            "http://up": [_player("steam:1")],
        }
    )
    config = TrailConfig(servers={"down": "http://down", "up": "http://up"}, poll_interval=0.01)

    async def _stop_soon() -> None:
        while len(transport.calls) < 4:
            await asyncio.sleep(0.005)
        stop.set()

    await asyncio.gather(run_poller(config, store, transport=transport, stop=stop), _stop_soon())

    assert transport.calls[:4] == ["http://down", "http://up", "http://down", "http://up"]
    assert store.resident_identities("up") == {"steam_1"}
    assert "down" not in store.servers()


@pytest.mark.asyncio
async def test_run_poller_without_servers_returns() -> None:
    store = HistoryStore(InMemoryHistoryRepository(), tz=UTC)

    await asyncio.wait_for(run_poller(TrailConfig(), store), timeout=1.0)


class _FakeResponse:
    def __init__(self, status: int, text: str) -> None:
        self.status = status
        self._text = text

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class _FakeSession:
    def __init__(self, status: int, text: str) -> None:
        self.response = _FakeResponse(status, text)
        self.requests: list[tuple[str, dict[str, str]]] = []

    def get(self, url: str, *, headers: dict[str, str], timeout: Any) -> _FakeResponse:
        self.requests.append((url, headers))
        return self.response


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        '[{"name": "a"}]',
        '{"players": [{"name": "a"}], "duty": []}',
    ],
)
async def test_transport_accepts_list_or_players_object(body: str) -> None:
    session = _FakeSession(200, body)
    transport = PlayerFeedTransport(session)  # type: ignore[arg-type]

    players = await transport.fetch_players("http://c1/players.json")

    assert players == [{"name": "a"}]
    assert session.requests[0][1]["user-agent"].startswith("pytrail/")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "body"),
    [
        (503, "unavailable"),
        (200, "<html>"),
        (200, '{"error": "nope"}'),
    ],
)
async def test_transport_errors(status: int, body: str) -> None:
    transport = PlayerFeedTransport(_FakeSession(status, body))  # type: ignore[arg-type]

    with pytest.raises(TrailTransportError) as excinfo:
        await transport.fetch_players("http://c1/players.json")

    assert excinfo.value.endpoint == "http://c1/players.json"
    if status != 200:
        assert excinfo.value.status_code == status
