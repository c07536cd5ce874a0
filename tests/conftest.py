"""Shared test fixtures for the chanfeed test suite."""

from __future__ import annotations

from typing import Any

import orjson
import pytest

from chanfeed.exceptions import NotConnectedError
from chanfeed.ingestion.ws_client import FeedClient
from chanfeed.state import ManagedState, ManagedStateSlots


class FakeTransport:
    """In-memory transport: records sent frames and lets tests push raw frames."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.listener = None
        self._connected = False
        self.opened = 0
        self.closed = 0

    @property
    def connected(self) -> bool:
        return self._connected

    def attach(self, listener) -> None:
        self.listener = listener

    async def open(self) -> None:
        self.opened += 1
        self._connected = True
        self.listener.on_open()

    async def close(self) -> None:
        self.closed += 1
        self._connected = False
        self.listener.on_close()

    async def send(self, text: str) -> None:
        if not self._connected:
            raise NotConnectedError("not connected")
        self.sent.append(text)

    def deliver(self, frame: Any) -> None:
        raw = frame if isinstance(frame, (str, bytes)) else orjson.dumps(frame).decode()
        self.listener.on_message(raw)

    def sent_frames(self) -> list[dict]:
        return [orjson.loads(s) for s in self.sent]


class RecordingState(ManagedState):
    """Managed state spy: logs every call in order; state is the list of updates."""

    def __init__(self, calls: list | None = None, name: str = "state") -> None:
        self.calls = calls if calls is not None else []
        self.name = name
        self.updates: list[Any] = []

    def update(self, raw: Any) -> None:
        self.calls.append((self.name, "update", raw))
        self.updates.append(raw)

    def parse(self, raw: Any) -> Any:
        self.calls.append((self.name, "parse", raw))
        return {"parsed": raw, "seen_before": len(self.updates)}

    def get_state(self) -> Any:
        self.calls.append((self.name, "get_state", None))
        return list(self.updates)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> FeedClient:
    """Client with the default in-memory state components."""
    return FeedClient(transport)


@pytest.fixture
def calls() -> list:
    return []


@pytest.fixture
def spy_client(transport: FakeTransport, calls: list) -> FeedClient:
    """Client whose state components record every call into ``calls``."""
    slots = ManagedStateSlots(
        wallet=RecordingState(calls, "wallet"),
        orders=RecordingState(calls, "orders"),
        positions=RecordingState(calls, "positions"),
        book_factory=lambda: RecordingState(calls, "book"),
    )
    return FeedClient(transport, slots)


@pytest.fixture
def book_ack() -> dict:
    return {
        "event": "subscribed",
        "channel": "book",
        "chanId": 5,
        "symbol": "tBTCUSD",
        "prec": "P0",
        "freq": "F0",
        "len": "25",
        "pair": "BTCUSD",
    }


@pytest.fixture
def trades_ack() -> dict:
    return {
        "event": "subscribed",
        "channel": "trades",
        "chanId": 9,
        "symbol": "tBTCUSD",
        "pair": "BTCUSD",
    }


@pytest.fixture
def book_snapshot() -> list:
    """[price, count, amount] rows; positive amount = bid."""
    return [
        [7254.7, 3, 3.3],
        [7254.6, 2, 1.5],
        [7255.1, 1, -0.8],
        [7255.3, 4, -2.1],
    ]


@pytest.fixture
def wallet_snapshot() -> list:
    return [
        ["exchange", "BTC", 1.5, 0, 1.5],
        ["exchange", "USD", 1000.0, 0, 800.0],
        ["margin", "USD", 250.0, 0, None],
    ]


@pytest.fixture
def order_row() -> list:
    """Single order row: [id, gid, cid, symbol, mts_create, mts_update, amount, amount_orig, type, ...]."""
    return [
        1185815100, None, 1574190011, "tBTCUSD", 1574190011000, 1574190011000,
        0.01, 0.01, "EXCHANGE LIMIT", None, None, None, 0, "ACTIVE", None, None,
        7200.0, 0, 0, 0, None, None, None, 0, 0, None, None, None, "API>BFX",
    ]


@pytest.fixture
def position_row() -> list:
    return ["tBTCUSD", "ACTIVE", 0.5, 7100.0, 0.0, 0, 12.5, 0.35]
