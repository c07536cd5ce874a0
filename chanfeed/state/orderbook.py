"""In-memory order book maintained from snapshot + level updates."""

from __future__ import annotations

from typing import Any

import structlog

from chanfeed.models import BookLevel
from chanfeed.state.base import ManagedState, is_snapshot

logger = structlog.get_logger(__name__)


class OrderBookState(ManagedState):
    """Maintains current price levels for one symbol from snapshot + deltas.

    A level with ``count == 0`` removes the price from the side given by the
    sign of ``amount`` (1 for bids, -1 for asks).
    """

    def __init__(self, keyed: bool = True) -> None:
        self.keyed = keyed
        self._bids: dict[float, BookLevel] = {}
        self._asks: dict[float, BookLevel] = {}

    def _levels(self, data: Any) -> list[BookLevel]:
        if not isinstance(data, list):
            return []
        rows = data if is_snapshot(data) else [data]
        return [BookLevel.from_row(row) for row in rows]

    def update(self, raw: Any) -> None:
        """Replace the book on a snapshot, otherwise apply a single level change."""
        if not isinstance(raw, list):
            logger.debug("orderbook_update_ignored", raw=raw)
            return

        levels = self._levels(raw)
        if is_snapshot(raw):
            self._bids.clear()
            self._asks.clear()

        for level in levels:
            side = self._bids if level.side == "bid" else self._asks
            if level.is_removal:
                side.pop(level.price, None)
            else:
                side[level.price] = level

    def parse(self, raw: Any) -> list[BookLevel]:
        return self._levels(raw)

    def get_state(self) -> dict[str, Any]:
        """Current book. Keyed by price when ``keyed``, else sorted best-first lists."""
        if self.keyed:
            return {"bids": dict(self._bids), "asks": dict(self._asks)}
        return {
            "bids": sorted(self._bids.values(), key=lambda lvl: lvl.price, reverse=True),
            "asks": sorted(self._asks.values(), key=lambda lvl: lvl.price),
        }

    @property
    def best_bid(self) -> float | None:
        return max(self._bids) if self._bids else None

    @property
    def best_ask(self) -> float | None:
        return min(self._asks) if self._asks else None

    def get_spread(self) -> float | None:
        """Best ask - best bid. Returns None if either side is empty."""
        if self.best_bid is None or self.best_ask is None:
            return None
        return self.best_ask - self.best_bid

    def get_midpoint(self) -> float | None:
        if self.best_bid is None or self.best_ask is None:
            return None
        return (self.best_bid + self.best_ask) / 2.0
