"""Open positions keyed by symbol."""

from __future__ import annotations

from typing import Any

from chanfeed.models import Position
from chanfeed.state.base import ManagedState, is_snapshot

SNAPSHOT_CODE = "ps"
CLOSE_CODE = "pc"


class PositionsState(ManagedState):
    """``ps`` replaces, ``pn``/``pu`` upsert, ``pc`` removes."""

    def __init__(self, **options: Any) -> None:
        self.options = options
        self._positions: dict[str, Position] = {}

    @staticmethod
    def _split(message: Any) -> tuple[str | None, list[Position]]:
        if not isinstance(message, list) or len(message) < 3:
            return None, []
        code, body = message[1], message[2]
        if not isinstance(body, list):
            return code, []
        rows = body if is_snapshot(body) else [body]
        return code, [Position.from_row(row) for row in rows]

    def update(self, raw: Any) -> None:
        code, positions = self._split(raw)
        if code == SNAPSHOT_CODE:
            self._positions.clear()
        for position in positions:
            if code == CLOSE_CODE:
                self._positions.pop(position.symbol, None)
            else:
                self._positions[position.symbol] = position

    def parse(self, raw: Any) -> list[Position]:
        return self._split(raw)[1]

    def get_state(self) -> dict[str, Position]:
        return dict(self._positions)
