"""Open orders maintained from the account channel's order updates."""

from __future__ import annotations

from typing import Any

from chanfeed.models import Order
from chanfeed.state.base import ManagedState, is_snapshot

SNAPSHOT_CODE = "os"
CLOSE_CODE = "oc"


class OrdersState(ManagedState):
    """
    Tracks open orders by id.

    Receives the whole account message ``[0, code, body]``: ``os`` replaces
    the set, ``on``/``ou`` upsert, ``oc`` removes.
    """

    def __init__(self, keyed: bool = True) -> None:
        self.keyed = keyed
        self._orders: dict[int, Order] = {}

    @staticmethod
    def _split(message: Any) -> tuple[str | None, list[Order]]:
        if not isinstance(message, list) or len(message) < 3:
            return None, []
        code, body = message[1], message[2]
        if not isinstance(body, list):
            return code, []
        rows = body if is_snapshot(body) else [body]
        return code, [Order.from_row(row) for row in rows]

    def update(self, raw: Any) -> None:
        code, orders = self._split(raw)
        if code == SNAPSHOT_CODE:
            self._orders.clear()
        for order in orders:
            if code == CLOSE_CODE:
                self._orders.pop(order.id, None)
            else:
                self._orders[order.id] = order

    def parse(self, raw: Any) -> list[Order]:
        return self._split(raw)[1]

    def get_state(self) -> dict[int, Order] | list[Order]:
        if self.keyed:
            return dict(self._orders)
        return sorted(self._orders.values(), key=lambda o: o.id)

    def for_symbol(self, symbol: str) -> list[Order]:
        return [o for o in self._orders.values() if o.symbol == symbol]
