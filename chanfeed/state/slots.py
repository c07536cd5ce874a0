"""Holders for the four pluggable managed state components."""

from __future__ import annotations

from functools import partial
from typing import Callable

import structlog

from chanfeed.config import StateConfig
from chanfeed.exceptions import ConfigurationError
from chanfeed.models import ManagedEntity
from chanfeed.state.base import ManagedState
from chanfeed.state.orderbook import OrderBookState
from chanfeed.state.orders import OrdersState
from chanfeed.state.positions import PositionsState
from chanfeed.state.wallet import WalletState

logger = structlog.get_logger(__name__)

BookFactory = Callable[[], ManagedState]


class ManagedStateSlots:
    """
    One wallet, one orders and one positions component, plus one order book
    per symbol created lazily from ``book_factory``.

    Any slot may be left empty; the client then skips the managed work for
    that entity.
    """

    def __init__(
        self,
        wallet: ManagedState | None = None,
        orders: ManagedState | None = None,
        positions: ManagedState | None = None,
        book_factory: BookFactory | None = None,
    ) -> None:
        self.wallet = wallet
        self.orders = orders
        self.positions = positions
        self._book_factory = book_factory
        self.books: dict[str, ManagedState] = {}

    @classmethod
    def from_config(cls, config: StateConfig | None = None) -> ManagedStateSlots:
        """Build the default in-memory components from ``StateConfig``."""
        config = config or StateConfig()
        return cls(
            wallet=WalletState(),
            orders=OrdersState(keyed=config.orders_keyed),
            positions=PositionsState(),
            book_factory=partial(OrderBookState, keyed=config.orderbook_keyed),
        )

    def book(self, symbol: str) -> ManagedState | None:
        """Return the book for ``symbol``, creating it on first use."""
        book = self.books.get(symbol)
        if book is None and self._book_factory is not None:
            book = self._book_factory()
            self.books[symbol] = book
            logger.debug("orderbook_slot_created", symbol=symbol)
        return book

    def drop_book(self, symbol: str) -> None:
        if self.books.pop(symbol, None) is not None:
            logger.debug("orderbook_slot_dropped", symbol=symbol)

    def component(self, entity: ManagedEntity, symbol: str | None = None) -> ManagedState | None:
        """Look up an existing component without creating one."""
        if entity is ManagedEntity.ORDER_BOOK:
            if not symbol:
                raise ConfigurationError("symbol")
            return self.books.get(symbol)
        if entity is ManagedEntity.WALLET:
            return self.wallet
        if entity is ManagedEntity.ORDERS:
            return self.orders
        return self.positions
