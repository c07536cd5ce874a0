"""Feed client: channel bookkeeping, message dispatch and the public subscription API.

Frames arrive from the transport one at a time. Each is decoded, emitted on
the generic ``message`` event, classified into a message variant and routed
to raw handlers and managed state components before the next frame is
processed.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import orjson
import structlog

from chanfeed.config import AppConfig, get_config
from chanfeed.exceptions import DecodeError, NotConnectedError
from chanfeed.ingestion.channel_registry import ChannelRegistry
from chanfeed.ingestion.handlers import EventEmitter, Handler, HandlerRegistry, invoke
from chanfeed.ingestion.transport import Transport, WebSocketTransport
from chanfeed.ingestion.ws_router import (
    HEARTBEAT,
    INFO_HANDLERS,
    MESSAGE_HANDLERS,
    PUBLIC_TRADE_MARKERS,
    classify,
    decode_frame,
    resolve_info_code,
)
from chanfeed.models import (
    AccountInfoMessage,
    ChannelCommand,
    ChannelType,
    ControlMessage,
    InfoCategory,
    ManagedEntity,
    MarketDataMessage,
    RawEvent,
    UnrecognizedMessage,
)
from chanfeed.state import ManagedState, ManagedStateSlots

logger = structlog.get_logger(__name__)

EVENTS = ("open", "close", "error", "message")


class FeedClient:
    """
    Client session over one transport.

    Tracks which channel id belongs to which subscription, dispatches every
    inbound frame to raw handlers and managed state components, and fans
    managed state out to managed handlers.
    """

    def __init__(self, transport: Transport, slots: ManagedStateSlots | None = None) -> None:
        self._transport = transport
        self._slots = slots if slots is not None else ManagedStateSlots.from_config()

        self._channels = ChannelRegistry()
        self._handlers = HandlerRegistry()
        self._events = EventEmitter()
        self._connected = False

        # Stats
        self._msg_counts: dict[str, int] = {}
        self._dropped = 0
        self._heartbeats = 0
        self._decode_errors = 0

        transport.attach(self)

    @classmethod
    def from_config(cls, config: AppConfig | None = None) -> FeedClient:
        """Build a client on a WebSocket transport with the default state components."""
        config = config or get_config()
        transport = WebSocketTransport(config.feed, config.tuning)
        client = cls(transport, ManagedStateSlots.from_config(config.state))
        transport.on_stats = client.log_stats
        return client

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def channels(self) -> ChannelRegistry:
        return self._channels

    # ── Connection lifecycle ──────────────────────────────────────────

    async def open(self) -> None:
        await self._transport.open()

    async def close(self) -> None:
        await self._transport.close()

    def on(self, event: str, listener: Callable[..., Any]) -> Callable[[], None]:
        """Listen for ``open``, ``close``, ``error`` or ``message``. Returns a disposer."""
        if event not in EVENTS:
            raise ValueError(f"unknown event: {event}")
        return self._events.on(event, listener)

    def on_open(self) -> None:
        self._connected = True
        logger.info("feed_open")
        self._events.emit("open")

    def on_close(self) -> None:
        self._connected = False
        # Channel ids are reassigned by the server on every connection.
        self._channels.clear()
        logger.info("feed_closed")
        self._events.emit("close")

    def on_error(self, error: Exception) -> None:
        logger.warning("feed_error", error=str(error))
        self._events.emit("error", error)

    def on_message(self, raw: str | bytes) -> None:
        self.handle_message(raw)

    # ── Outbound commands ─────────────────────────────────────────────

    async def send(self, msg: ChannelCommand | dict[str, Any] | str) -> None:
        """Send a frame without waiting for any acknowledgement."""
        if isinstance(msg, ChannelCommand):
            text = msg.to_wire()
        elif isinstance(msg, dict):
            text = orjson.dumps(msg).decode()
        else:
            text = msg

        try:
            await self._transport.send(text)
        except NotConnectedError as e:
            logger.warning("send_dropped", frame=text[:200])
            self._events.emit("error", e)

    async def subscribe(self, channel: ChannelType, symbol: str | None = None, **extra: Any) -> None:
        cmd = ChannelCommand(
            event="subscribe", channel=ChannelType(channel).value, symbol=symbol, extra=extra
        )
        await self.send(cmd)
        logger.info("subscribe_sent", channel=cmd.channel, symbol=symbol)

    async def unsubscribe(self, channel: ChannelType, symbol: str) -> bool:
        """Unsubscribe ``symbol`` from ``channel``. Unknown subscriptions are a no-op."""
        channel = ChannelType(channel)
        chan_id = self._channels.lookup_symbol(channel, symbol)
        if chan_id is None:
            logger.debug("unsubscribe_unknown", channel=channel.value, symbol=symbol)
            return False

        await self.send(
            ChannelCommand(event="unsubscribe", channel=channel.value, symbol=symbol, chan_id=chan_id)
        )
        self._forget(channel, symbol)
        return True

    def _forget(self, channel: ChannelType, symbol: str) -> None:
        """Drop the channel mapping and, for books, its managed state in one step."""
        self._channels.remove(channel, symbol)
        if channel is ChannelType.BOOK:
            self._slots.drop_book(symbol)

    async def subscribe_order_book(self, symbol: str, **extra: Any) -> None:
        await self.subscribe(ChannelType.BOOK, symbol, **extra)

    async def unsubscribe_order_book(self, symbol: str) -> bool:
        return await self.unsubscribe(ChannelType.BOOK, symbol)

    async def subscribe_trades(self, symbol: str, **extra: Any) -> None:
        await self.subscribe(ChannelType.TRADES, symbol, **extra)

    async def unsubscribe_trades(self, symbol: str) -> bool:
        return await self.unsubscribe(ChannelType.TRADES, symbol)

    # ── Handler registration ──────────────────────────────────────────

    def on_order_book(self, handler: Handler, symbol: str | None = None) -> Handler:
        """Raw book handler: receives ``parse`` of each delta for ``symbol``."""
        return self._handlers.register_raw(RawEvent.ORDER_BOOK, handler, symbol)

    def on_public_trade_update(self, handler: Handler, symbol: str | None = None) -> Handler:
        return self._handlers.register_raw(RawEvent.PUBLIC_TRADES, handler, symbol)

    def on_order_update(self, handler: Handler, symbol: str | None = None) -> Handler:
        """Without ``symbol`` the handler sees every order update."""
        return self._handlers.register_raw(RawEvent.ORDERS, handler, symbol)

    def on_private_trade_update(self, handler: Handler) -> Handler:
        return self._handlers.register_raw(RawEvent.PRIVATE_TRADES, handler)

    def on_wallet_update(self, handler: Handler) -> Handler:
        return self._handlers.register_raw(RawEvent.WALLET, handler)

    def on_managed_order_book_update(self, handler: Handler, symbol: str | None = None) -> Handler:
        return self._handlers.register_managed(ManagedEntity.ORDER_BOOK, handler, symbol)

    def on_managed_wallet_update(self, handler: Handler) -> Handler:
        return self._handlers.register_managed(ManagedEntity.WALLET, handler)

    def on_managed_orders_update(self, handler: Handler) -> Handler:
        return self._handlers.register_managed(ManagedEntity.ORDERS, handler)

    def on_managed_positions_update(self, handler: Handler) -> Handler:
        return self._handlers.register_managed(ManagedEntity.POSITIONS, handler)

    def get_managed_state_component(
        self, entity: ManagedEntity, symbol: str | None = None
    ) -> ManagedState | None:
        return self._slots.component(ManagedEntity(entity), symbol)

    # ── Message processing ────────────────────────────────────────────

    def handle_message(self, raw: str | bytes) -> None:
        """Decode, classify and dispatch one frame to completion."""
        try:
            frame = decode_frame(raw)
        except DecodeError as e:
            self._decode_errors += 1
            logger.error("invalid_json", raw=raw[:200] if isinstance(raw, str) else str(raw)[:200])
            self._events.emit("error", e)
            return

        self._events.emit("message", frame)

        msg = classify(frame)
        self._msg_counts[msg.kind] = self._msg_counts.get(msg.kind, 0) + 1

        handler = getattr(self, MESSAGE_HANDLERS[type(msg)])
        try:
            handler(msg)
        except Exception:
            logger.exception("dispatch_error", kind=msg.kind)

    def _drop(self, reason: str, **context: Any) -> None:
        self._dropped += 1
        logger.debug("frame_dropped", reason=reason, **context)

    def _handle_control(self, msg: ControlMessage) -> None:
        if msg.event == "subscribed":
            try:
                channel = ChannelType(msg.channel)
            except ValueError:
                logger.info("unknown_channel_ack", channel=msg.channel, chan_id=msg.channel_id)
                return
            if msg.channel_id is None:
                logger.warning("subscribed_without_chan_id", msg=msg.raw)
                return
            self._channels.record_ack(channel, msg.channel_id, msg.raw, symbol=msg.symbol)
        elif msg.event == "error":
            logger.error("ws_server_error", msg=msg.raw)
        else:
            logger.debug("ws_control_event", control_event=msg.event, msg=msg.raw)

    def _handle_unrecognized(self, msg: UnrecognizedMessage) -> None:
        logger.debug("unrecognized_frame", raw=str(msg.raw)[:200])

    def _handle_market_data(self, msg: MarketDataMessage) -> None:
        marker = msg.payload if isinstance(msg.payload, str) else None
        if marker in PUBLIC_TRADE_MARKERS:
            self._handle_public_trade(msg)
        elif marker == HEARTBEAT:
            self._heartbeats += 1
        else:
            self._handle_order_book(msg)

    def _handle_public_trade(self, msg: MarketDataMessage) -> None:
        sub = self._channels.lookup(ChannelType.TRADES, msg.channel_id)
        if sub is None:
            self._drop("unknown_trades_channel", chan_id=msg.channel_id)
            return

        handler = self._handlers.raw(RawEvent.PUBLIC_TRADES, sub.symbol)
        invoke(handler, msg.raw, handler="public_trades", symbol=sub.symbol)

    def _handle_order_book(self, msg: MarketDataMessage) -> None:
        sub = self._channels.lookup(ChannelType.BOOK, msg.channel_id)
        if sub is None or sub.symbol is None:
            self._drop("unknown_book_channel", chan_id=msg.channel_id)
            return

        symbol = sub.symbol
        data = msg.payload
        raw_handler = self._handlers.raw(RawEvent.ORDER_BOOK, symbol)
        book = self._slots.book(symbol)
        if book is None:
            invoke(raw_handler, data, handler="order_book", symbol=symbol)
            return

        book.update(data)

        managed = self._handlers.managed(ManagedEntity.ORDER_BOOK, symbol)
        if managed:
            invoke(managed, book.get_state(), handler="managed_order_book", symbol=symbol)
        if raw_handler:
            invoke(raw_handler, book.parse(data), handler="order_book", symbol=symbol)

    def _handle_account_info(self, msg: AccountInfoMessage) -> None:
        category = resolve_info_code(msg.code)
        if not isinstance(category, InfoCategory):
            logger.debug("info_passthrough", code=category)
            return

        getattr(self, INFO_HANDLERS[category])(msg)

    def _handle_wallet(self, msg: AccountInfoMessage) -> None:
        """Raw handler sees the update framed against the prior state; managed sees the result."""
        wallet = self._slots.wallet
        body = msg.body
        raw_handler = self._handlers.raw(RawEvent.WALLET)

        if wallet is None:
            invoke(raw_handler, body, handler="wallet")
            return

        if raw_handler:
            invoke(raw_handler, wallet.parse(body), handler="wallet")

        wallet.update(body)

        managed = self._handlers.managed(ManagedEntity.WALLET)
        if managed:
            invoke(managed, wallet.get_state(), handler="managed_wallet")

    def _handle_orders(self, msg: AccountInfoMessage) -> None:
        # general handler - on_order_update(handler)
        invoke(self._handlers.raw(RawEvent.ORDERS), msg.raw, handler="orders")

        # symbol filter applied - on_order_update(handler, symbol="tBTCUSD")
        symbol = msg.symbol
        if symbol:
            invoke(self._handlers.raw(RawEvent.ORDERS, symbol), msg.raw, handler="orders", symbol=symbol)

        orders = self._slots.orders
        if orders is None:
            return

        orders.update(msg.raw)

        managed = self._handlers.managed(ManagedEntity.ORDERS)
        if managed:
            invoke(managed, orders.get_state(), handler="managed_orders")

    def _handle_private_trades(self, msg: AccountInfoMessage) -> None:
        invoke(self._handlers.raw(RawEvent.PRIVATE_TRADES), msg.raw, handler="private_trades")

    def _handle_positions(self, msg: AccountInfoMessage) -> None:
        positions = self._slots.positions
        if positions is None:
            return

        positions.update(msg.raw)

        managed = self._handlers.managed(ManagedEntity.POSITIONS)
        if managed:
            invoke(managed, positions.get_state(), handler="managed_positions")

    # ── Stats ─────────────────────────────────────────────────────────

    def get_stats(self) -> dict[str, Any]:
        return {
            "by_kind": dict(self._msg_counts),
            "total_messages": sum(self._msg_counts.values()),
            "dropped": self._dropped,
            "heartbeats": self._heartbeats,
            "decode_errors": self._decode_errors,
            "subscriptions": len(self._channels),
            "books": len(self._slots.books),
        }

    def log_stats(self) -> None:
        logger.info("ws_stats", **self.get_stats())


async def main() -> None:
    """Entry point: stream the configured books and log managed top of book."""
    import sys

    from chanfeed.logging_config import configure_logging

    config = get_config()
    configure_logging(config.logging)

    symbols = sys.argv[1:] or ["tBTCUSD"]
    client = FeedClient.from_config(config)

    pending: set[asyncio.Task] = set()

    def resubscribe() -> None:
        for symbol in symbols:
            task = asyncio.create_task(client.subscribe_order_book(symbol))
            pending.add(task)
            task.add_done_callback(pending.discard)

    client.on("open", resubscribe)
    for symbol in symbols:
        client.on_managed_order_book_update(
            lambda book, s=symbol: logger.info(
                "book_update", symbol=s, bids=len(book["bids"]), asks=len(book["asks"])
            ),
            symbol=symbol,
        )

    # Connect and run forever
    await client.open()


if __name__ == "__main__":
    asyncio.run(main())
