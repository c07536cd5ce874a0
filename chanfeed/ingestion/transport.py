"""WebSocket transport: connection lifecycle, reconnection and raw frame delivery."""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Protocol

import websockets
import websockets.asyncio.client
import structlog

from chanfeed.config import FeedConfig, TuningConfig
from chanfeed.exceptions import NotConnectedError

logger = structlog.get_logger(__name__)


class TransportListener(Protocol):
    """Receives transport lifecycle notifications and raw frames."""

    def on_open(self) -> None: ...

    def on_close(self) -> None: ...

    def on_error(self, error: Exception) -> None: ...

    def on_message(self, raw: str | bytes) -> None: ...


class Transport(Protocol):
    """The narrow interface the feed client consumes."""

    @property
    def connected(self) -> bool: ...

    def attach(self, listener: TransportListener) -> None: ...

    async def open(self) -> None: ...

    async def close(self) -> None: ...

    async def send(self, text: str) -> None: ...


class WebSocketTransport:
    """
    Persistent WebSocket connection with exponential reconnect backoff.

    ``open()`` runs until ``close()`` is called, reconnecting after every
    disconnect. Frames are handed to the attached listener one at a time, in
    arrival order, on the event loop.
    """

    def __init__(self, feed: FeedConfig, tuning: TuningConfig) -> None:
        self._feed = feed
        self._tuning = tuning
        self._listener: TransportListener | None = None

        self._ws: websockets.asyncio.client.ClientConnection | None = None
        self._connected = False
        self._closing = False
        self._reconnect_delay = 1.0
        self._last_stats_time: float = 0
        self.on_stats: Callable[[], None] | None = None

    @property
    def connected(self) -> bool:
        return self._connected

    def attach(self, listener: TransportListener) -> None:
        self._listener = listener

    # ── Connection lifecycle ──────────────────────────────────────────

    async def open(self) -> None:
        """Connect and pump frames, reconnecting with backoff until closed."""
        self._closing = False
        while not self._closing:
            try:
                self._ws = await websockets.asyncio.client.connect(
                    self._feed.ws_url,
                    ping_interval=self._tuning.ws_ping_interval,
                    ping_timeout=self._tuning.ws_pong_timeout,
                    max_size=self._tuning.ws_max_message_size,
                )
                self._connected = True
                self._reconnect_delay = 1.0  # Reset backoff
                logger.info("websocket_connected", url=self._feed.ws_url)
                if self._listener:
                    self._listener.on_open()

                await self._message_loop()

            except websockets.ConnectionClosed as e:
                logger.warning("websocket_disconnected", code=e.code, reason=e.reason)
            except websockets.InvalidHandshake as e:
                logger.error("websocket_handshake_failed", error=str(e))
                self._report(e)
            except OSError as e:
                logger.error("websocket_connection_error", error=str(e))
                self._report(e)
            except Exception as e:
                logger.exception("websocket_unexpected_error")
                self._report(e)
            finally:
                was_connected = self._connected
                self._connected = False
                self._ws = None
                if was_connected and self._listener:
                    self._listener.on_close()

            if self._closing:
                break

            # Exponential backoff
            logger.info("websocket_reconnecting", delay=self._reconnect_delay)
            await asyncio.sleep(self._reconnect_delay)
            self._reconnect_delay = min(
                self._reconnect_delay * 2,
                self._tuning.ws_reconnect_max_delay,
            )

    async def close(self) -> None:
        self._closing = True
        if self._ws is not None:
            await self._ws.close()
        logger.info("websocket_closed")

    async def send(self, text: str) -> None:
        if not self._ws or not self._connected:
            raise NotConnectedError("websocket is not connected", {"frame": text[:200]})
        await self._ws.send(text)

    # ── Message processing ────────────────────────────────────────────

    async def _message_loop(self) -> None:
        """Hand every frame to the listener; log stats every ``stats_interval``."""
        self._last_stats_time = time.time()

        async for raw in self._ws:
            if self._listener:
                self._listener.on_message(raw)

            now = time.time()
            if self.on_stats and now - self._last_stats_time >= self._tuning.stats_interval:
                self.on_stats()
                self._last_stats_time = now

    def _report(self, error: Exception) -> None:
        if self._listener:
            self._listener.on_error(error)
