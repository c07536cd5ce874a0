"""Channel, category and handler-key enumerations plus the subscription record."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ChannelType(str, Enum):
    """Public channels a subscription can be acknowledged for."""

    BOOK = "book"
    TRADES = "trades"
    TICKER = "ticker"
    CANDLES = "candles"


class InfoCategory(str, Enum):
    """Semantic categories of the account channel (channel 0)."""

    WALLET = "wallet"
    ORDERS = "orders"
    PRIVATE_TRADES = "private_trades"
    POSITIONS = "positions"


class RawEvent(str, Enum):
    """Families of raw (per-message) handlers."""

    ORDER_BOOK = "order_book"
    PUBLIC_TRADES = "public_trades"
    WALLET = "wallet"
    ORDERS = "orders"
    PRIVATE_TRADES = "private_trades"


class ManagedEntity(str, Enum):
    """Entities backed by a managed state component."""

    ORDER_BOOK = "order_book"
    WALLET = "wallet"
    ORDERS = "orders"
    POSITIONS = "positions"


class Subscription(BaseModel):
    """A subscription confirmed by a ``subscribed`` control message."""

    channel_type: ChannelType
    channel_id: int
    symbol: str | None = None
    ack: dict[str, Any] = Field(default_factory=dict, description="Raw subscribe ack")

    model_config = {"frozen": True}
