"""Classifies decoded frames into message variants and routes them to handlers."""

from __future__ import annotations

from typing import Any

import orjson
from pydantic import ValidationError

from chanfeed.exceptions import DecodeError
from chanfeed.models import (
    AccountInfoMessage,
    ControlMessage,
    FeedMessage,
    InfoCategory,
    MarketDataMessage,
    UnrecognizedMessage,
)

ACCOUNT_CHANNEL_ID = 0

# Market-data payload markers
PUBLIC_TRADE_MARKERS = frozenset({"te", "tu"})
HEARTBEAT = "hb"

# Two-letter account update code → semantic category
INFO_CODES: dict[str, InfoCategory] = {
    "ws": InfoCategory.WALLET,
    "wu": InfoCategory.WALLET,
    "os": InfoCategory.ORDERS,
    "on": InfoCategory.ORDERS,
    "ou": InfoCategory.ORDERS,
    "oc": InfoCategory.ORDERS,
    "tu": InfoCategory.PRIVATE_TRADES,
    "te": InfoCategory.PRIVATE_TRADES,
    "ps": InfoCategory.POSITIONS,
    "pn": InfoCategory.POSITIONS,
    "pu": InfoCategory.POSITIONS,
    "pc": InfoCategory.POSITIONS,
}

# Message variant → handler method name mapping
MESSAGE_HANDLERS: dict[type, str] = {
    ControlMessage: "_handle_control",
    AccountInfoMessage: "_handle_account_info",
    MarketDataMessage: "_handle_market_data",
    UnrecognizedMessage: "_handle_unrecognized",
}

# Account category → handler method name mapping
INFO_HANDLERS: dict[InfoCategory, str] = {
    InfoCategory.WALLET: "_handle_wallet",
    InfoCategory.ORDERS: "_handle_orders",
    InfoCategory.PRIVATE_TRADES: "_handle_private_trades",
    InfoCategory.POSITIONS: "_handle_positions",
}


def decode_frame(raw: str | bytes) -> Any:
    """Decode one wire frame. Raises DecodeError carrying the original payload."""
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise DecodeError(raw, e) from e


def resolve_info_code(code: Any) -> InfoCategory | str:
    """Map an account update code to its category; unknown codes pass through."""
    if isinstance(code, str) and code in INFO_CODES:
        return INFO_CODES[code]
    return code if isinstance(code, str) else str(code)


def _is_account_channel(chan_id: Any) -> bool:
    return chan_id == ACCOUNT_CHANNEL_ID or chan_id == "0"


def _channel_id(value: Any) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"non-integral channel id: {value}")
    return int(value)


def classify(frame: Any) -> FeedMessage:
    """Return exactly one message variant for a decoded frame."""
    try:
        if isinstance(frame, dict) and "event" in frame:
            return ControlMessage.from_frame(frame)

        if isinstance(frame, list) and frame:
            if isinstance(frame[0], bool):
                return UnrecognizedMessage(raw=frame)
            if _is_account_channel(frame[0]):
                return AccountInfoMessage(
                    code=frame[1] if len(frame) > 1 else None,
                    body=frame[2] if len(frame) > 2 else None,
                    raw=frame,
                )
            return MarketDataMessage(
                channel_id=_channel_id(frame[0]),
                payload=frame[1] if len(frame) > 1 else None,
                raw=frame,
            )
    except (TypeError, ValueError, ValidationError):
        pass

    return UnrecognizedMessage(raw=frame)
