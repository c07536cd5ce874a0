"""Tagged variants for decoded inbound frames and the outbound command models."""

from __future__ import annotations

from typing import Any, Literal, Union

import orjson
from pydantic import BaseModel, Field


class ControlMessage(BaseModel):
    """Keyed record carrying an ``event`` field (acks, errors, info)."""

    kind: Literal["control"] = "control"
    event: str
    channel: str | None = None
    channel_id: int | None = None
    symbol: str | None = None
    raw: dict[str, Any]

    model_config = {"frozen": True}

    @classmethod
    def from_frame(cls, frame: dict[str, Any]) -> ControlMessage:
        chan_id = frame.get("chanId")
        symbol = frame.get("symbol") or frame.get("pair") or frame.get("key")
        return cls(
            event=str(frame["event"]),
            channel=frame.get("channel"),
            channel_id=int(chan_id) if chan_id is not None else None,
            symbol=symbol if isinstance(symbol, str) else None,
            raw=frame,
        )


class AccountInfoMessage(BaseModel):
    """Frame on channel 0: ``[0, code, body, ...]``."""

    kind: Literal["account_info"] = "account_info"
    code: str | None = None
    body: Any = None
    raw: list[Any]

    model_config = {"frozen": True}

    @property
    def symbol(self) -> str | None:
        """Symbol carried by a single-row update body (fourth element)."""
        body = self.body
        if isinstance(body, list) and len(body) > 3 and isinstance(body[3], str):
            return body[3]
        return None


class MarketDataMessage(BaseModel):
    """Frame on a public channel: ``[channel_id, payload, ...]``."""

    kind: Literal["market_data"] = "market_data"
    channel_id: int
    payload: Any = None
    raw: list[Any]

    model_config = {"frozen": True}


class UnrecognizedMessage(BaseModel):
    """Anything that matched none of the other shapes."""

    kind: Literal["unrecognized"] = "unrecognized"
    raw: Any = None

    model_config = {"frozen": True}


FeedMessage = Union[ControlMessage, AccountInfoMessage, MarketDataMessage, UnrecognizedMessage]


class ChannelCommand(BaseModel):
    """Outbound subscribe/unsubscribe command."""

    event: Literal["subscribe", "unsubscribe"]
    channel: str
    symbol: str | None = None
    chan_id: int | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    def to_wire(self) -> str:
        """Return the JSON text sent over the socket. Extra options are flattened."""
        payload: dict[str, Any] = {"event": self.event, "channel": self.channel}
        if self.symbol is not None:
            payload["symbol"] = self.symbol
        if self.chan_id is not None:
            payload["chanId"] = self.chan_id
        for key, value in self.extra.items():
            payload.setdefault(key, value)
        return orjson.dumps(payload).decode()
