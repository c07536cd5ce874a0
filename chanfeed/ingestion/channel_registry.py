"""Maps server-assigned channel ids to the subscriptions that produced them."""

from __future__ import annotations

from typing import Any

import structlog

from chanfeed.models import ChannelType, Subscription

logger = structlog.get_logger(__name__)


class ChannelRegistry:
    """
    Per-session ``ChannelType -> {channel_id -> Subscription}`` table.

    Only acknowledged channels are recorded. Lookups for unknown ids return
    None; the feed may reference an id before its ack arrives or after it was
    unsubscribed.
    """

    def __init__(self) -> None:
        self._channels: dict[ChannelType, dict[int, Subscription]] = {}

    def record_ack(
        self,
        channel_type: ChannelType,
        channel_id: int,
        ack: dict[str, Any],
        symbol: str | None = None,
    ) -> Subscription:
        """Record a ``subscribed`` ack. A repeated ack for the same id overwrites."""
        channels = self._channels.setdefault(channel_type, {})

        # One id per (type, symbol): a fresh ack supersedes the stale id.
        if symbol is not None:
            stale = self.lookup_symbol(channel_type, symbol)
            if stale is not None and stale != channel_id:
                channels.pop(stale, None)
                logger.debug("subscription_superseded", channel=channel_type.value, stale_id=stale)

        sub = Subscription(
            channel_type=channel_type,
            channel_id=channel_id,
            symbol=symbol,
            ack=ack,
        )
        channels[channel_id] = sub
        logger.info(
            "subscription_recorded",
            channel=channel_type.value,
            chan_id=channel_id,
            symbol=symbol,
        )
        return sub

    def lookup(self, channel_type: ChannelType, channel_id: int) -> Subscription | None:
        return self._channels.get(channel_type, {}).get(channel_id)

    def lookup_symbol(self, channel_type: ChannelType, symbol: str) -> int | None:
        """Resolve the channel id needed to unsubscribe ``symbol``."""
        for channel_id, sub in self._channels.get(channel_type, {}).items():
            if sub.symbol == symbol:
                return channel_id
        return None

    def remove(self, channel_type: ChannelType, symbol: str) -> Subscription | None:
        channel_id = self.lookup_symbol(channel_type, symbol)
        if channel_id is None:
            return None
        sub = self._channels[channel_type].pop(channel_id)
        logger.info(
            "subscription_removed",
            channel=channel_type.value,
            chan_id=channel_id,
            symbol=symbol,
        )
        return sub

    def channel_ids(self, channel_type: ChannelType) -> list[int]:
        return list(self._channels.get(channel_type, {}))

    def subscriptions(self) -> list[Subscription]:
        return [sub for channels in self._channels.values() for sub in channels.values()]

    def clear(self) -> None:
        self._channels.clear()

    def __len__(self) -> int:
        return sum(len(channels) for channels in self._channels.values())
