from .channels import ChannelType, InfoCategory, ManagedEntity, RawEvent, Subscription
from .entities import BookLevel, Order, Position, WalletBalance, WalletChange
from .messages import (
    AccountInfoMessage,
    ChannelCommand,
    ControlMessage,
    FeedMessage,
    MarketDataMessage,
    UnrecognizedMessage,
)

__all__ = [
    "ChannelType",
    "InfoCategory",
    "ManagedEntity",
    "RawEvent",
    "Subscription",
    "BookLevel",
    "Order",
    "Position",
    "WalletBalance",
    "WalletChange",
    "AccountInfoMessage",
    "ChannelCommand",
    "ControlMessage",
    "FeedMessage",
    "MarketDataMessage",
    "UnrecognizedMessage",
]
