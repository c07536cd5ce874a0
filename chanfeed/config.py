"""Central configuration loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class FeedConfig(BaseSettings):
    ws_url: str = Field(default="wss://api.bitfinex.com/ws/2", alias="CHANFEED_WS_URL")


class TuningConfig(BaseSettings):
    ws_ping_interval: int = Field(default=30, alias="WS_PING_INTERVAL")
    ws_pong_timeout: int = Field(default=10, alias="WS_PONG_TIMEOUT")
    ws_reconnect_max_delay: int = Field(default=60, alias="WS_RECONNECT_MAX_DELAY")
    ws_max_message_size: int = Field(default=10 * 1024 * 1024, alias="WS_MAX_MESSAGE_SIZE")
    stats_interval: int = Field(default=60, alias="STATS_INTERVAL")


class StateConfig(BaseSettings):
    """Options forwarded to the managed state components."""

    orderbook_keyed: bool = Field(default=True, alias="ORDERBOOK_KEYED")
    orders_keyed: bool = Field(default=True, alias="ORDERS_KEYED")


class LoggingConfig(BaseSettings):
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")


class AppConfig:
    """Aggregated application configuration."""

    def __init__(self) -> None:
        self.feed = FeedConfig()
        self.tuning = TuningConfig()
        self.state = StateConfig()
        self.logging = LoggingConfig()


def get_config() -> AppConfig:
    """Create and return the application configuration."""
    return AppConfig()
