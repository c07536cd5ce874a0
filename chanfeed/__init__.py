"""Client for a multiplexed, channel-based market data and account feed."""

__version__ = "0.1.0"
