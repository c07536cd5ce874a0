from .base import ManagedState
from .orderbook import OrderBookState
from .orders import OrdersState
from .positions import PositionsState
from .slots import ManagedStateSlots
from .wallet import WalletState

__all__ = [
    "ManagedState",
    "OrderBookState",
    "OrdersState",
    "PositionsState",
    "ManagedStateSlots",
    "WalletState",
]
