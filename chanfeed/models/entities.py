"""Pydantic views produced by the managed state components.

Row layouts follow the feed's positional arrays:

- book level:  ``[price, count, amount]`` (amount > 0 bid, < 0 ask)
- wallet row:  ``[type, currency, balance, unsettled_interest, balance_available]``
- order row:   ``[id, gid, cid, symbol, mts_create, mts_update, amount, amount_orig, type, ...]``
- position row: ``[symbol, status, amount, base_price, funding, funding_type, pl, pl_perc, ...]``
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


def _at(row: list[Any], index: int, default: Any = None) -> Any:
    return row[index] if len(row) > index else default


class BookLevel(BaseModel):
    price: float
    count: int
    amount: float

    model_config = {"frozen": True}

    @property
    def side(self) -> Literal["bid", "ask"]:
        return "bid" if self.amount > 0 else "ask"

    @property
    def is_removal(self) -> bool:
        return self.count == 0

    @classmethod
    def from_row(cls, row: list[Any]) -> BookLevel:
        return cls(price=row[0], count=row[1], amount=row[2])


class WalletBalance(BaseModel):
    wallet_type: str
    currency: str
    balance: float
    unsettled_interest: float = 0.0
    balance_available: float | None = None

    model_config = {"frozen": True}

    @property
    def key(self) -> tuple[str, str]:
        return (self.wallet_type, self.currency)

    @classmethod
    def from_row(cls, row: list[Any]) -> WalletBalance:
        return cls(
            wallet_type=row[0],
            currency=row[1],
            balance=_at(row, 2, 0.0) or 0.0,
            unsettled_interest=_at(row, 3, 0.0) or 0.0,
            balance_available=_at(row, 4),
        )


class WalletChange(BaseModel):
    """A wallet row framed against the balance held before it was applied."""

    wallet: WalletBalance
    previous_balance: float | None = None

    model_config = {"frozen": True}

    @property
    def delta(self) -> float:
        return self.wallet.balance - (self.previous_balance or 0.0)


class Order(BaseModel):
    id: int
    gid: int | None = None
    cid: int | None = None
    symbol: str
    mts_create: int | None = None
    mts_update: int | None = None
    amount: float = 0.0
    amount_orig: float = 0.0
    order_type: str | None = None
    status: str | None = None
    price: float | None = None

    model_config = {"frozen": True}

    @classmethod
    def from_row(cls, row: list[Any]) -> Order:
        return cls(
            id=row[0],
            gid=_at(row, 1),
            cid=_at(row, 2),
            symbol=row[3],
            mts_create=_at(row, 4),
            mts_update=_at(row, 5),
            amount=_at(row, 6, 0.0) or 0.0,
            amount_orig=_at(row, 7, 0.0) or 0.0,
            order_type=_at(row, 8),
            status=_at(row, 13),
            price=_at(row, 16),
        )


class Position(BaseModel):
    symbol: str
    status: str | None = None
    amount: float = 0.0
    base_price: float | None = None
    funding: float | None = None
    funding_type: int | None = None
    pl: float | None = None
    pl_perc: float | None = None
    raw: list[Any] = Field(default_factory=list)

    model_config = {"frozen": True}

    @classmethod
    def from_row(cls, row: list[Any]) -> Position:
        return cls(
            symbol=row[0],
            status=_at(row, 1),
            amount=_at(row, 2, 0.0) or 0.0,
            base_price=_at(row, 3),
            funding=_at(row, 4),
            funding_type=_at(row, 5),
            pl=_at(row, 6),
            pl_perc=_at(row, 7),
            raw=row,
        )
