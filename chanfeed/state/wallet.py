"""Wallet balances keyed by wallet type and currency."""

from __future__ import annotations

from typing import Any

from chanfeed.models import WalletBalance, WalletChange
from chanfeed.state.base import ManagedState, is_snapshot


class WalletState(ManagedState):
    """Accumulates ``ws`` snapshots and ``wu`` single-row updates."""

    def __init__(self, **options: Any) -> None:
        self.options = options
        self._wallets: dict[tuple[str, str], WalletBalance] = {}

    @staticmethod
    def _rows(body: Any) -> list[WalletBalance]:
        if not isinstance(body, list):
            return []
        rows = body if is_snapshot(body) else [body]
        return [WalletBalance.from_row(row) for row in rows]

    def update(self, raw: Any) -> None:
        rows = self._rows(raw)
        if is_snapshot(raw):
            self._wallets.clear()
        for wallet in rows:
            self._wallets[wallet.key] = wallet

    def parse(self, raw: Any) -> list[WalletChange]:
        """Frame each row against the balance currently held for its wallet."""
        changes = []
        for wallet in self._rows(raw):
            previous = self._wallets.get(wallet.key)
            changes.append(
                WalletChange(
                    wallet=wallet,
                    previous_balance=previous.balance if previous else None,
                )
            )
        return changes

    def get_state(self) -> dict[str, dict[str, WalletBalance]]:
        """Balances as ``{wallet_type: {currency: WalletBalance}}``."""
        state: dict[str, dict[str, WalletBalance]] = {}
        for (wallet_type, currency), wallet in self._wallets.items():
            state.setdefault(wallet_type, {})[currency] = wallet
        return state
