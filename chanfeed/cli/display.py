"""Rich console formatting helpers for the chanfeed CLI."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

# Shared theme for consistent styling across all CLI output.
CHANFEED_THEME = Theme(
    {
        "bid": "bold green",
        "ask": "bold red",
        "ok": "bold green",
        "critical": "bold red",
        "header": "bold cyan",
        "muted": "dim",
    }
)

console = Console(theme=CHANFEED_THEME)


def format_float(val: float | None, decimals: int = 2) -> str:
    """Format a float with fixed decimal places, or '--' if None."""
    if val is None:
        return "--"
    return f"{val:.{decimals}f}"


def format_connected(connected: bool) -> Text:
    if connected:
        return Text("[OPEN]", style="ok")
    return Text("[CLOSED]", style="critical")


def _best_first(levels: Any, reverse: bool) -> list[Any]:
    """Accept keyed (``{price: level}``) or list book sides."""
    if isinstance(levels, dict):
        return [levels[p] for p in sorted(levels, reverse=reverse)]
    return list(levels)


def create_book_table(symbol: str, book: dict[str, Any], depth: int = 10) -> Table:
    """Side-by-side bids/asks table for a managed order book snapshot."""
    bids = _best_first(book.get("bids", {}), reverse=True)[:depth]
    asks = _best_first(book.get("asks", {}), reverse=False)[:depth]

    table = Table(title=symbol, show_lines=False, pad_edge=True)
    table.add_column("Count", style="muted", justify="right")
    table.add_column("Bid Amount", style="bid", justify="right")
    table.add_column("Bid", style="bid", justify="right")
    table.add_column("Ask", style="ask", justify="right")
    table.add_column("Ask Amount", style="ask", justify="right")
    table.add_column("Count", style="muted", justify="right")

    for i in range(max(len(bids), len(asks))):
        bid = bids[i] if i < len(bids) else None
        ask = asks[i] if i < len(asks) else None
        table.add_row(
            str(bid.count) if bid else "",
            format_float(bid.amount, 4) if bid else "",
            format_float(bid.price) if bid else "",
            format_float(ask.price) if ask else "",
            format_float(abs(ask.amount), 4) if ask else "",
            str(ask.count) if ask else "",
        )
    return table
