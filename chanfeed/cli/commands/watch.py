"""chanfeed watch SYMBOL... -- Render managed order books live.

Books (and, with --trades, public trades) are re-subscribed on every
connection open, since channel ids do not survive a reconnect.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.console import Group
from rich.live import Live

from chanfeed.cli.display import console, create_book_table, format_connected


async def _watch_async(symbols: list[str], depth: int, trades: bool) -> None:
    from chanfeed.config import get_config
    from chanfeed.ingestion.ws_client import FeedClient
    from chanfeed.logging_config import configure_logging

    config = get_config()
    configure_logging(config.logging)
    client = FeedClient.from_config(config)
    books: dict[str, dict] = {}
    pending: set[asyncio.Task] = set()

    def resubscribe() -> None:
        for symbol in symbols:
            task = asyncio.create_task(client.subscribe_order_book(symbol))
            pending.add(task)
            task.add_done_callback(pending.discard)
            if trades:
                task = asyncio.create_task(client.subscribe_trades(symbol))
                pending.add(task)
                task.add_done_callback(pending.discard)

    client.on("open", resubscribe)
    client.on("error", lambda err: console.print(f"[red]Feed error:[/red] {err}"))

    with Live(console=console, refresh_per_second=4) as live:

        def render() -> None:
            tables = (create_book_table(s, books[s], depth) for s in symbols if s in books)
            live.update(Group(format_connected(client.connected), *tables))

        client.on("open", render)
        client.on("close", render)

        for symbol in symbols:

            def on_book(book: dict, s: str = symbol) -> None:
                books[s] = book
                render()

            client.on_managed_order_book_update(on_book, symbol=symbol)
            if trades:
                client.on_public_trade_update(
                    lambda msg, s=symbol: console.print(f"[header]{s}[/header] trade {msg[2]}"),
                    symbol=symbol,
                )

        try:
            await client.open()
        finally:
            await client.close()


def watch(
    symbols: list[str] = typer.Argument(..., help="Symbols to watch, e.g. tBTCUSD tETHUSD"),
    depth: int = typer.Option(10, "--depth", "-d", help="Levels per side to display"),
    trades: bool = typer.Option(False, "--trades", help="Also print public trades"),
    url: Optional[str] = typer.Option(None, "--url", help="Override CHANFEED_WS_URL"),
) -> None:
    """Subscribe to order books and render the managed state live."""
    if url:
        import os

        os.environ["CHANFEED_WS_URL"] = url
    try:
        asyncio.run(_watch_async(symbols, depth, trades))
    except KeyboardInterrupt:
        console.print("\n[dim]Watch stopped.[/dim]")
