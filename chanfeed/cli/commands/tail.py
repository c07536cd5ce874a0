"""chanfeed tail -- Print every decoded frame, pretty-printing the JSON."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import orjson
import typer
from rich.panel import Panel
from rich.syntax import Syntax

from chanfeed.cli.display import console


def _pretty_frame(index: int, frame: Any) -> Panel:
    """Create a rich Panel for one decoded frame."""
    formatted = orjson.dumps(frame, option=orjson.OPT_INDENT_2).decode()
    syntax = Syntax(formatted, "json", theme="monokai", word_wrap=True)
    return Panel(syntax, title=f"[dim]#{index}[/dim]", expand=False, border_style="dim")


async def _tail_async(books: list[str], trades: list[str], limit: int) -> None:
    from chanfeed.config import get_config
    from chanfeed.ingestion.ws_client import FeedClient

    client = FeedClient.from_config(get_config())
    seen = 0
    pending: set[asyncio.Task] = set()

    def resubscribe() -> None:
        for symbol in books:
            task = asyncio.create_task(client.subscribe_order_book(symbol))
            pending.add(task)
            task.add_done_callback(pending.discard)
        for symbol in trades:
            task = asyncio.create_task(client.subscribe_trades(symbol))
            pending.add(task)
            task.add_done_callback(pending.discard)

    def on_frame(frame: Any) -> None:
        nonlocal seen
        seen += 1
        console.print(_pretty_frame(seen, frame))
        if limit and seen >= limit:
            task = asyncio.create_task(client.close())
            pending.add(task)
            task.add_done_callback(pending.discard)

    client.on("open", resubscribe)
    client.on("message", on_frame)
    client.on("error", lambda err: console.print(f"[red]Error:[/red] {err}"))

    console.print("[bold cyan]--- live tail (Ctrl+C to stop) ---[/bold cyan]")
    await client.open()


def tail(
    book: list[str] = typer.Option([], "--book", "-b", help="Subscribe to the book for SYMBOL"),
    trades: list[str] = typer.Option([], "--trades", "-t", help="Subscribe to trades for SYMBOL"),
    limit: int = typer.Option(0, "--limit", "-n", help="Stop after N frames (0 = follow)"),
    url: Optional[str] = typer.Option(None, "--url", help="Override CHANFEED_WS_URL"),
) -> None:
    """Tail the feed: print every decoded frame as JSON."""
    if url:
        import os

        os.environ["CHANFEED_WS_URL"] = url
    try:
        asyncio.run(_tail_async(book, trades, limit))
    except KeyboardInterrupt:
        console.print("\n[dim]Tail stopped.[/dim]")
