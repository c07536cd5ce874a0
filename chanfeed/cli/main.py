"""chanfeed CLI entry point.

Usage:
    python -m chanfeed.cli.main [COMMAND] [OPTIONS]

Or via the installed console script:
    chanfeed [COMMAND] [OPTIONS]
"""

from __future__ import annotations

import typer

from chanfeed.cli.commands import tail, watch

app = typer.Typer(
    name="chanfeed",
    help="chanfeed -- multiplexed market data feed client",
    no_args_is_help=True,
    add_completion=False,
    pretty_exceptions_enable=True,
)

# Register sub-commands from each module.
app.command(name="watch", help="Live managed order books for one or more symbols")(watch.watch)
app.command(name="tail", help="Print every decoded frame from the feed")(tail.tail)


if __name__ == "__main__":
    app()
