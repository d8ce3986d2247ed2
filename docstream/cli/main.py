#!/usr/bin/env python3
"""
docstream CLI - Content-addressed document streams

Main entrypoint for the docstream command-line tool.
"""

import typer
from rich.console import Console
from rich.table import Table

from docstream import __version__
from docstream.cli.commands import ids, patch, replay

app = typer.Typer(
    name="docstream",
    help="Content-addressed document stream tooling",
    add_completion=False,
)

console = Console()

app.add_typer(ids.app, name="id", help="Stream and commit identifiers")
app.add_typer(patch.app, name="patch", help="JSON patch operations")

app.command("replay")(replay.replay_command)


@app.command()
def version():
    """Show version information."""
    table = Table(show_header=False, box=None)
    table.add_row("[bold]docstream[/bold]", f"v{__version__}")
    table.add_row("Stream type", "MID")
    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
