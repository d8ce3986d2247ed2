"""
Identifier commands: inspect
"""

import json

import typer
from rich.console import Console
from rich.table import Table

from docstream.errors import EncodingError
from docstream.identifiers import CommitID, parse_stream_ref

app = typer.Typer()
console = Console()


def describe(value: str) -> dict:
    """Decoded fields of a StreamID or CommitID string."""
    ref = parse_stream_ref(value)
    info = {
        "kind": "commit-id" if isinstance(ref, CommitID) else "stream-id",
        "type": ref.type,
        "type_name": ref.type_name,
        "stream_id": str(ref.base_id),
        "genesis": str(ref.cid),
        "url": ref.to_url(),
    }
    if isinstance(ref, CommitID):
        info["commit"] = str(ref.commit)
        info["commit_id"] = str(ref)
        info["is_genesis"] = ref.is_genesis
    return info


@app.command()
def inspect(
    value: str = typer.Argument(..., help="StreamID or CommitID (string or ceramic:// URL)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Decode a StreamID or CommitID.

    Examples:
        docstream id inspect kjzl6kcym7w8y...
        docstream id inspect "ceramic://kjzl6kcym7w8y...?version=bagcqcera..."
        docstream id inspect kjzl6kcym7w8y... --json
    """
    try:
        info = describe(value)
    except EncodingError as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    if json_output:
        print(json.dumps(info, indent=2))
        return

    table = Table(title="Identifier", show_header=False)
    table.add_column("Field", style="green")
    table.add_column("Value", style="cyan", overflow="fold")
    for key, val in info.items():
        table.add_row(key, str(val))
    console.print(table)
