"""
Replay command: Replay a commit log and print the document state
"""

import hashlib
import json
from typing import Optional

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from docstream.config import Settings
from docstream.core import DocumentReducer, MemoryContext
from docstream.errors import DocumentProtocolError
from docstream.events import KeyDIDVerifier
from docstream.logging_config import setup_logging
from docstream.replay import FileCommitLog, replay_stream

console = Console()


def load_context(models_path: Optional[str], documents_path: Optional[str]) -> MemoryContext:
    """
    Build an in-memory Context from JSON files.

    Args:
        models_path: JSON object mapping model StreamID -> model definition
        documents_path: JSON object mapping document StreamID -> model StreamID,
            used to resolve relation targets
    """
    context = MemoryContext(verifier=KeyDIDVerifier())
    if models_path:
        with open(models_path, "r", encoding="utf-8") as f:
            for model_id, definition in json.load(f).items():
                context.add_model(model_id, definition)
    if documents_path:
        with open(documents_path, "r", encoding="utf-8") as f:
            for stream_id, model_id in json.load(f).items():
                context.set_document_model(stream_id, model_id)
    return context


def replay_command(
    log_path: Optional[str] = typer.Option(
        None,
        "--log",
        "-l",
        help="Path to commit log file (default: $DOCSTREAM_LOG_PATH)",
    ),
    models_path: Optional[str] = typer.Option(None, "--models", "-m", help="Path to model definitions JSON"),
    documents_path: Optional[str] = typer.Option(
        None, "--documents", "-d", help="Path to document -> model JSON for relations"
    ),
    until: Optional[int] = typer.Option(None, "--until", "-u", help="Replay until commit index"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Replay a commit log and print the final document state.

    Examples:
        docstream replay --log commits.jsonl --models models.json
        docstream replay --log commits.jsonl --models models.json --until 3
        docstream replay --log commits.jsonl --models models.json --json
    """
    settings = Settings.from_env()
    setup_logging(settings)
    path = log_path or settings.log_path

    try:
        context = load_context(models_path, documents_path)
        events = FileCommitLog(path).read_all()
        result = replay_stream(events, DocumentReducer(), context, to_index=until)
    except FileNotFoundError as e:
        if json_output:
            print(json.dumps({"error": "File not found", "path": e.filename}))
        else:
            console.print(f"[red]Error: File not found:[/red] {e.filename}")
        raise typer.Exit(2)
    except (DocumentProtocolError, OSError, ValueError) as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    canonical = result.state.canonical()
    state_hash = hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    if json_output:
        output = {
            "success": True,
            "stream_id": str(result.stream_id),
            "commits_replayed": result.applied,
            "tip": str(result.log[-1]),
            "state_hash": state_hash,
            "state": json.loads(canonical),
        }
        print(json.dumps(output, indent=2))
        return

    console.print(f"[green]✓ Replayed {result.applied} commits successfully[/green]")
    table = Table(show_header=False)
    table.add_column("Field", style="green")
    table.add_column("Value", style="cyan", overflow="fold")
    table.add_row("Stream", str(result.stream_id))
    table.add_row("Tip", str(result.log[-1]))
    table.add_row("State hash", state_hash)
    console.print(table)
    console.print(Syntax(json.dumps(json.loads(canonical), indent=2), "json", theme="monokai"))
