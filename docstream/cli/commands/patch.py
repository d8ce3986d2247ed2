"""
Patch commands: diff, apply
"""

import json
from typing import Any

import typer
from rich.console import Console
from rich.syntax import Syntax

from docstream import patch as patch_engine
from docstream.errors import DocumentProtocolError

app = typer.Typer()
console = Console()


def _load_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _emit(value: Any, json_output: bool) -> None:
    text = json.dumps(value, indent=2, sort_keys=True)
    if json_output:
        print(text)
    else:
        console.print(Syntax(text, "json", theme="monokai"))


def _fail(message: str, json_output: bool) -> None:
    if json_output:
        print(json.dumps({"error": message}))
    else:
        console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(2)


@app.command()
def diff(
    source: str = typer.Argument(..., help="Path to the original JSON document"),
    target: str = typer.Argument(..., help="Path to the new JSON document"),
    json_output: bool = typer.Option(False, "--json", help="Output as plain JSON"),
):
    """
    Print the JSON patch turning SOURCE into TARGET.

    Examples:
        docstream patch diff old.json new.json
    """
    try:
        ops = patch_engine.diff(_load_json(source), _load_json(target))
    except (OSError, ValueError) as e:
        _fail(str(e), json_output)
    _emit(ops, json_output)


@app.command()
def apply(
    document: str = typer.Argument(..., help="Path to the JSON document"),
    operations: str = typer.Argument(..., help="Path to a JSON array of patch operations"),
    json_output: bool = typer.Option(False, "--json", help="Output as plain JSON"),
):
    """
    Apply a JSON patch to a document and print the result.

    Examples:
        docstream patch apply doc.json ops.json
    """
    try:
        result = patch_engine.apply(_load_json(document), _load_json(operations))
    except (OSError, ValueError, DocumentProtocolError) as e:
        _fail(str(e), json_output)
    _emit(result, json_output)
