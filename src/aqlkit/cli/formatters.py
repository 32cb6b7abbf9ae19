"""Rich formatting utilities for the aqlkit CLI.

This module provides formatting functions for displaying built queries,
documents and structure reports in the command line interface.

Links to third-party documentation:
- Rich: https://rich.readthedocs.io/
- Rich Table: https://rich.readthedocs.io/en/stable/tables.html

Sample input:
    display_documents([{"_key": "1", "name": "Lance"}, {"_key": "2", "name": "Chris"}])

Expected output:
    A table with one row per document and one column per attribute.
"""

import json
from typing import Any, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from aqlkit.core.types import AqlQuery, DbStructureResult, DbStructureValidation

console = Console()


def truncate_string(s: Any, max_length: int = 80) -> str:
    """Truncate a string to a maximum length, adding ellipsis if needed."""
    if s is None:
        return ""

    s = s if isinstance(s, str) else json.dumps(s, default=str)
    if len(s) <= max_length:
        return s

    return s[:max_length - 3] + "..."


def format_error(message: str) -> str:
    return f"[bold red]Error:[/bold red] {escape(message)}"


def format_query(query: AqlQuery) -> Panel:
    """Query text plus its bind variables in one panel."""
    body = query.query + "\n\n" + json.dumps(query.bind_vars, indent=2, default=str)
    return Panel(Text(body), title="[bold blue]AQL[/bold blue]", border_style="blue")


def display_documents(
    documents: List[Any],
    title: str = "Documents",
    total: Optional[int] = None,
    output_format: str = "table",
) -> None:
    """Display documents as a table, or as JSON when requested."""
    if output_format.lower() == "json":
        print(json.dumps(documents, indent=2, default=str))
        return

    shown = len(documents)
    heading = f"{title} ({shown} of {total})" if total is not None else f"{title} ({shown})"

    if not documents:
        console.print(f"[yellow]{heading}: no documents found.[/yellow]")
        return

    columns: List[str] = []
    for document in documents:
        if isinstance(document, dict):
            for key in document:
                if key not in columns:
                    columns.append(key)

    if not columns:
        for document in documents:
            console.print(escape(truncate_string(document)))
        return

    table = Table(title=heading, show_lines=False)
    for column in columns:
        table.add_column(column, style="cyan" if column.startswith("_") else None)

    for document in documents:
        table.add_row(*[escape(truncate_string(document.get(c))) if isinstance(document, dict) else "" for c in columns])

    console.print(table)


def display_structure_validation(validation: DbStructureValidation) -> None:
    table = Table(title="DB Structure")
    table.add_column("Type", style="cyan")
    table.add_column("Name")
    table.add_column("Exists")

    if validation.database:
        table.add_row("database", validation.database.name, _yes_no(validation.database.exists))
    for entity in validation.collections:
        table.add_row("collection", entity.name, _yes_no(entity.exists))
    for entity in validation.graphs:
        table.add_row("graph", entity.name, _yes_no(entity.exists))

    console.print(table)

    if validation.message:
        console.print(f"[yellow]{validation.message}[/yellow]")


def display_structure_result(result: DbStructureResult) -> None:
    lines = [result.database or ""] + result.collections + result.graphs
    style = "red" if result.error else "green"
    console.print(Panel("\n".join(line for line in lines if line), title="DB Structure", border_style=style))

    if result.error:
        console.print(format_error(result.error))


def _yes_no(flag: bool) -> str:
    return "[green]yes[/green]" if flag else "[red]no[/red]"
