"""
CLI commands for database structure provisioning.

A structure file is JSON of the form:

    {
      "collections": ["cyclists", "teams"],
      "graphs": [
        {"name": "membership",
         "edges": [{"collection": "member_of", "from": "cyclists", "to": "teams"}]}
      ]
    }
"""

import json
from typing import Optional

import typer
from rich.console import Console

from aqlkit.cli.commands.query import get_db_connection
from aqlkit.cli.formatters import (
    display_structure_result,
    display_structure_validation,
    format_error,
)
from aqlkit.config import CONFIG
from aqlkit.core.types import DbClearanceStrategy, DbStructure

app = typer.Typer(
    help="Database structure operations",
    rich_markup_mode="rich",
)

console = Console()


def load_structure(path: str) -> DbStructure:
    with open(path, "r") as f:
        return DbStructure.model_validate(json.load(f))


@app.command("validate")
def validate_cli(
    structure_file: str = typer.Option(..., "--file", "-f", help="JSON file describing the structure"),
    host: str = typer.Option(CONFIG["arango"]["host"], "--host", "-h", help="ArangoDB host URL"),
    username: str = typer.Option(CONFIG["arango"]["user"], "--username", "-u", help="ArangoDB username"),
    password: str = typer.Option(CONFIG["arango"]["password"], "--password", "-p", help="ArangoDB password"),
    database: str = typer.Option(CONFIG["arango"]["db_name"], "--database", "-d", help="ArangoDB database name"),
):
    """
    Report which of the required collections and graphs exist.

    Example:
        $ aqlkit db validate -f structure.json -d cycling
    """
    try:
        structure = load_structure(structure_file)
        db = get_db_connection(host, username, password, database)
        validation = db.validate_db_structure(structure)
    except Exception as e:
        console.print(format_error(f"Structure validation failed: {str(e)}"))
        raise typer.Exit(code=1)

    display_structure_validation(validation)


@app.command("create")
def create_cli(
    structure_file: str = typer.Option(..., "--file", "-f", help="JSON file describing the structure"),
    clear: Optional[DbClearanceStrategy] = typer.Option(None, "--clear", help="Clear the database first"),
    host: str = typer.Option(CONFIG["arango"]["host"], "--host", "-h", help="ArangoDB host URL"),
    username: str = typer.Option(CONFIG["arango"]["user"], "--username", "-u", help="ArangoDB username"),
    password: str = typer.Option(CONFIG["arango"]["password"], "--password", "-p", help="ArangoDB password"),
    database: str = typer.Option(CONFIG["arango"]["db_name"], "--database", "-d", help="ArangoDB database name"),
):
    """
    Create the database, collections and graphs that do not exist yet.

    Example:
        $ aqlkit db create -f structure.json -d cycling --clear DELETE_DATA
    """
    try:
        structure = load_structure(structure_file)
        db = get_db_connection(host, username, password, database)
        result = db.create_db_structure(structure, clear)
    except Exception as e:
        console.print(format_error(f"Structure creation failed: {str(e)}"))
        raise typer.Exit(code=1)

    display_structure_result(result)

    if result.error:
        raise typer.Exit(code=1)


@app.command("clear")
def clear_cli(
    method: DbClearanceStrategy = typer.Option(DbClearanceStrategy.DELETE_DATA, "--method", "-m", help="How to clear"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    host: str = typer.Option(CONFIG["arango"]["host"], "--host", "-h", help="ArangoDB host URL"),
    username: str = typer.Option(CONFIG["arango"]["user"], "--username", "-u", help="ArangoDB username"),
    password: str = typer.Option(CONFIG["arango"]["password"], "--password", "-p", help="ArangoDB password"),
    database: str = typer.Option(CONFIG["arango"]["db_name"], "--database", "-d", help="ArangoDB database name"),
):
    """
    Empty every non-system collection, or drop and recreate the database.

    Example:
        $ aqlkit db clear -d cycling --method RECREATE_DB --yes
    """
    if not yes:
        typer.confirm(f"Clear database '{database}' using {method.value}?", abort=True)

    try:
        db = get_db_connection(host, username, password, database)
        db.clear_db(method)
    except Exception as e:
        console.print(format_error(f"Clearing database failed: {str(e)}"))
        raise typer.Exit(code=1)

    console.print(f"[green]Database '{database}' cleared ({method.value}).[/green]")
