"""Main Typer application for the aqlkit CLI.

This module defines the main Typer application and mounts the query and
structure command groups.

Links to third-party documentation:
- Typer: https://typer.tiangolo.com/
- Rich: https://rich.readthedocs.io/
"""

import sys

import typer
from loguru import logger

from aqlkit.cli.commands import query_app, structure_app
from aqlkit.config import CONFIG

app = typer.Typer(
    name="aqlkit",
    help="Build and run AQL queries against ArangoDB",
    rich_markup_mode="rich",
)

app.add_typer(query_app, name="query", help="Query construction and lookups")
app.add_typer(structure_app, name="db", help="Database structure operations")


# Main callback for global options
@app.callback()
def main(
    log_level: str = typer.Option(
        CONFIG["logging"]["level"], "--log-level", "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
):
    """Compose AQL filters, run lookups and provision database structure."""
    logger.remove()
    logger.add(sys.stderr, level=log_level.upper())


if __name__ == "__main__":
    app()
