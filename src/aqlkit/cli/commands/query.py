"""
CLI commands for building and running AQL queries.

This module provides Typer CLI commands for:
- Composing a raw filter string into a `d.`-prefixed expression
- Finding documents by filter strings, equalities and search terms
- Checking unique constraints before an insert or update

Every command that talks to the database accepts `--dry-run` to print the
built query instead of executing it.
"""

import json
from typing import Any, List, Optional

import typer
from rich.console import Console

from aqlkit.cli.formatters import display_documents, format_error, format_query
from aqlkit.config import CONFIG
from aqlkit.core.db import ArangoDB
from aqlkit.core.filters import compose
from aqlkit.core.queries import (
    fetch_all,
    fetch_by_property_value,
    find_by_filter_criteria,
    unique_constraint_query,
)
from aqlkit.core.types import (
    CompositeKey,
    Criteria,
    DocumentTrimOptions,
    FetchOptions,
    ListOfFilters,
    MatchType,
    NamedValue,
    SearchTerms,
    UniqueConstraint,
    UniqueValue,
)
from aqlkit.core.utils.connection import connect_arango

# Create Typer app for query commands
app = typer.Typer(
    help="Build and run AQL queries",
    rich_markup_mode="rich",
)

console = Console()


def get_db_connection(host: str, username: str, password: str, database: str) -> ArangoDB:
    """Open a facade on one database."""
    client = connect_arango(host)
    config = {"host": host, "user": username, "password": password, "db_name": database}
    return ArangoDB.from_config(config, client=client)


def parse_value(raw: str) -> Any:
    """JSON-decode a command-line value, falling back to the plain string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_named_value(pair: str, case_sensitive: bool = True) -> NamedValue:
    """Parse `name=value` into a NamedValue."""
    name, sep, value = pair.partition("=")
    if not sep or not name.strip():
        raise typer.BadParameter(f"Expected name=value, got '{pair}'")
    return NamedValue(name=name, value=parse_value(value), case_sensitive=case_sensitive)


# ---- Filter composition ----

@app.command("compose")
def compose_cli(
    filter_string: str = typer.Argument(..., help="Filter expression, e.g. 'name == \"Lance\" && age > 40'"),
):
    """
    Prefix every property name of a filter expression with `d.`.

    Example:
        $ aqlkit query compose 'name == "Lance" || surname == "Froome"'
    """
    typer.echo(compose(filter_string))


# ---- Lookups ----

@app.command("find")
def find_cli(
    collection: str = typer.Argument(..., help="Collection name"),
    filters: Optional[List[str]] = typer.Option(None, "--filter", "-f", help="Filter clause (repeatable)"),
    where: Optional[List[str]] = typer.Option(None, "--where", "-w", help="Equality as name=value (repeatable)"),
    match: MatchType = typer.Option(MatchType.ANY, "--match", "-m", help="Combine clauses with ANY (||) or ALL (&&)"),
    search_props: Optional[str] = typer.Option(None, "--search-props", help="Comma-separated properties to search"),
    search_terms: Optional[str] = typer.Option(None, "--search-terms", help="Comma-separated search terms"),
    prefix: bool = typer.Option(True, "--prefix/--no-prefix", help="Prefix property names in filter clauses with d."),
    sort_by: Optional[str] = typer.Option(None, "--sort-by", help="Property to sort by"),
    sort_order: Optional[str] = typer.Option(None, "--sort-order", help="ASC or DESC"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=0, help="Maximum number of documents"),
    offset: Optional[int] = typer.Option(None, "--offset", min=0, help="Documents to skip (requires --limit)"),
    strip_private: bool = typer.Option(False, "--strip-private", help="Drop attributes starting with _"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the query without executing it"),
    output_format: str = typer.Option("table", "--output", "-o", help="Output format: table or json"),
    host: str = typer.Option(CONFIG["arango"]["host"], "--host", "-h", help="ArangoDB host URL"),
    username: str = typer.Option(CONFIG["arango"]["user"], "--username", "-u", help="ArangoDB username"),
    password: str = typer.Option(CONFIG["arango"]["password"], "--password", "-p", help="ArangoDB password"),
    database: str = typer.Option(CONFIG["arango"]["db_name"], "--database", "-d", help="ArangoDB database name"),
):
    """
    Find documents by filter clauses, property equalities and search terms.

    Example:
        $ aqlkit query find cyclists -f 'name == "Lance"' -f 'name == "Chris"'
        $ aqlkit query find cyclists -w surname=Armstrong --search-props name --search-terms lan
    """
    try:
        options = FetchOptions(
            sort_by=sort_by,
            sort_order=sort_order,
            limit=limit,
            offset=offset,
            prefix_property_names=prefix,
            trim=DocumentTrimOptions(strip_private_props=True) if strip_private else None,
        )

        filter_input = None
        if filters and len(filters) > 1:
            filter_input = ListOfFilters(filters=filters, match=match, auto_prefix_prop_names=prefix)
        elif filters:
            filter_input = filters[0]

        search = None
        if search_props and search_terms:
            search = SearchTerms(properties=search_props, terms=search_terms, match=match)

        criteria = Criteria(filter=filter_input, search=search, match=match) if filter_input or search else None
        properties = [parse_named_value(pair) for pair in where] if where else None

        if properties:
            query = fetch_by_property_value(collection, properties, match, options, criteria)
        elif criteria:
            query = find_by_filter_criteria(collection, criteria, options)
        else:
            query = fetch_all(collection, options)

        if dry_run:
            console.print(format_query(query))
            return

        db = get_db_connection(host, username, password, database)

        if properties:
            result = db.fetch_all_by_property_value(collection, properties, match, options, criteria)
        elif criteria:
            result = db.find_by_filter_criteria(collection, criteria, options)
        else:
            result = db.fetch_all(collection, options)

        display_documents(result.data, title=collection, total=result.total, output_format=output_format)

    except typer.BadParameter:
        raise
    except Exception as e:
        console.print(format_error(f"Query failed: {str(e)}"))
        raise typer.Exit(code=1)


@app.command("unique")
def unique_cli(
    collection: str = typer.Argument(..., help="Collection name"),
    unique: Optional[List[str]] = typer.Option(None, "--unique", "-u", help="Unique value as name=value (repeatable)"),
    composite: Optional[List[str]] = typer.Option(
        None, "--composite", "-c", help="Composite key as name=value,name=value (repeatable)"
    ),
    exclude_key: Optional[str] = typer.Option(None, "--exclude-key", "-x", help="Document key to leave out"),
    case_insensitive: bool = typer.Option(False, "--case-insensitive", "-i", help="Compare string values case-insensitively"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the query without executing it"),
    host: str = typer.Option(CONFIG["arango"]["host"], "--host", "-h", help="ArangoDB host URL"),
    username: str = typer.Option(CONFIG["arango"]["user"], "--username", help="ArangoDB username"),
    password: str = typer.Option(CONFIG["arango"]["password"], "--password", "-p", help="ArangoDB password"),
    database: str = typer.Option(CONFIG["arango"]["db_name"], "--database", "-d", help="ArangoDB database name"),
):
    """
    Report documents that already hold any of the given unique values.

    Example:
        $ aqlkit query unique users -u username=lance -c name=Lance,surname=Armstrong
    """
    try:
        constraints = [UniqueValue(unique=parse_named_value(pair)) for pair in unique or []]
        for group in composite or []:
            constraints.append(CompositeKey(composite=[parse_named_value(pair) for pair in group.split(",")]))

        constraint = UniqueConstraint(
            collection=collection,
            constraints=constraints,
            exclude_document_key=exclude_key,
            case_insensitive=case_insensitive,
        )

        query = unique_constraint_query(constraint)

        if dry_run:
            console.print(format_query(query))
            return

        db = get_db_connection(host, username, password, database)
        result = db.unique_constraint_validation(constraint)

        if result.violates_unique_constraint:
            console.print(f"[yellow]Unique constraint violated by:[/yellow] {', '.join(map(str, result.documents))}")
        else:
            console.print("[green]No conflicting documents found.[/green]")

    except typer.BadParameter:
        raise
    except Exception as e:
        console.print(format_error(f"Unique constraint check failed: {str(e)}"))
        raise typer.Exit(code=1)
