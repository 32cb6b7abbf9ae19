"""
Client and database-handle helpers.

`connect_arango` builds the python-arango client for a host; `open_database`
returns a handle on one database. Unset arguments fall back to
CONFIG["arango"]. Neither helper creates databases: provisioning lives in
`aqlkit.core.db.structure`.
"""

from typing import Optional

from loguru import logger

from arango import ArangoClient
from arango.database import StandardDatabase

from aqlkit.config import CONFIG


def connect_arango(hosts: Optional[str] = None) -> ArangoClient:
    """
    Build an ArangoClient for `hosts` (default: CONFIG["arango"]["host"]).

    Raises:
        ConnectionError: If the client rejects the host settings.
    """
    hosts = hosts or CONFIG["arango"]["host"]

    try:
        client = ArangoClient(hosts=hosts)
    except Exception as e:
        logger.error(f"Could not create ArangoDB client for {hosts}: {e}")
        raise ConnectionError(f"Could not create ArangoDB client for {hosts}: {e}") from e

    logger.info(f"ArangoDB client ready for {hosts}")
    return client


def open_database(
    client: ArangoClient,
    name: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> StandardDatabase:
    """Handle on database `name`; the database is not checked for existence."""
    settings = CONFIG["arango"]
    name = settings["db_name"] if name is None else name
    username = settings["user"] if username is None else username
    password = settings["password"] if password is None else password

    logger.debug(f"Opening database handle '{name}' as '{username}'")
    return client.db(name, username=username, password=password)
