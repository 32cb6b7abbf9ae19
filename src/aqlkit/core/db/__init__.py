"""
Database access layer.

This package provides the convenience facade over python-arango:
- facade: the `ArangoDB` facade (query execution, CRUD, lookups)
- structure: database, collection and graph provisioning
- connection: the `ArangoConnection` registry of named facades
"""

from aqlkit.core.db.facade import ArangoDB
from aqlkit.core.db.connection import ArangoConnection
from aqlkit.core.db.structure import (
    db_exists,
    clear_db,
    validate_db_structure,
    create_db_structure,
)

__all__ = [
    "ArangoDB",
    "ArangoConnection",

    # Structure provisioning
    "db_exists",
    "clear_db",
    "validate_db_structure",
    "create_db_structure",
]
