"""
Database structure provisioning.

This module checks and creates the database, collections and graphs a
DbStructure describes. Driver failures during provisioning are logged and
recorded on the returned result object instead of being raised.

Links:
- python-arango databases: https://docs.python-arango.com/en/main/database.html
- python-arango graphs: https://docs.python-arango.com/en/main/graph.html

Sample input:
    structure = DbStructure(
        collections=["cyclists", "teams"],
        graphs=[GraphDefinition(name="team_members", edges=[
            EdgeDefinition(collection="team_members", **{"from": "teams"}, to="cyclists"),
        ])],
    )
    create_db_structure(db, sys_db, structure)

Expected output:
    DbStructureResult(database="Database found",
                      collections=["Collection 'cyclists' found", "Collection 'teams' created"],
                      graphs=["Graph 'team_members' created"], error=None)
"""

from typing import List, Optional, Tuple

from loguru import logger

from arango.database import StandardDatabase
from arango.exceptions import ArangoError

from aqlkit.core.types import (
    DbClearanceStrategy,
    DbStructure,
    DbStructureResult,
    DbStructureValidation,
    EntityExists,
    InvalidInputError,
)


def db_exists(db: StandardDatabase, system: StandardDatabase) -> bool:
    """Check whether the database behind `db` exists."""
    return system.has_database(db.name)


def clear_db(
    db: StandardDatabase,
    system: StandardDatabase,
    method: DbClearanceStrategy = DbClearanceStrategy.DELETE_DATA,
) -> None:
    """
    Empty a database, either by truncating its collections or by dropping
    and re-creating it. Does nothing if the database does not exist.

    Raises:
        RuntimeError: If re-creating the database fails.
    """
    if not db_exists(db, system):
        return

    if method == DbClearanceStrategy.RECREATE_DB:
        try:
            system.delete_database(db.name)
            system.create_database(db.name)
        except ArangoError as e:
            raise RuntimeError(f"Failed to re-create DB {db.name}") from e
        logger.info(f"DB {db.name} re-created")
        return

    for collection in db.collections():
        if collection.get("system"):
            continue
        db.collection(collection["name"]).truncate()

    logger.info(f"DB {db.name} cleaned")


def _availability(required: List[str], existing: List[str]) -> Tuple[List[EntityExists], bool]:
    entities = [EntityExists(name=name, exists=name in existing) for name in required]
    return entities, all(e.exists for e in entities)


def validate_db_structure(
    db: StandardDatabase,
    system: StandardDatabase,
    structure: Optional[DbStructure],
) -> DbStructureValidation:
    """Report which of the required database, collections and graphs exist."""
    response = DbStructureValidation()

    if structure is None or not structure.collections:
        return response

    if not db_exists(db, system):
        response.message = "Database does not exist"
        response.database = EntityExists(name=db.name, exists=False)
        return response

    response.database = EntityExists(name=db.name, exists=True)

    existing_collections = [c["name"] for c in db.collections()]
    response.collections, all_collections = _availability(structure.collections, existing_collections)

    if not all_collections:
        response.message = "Required collections do not exist"

    graph_names = structure.graph_names()
    if graph_names:
        existing_graphs = [g["name"] for g in db.graphs()]
        response.graphs, all_graphs = _availability(graph_names, existing_graphs)

        if not all_graphs:
            if response.message:
                response.message = response.message + ", and required graphs do not exist"
            else:
                response.message = "Required graphs do not exist"

    return response


def create_db_structure(
    db: StandardDatabase,
    system: StandardDatabase,
    structure: Optional[DbStructure],
    clear: Optional[DbClearanceStrategy] = None,
) -> DbStructureResult:
    """
    Create whatever part of a DbStructure is missing.

    Stops at the first failure, recording its message in `error`.

    Raises:
        InvalidInputError: If no structure (or no collections) are given.
    """
    if structure is None or not structure.collections:
        raise InvalidInputError("No DB structure specified")

    response = DbStructureResult()

    if not db_exists(db, system):
        logger.info(f"Database '{db.name}' not found")
        try:
            system.create_database(db.name)
        except ArangoError as e:
            logger.error(f"Failed to create database '{db.name}': {e}")
            response.database = "Failed to create database"
            response.error = str(e)
            return response
        logger.info(f"Database '{db.name}' created")
        response.database = "Database created"
    elif clear:
        clear_db(db, system, clear)
        logger.info(f"Database '{db.name}' cleared with method {clear.value}")
        response.database = f"Database cleared with method {clear.value}"
    else:
        logger.info(f"Database '{db.name}' found")
        response.database = "Database found"

    validation = validate_db_structure(db, system, structure)

    for entity in validation.collections:
        if entity.exists:
            response.collections.append(f"Collection '{entity.name}' found")
            continue
        try:
            db.create_collection(entity.name)
        except ArangoError as e:
            logger.error(f"Failed to create collection '{entity.name}': {e}")
            response.collections.append(f"Failed to create collection '{entity.name}'")
            response.error = str(e)
            return response
        logger.info(f"Collection '{entity.name}' created")
        response.collections.append(f"Collection '{entity.name}' created")

    for entity in validation.graphs:
        if entity.exists:
            response.graphs.append(f"Graph '{entity.name}' found")
            continue

        definition = structure.graph_definition(entity.name)
        if definition is None or not definition.edges:
            logger.warning(f"Graph '{entity.name}' has no edge definitions, not created")
            continue

        try:
            db.create_graph(
                definition.name,
                edge_definitions=[edge.to_driver() for edge in definition.edges],
            )
        except ArangoError as e:
            logger.error(f"Failed to create graph '{entity.name}': {e}")
            response.graphs.append(f"Failed to create graph '{entity.name}'")
            response.error = str(e)
            return response
        logger.info(f"Graph '{entity.name}' created")
        response.graphs.append(f"Graph '{entity.name}' created")

    return response


if __name__ == "__main__":
    import sys
    from unittest.mock import MagicMock, call

    all_validation_failures = []
    total_tests = 0

    # In-memory stand-ins for a database with one of two collections
    system = MagicMock()
    system.has_database.return_value = True
    db = MagicMock()
    db.name = "cycling"
    db.collections.return_value = [{"name": "cyclists", "system": False}]
    db.graphs.return_value = []

    structure = DbStructure(collections=["cyclists", "teams"])

    # Test 1: validation reports the missing collection
    total_tests += 1
    validation = validate_db_structure(db, system, structure)
    if [(c.name, c.exists) for c in validation.collections] != [("cyclists", True), ("teams", False)]:
        all_validation_failures.append(f"validate_db_structure: got {validation.collections}")
    if validation.message != "Required collections do not exist":
        all_validation_failures.append(f"validate_db_structure message: got {validation.message!r}")

    # Test 2: creation only touches what is missing
    total_tests += 1
    result = create_db_structure(db, system, structure)
    if result.collections != ["Collection 'cyclists' found", "Collection 'teams' created"]:
        all_validation_failures.append(f"create_db_structure: got {result.collections}")
    if db.create_collection.call_args_list != [call("teams")]:
        all_validation_failures.append(f"create_db_structure calls: got {db.create_collection.call_args_list}")

    # Test 3: an empty structure is rejected
    total_tests += 1
    try:
        create_db_structure(db, system, DbStructure())
        all_validation_failures.append("create_db_structure: empty structure accepted")
    except InvalidInputError:
        pass

    if all_validation_failures:
        print(f"❌ VALIDATION FAILED - {len(all_validation_failures)} of {total_tests} tests failed:")
        for failure in all_validation_failures:
            print(f"  - {failure}")
        sys.exit(1)
    else:
        print(f"✅ VALIDATION PASSED - All {total_tests} tests produced expected results")
        sys.exit(0)
