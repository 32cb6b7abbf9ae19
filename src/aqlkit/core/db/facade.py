"""
Convenience facade over a python-arango database.

`ArangoDB` wraps one `StandardDatabase` and exposes:
- `query`, `return_all` and `return_one` for ready-made queries
- `create`, `read`, `update` and `delete` for documents
- `fetch_*` and `find_by_filter_criteria` lookups built by `aqlkit.core.queries`
- `unique_constraint_validation`
- array attribute helpers (`add_array_value`, `update_array_object`, ...) and
  `create_edge_relation`
- database structure provisioning (`create_db_structure`, `validate_db_structure`, `clear_db`)

Lookups and CRUD perform one driver call; the array helpers read the
document first. Driver exceptions propagate unchanged.

Links:
- python-arango: https://docs.python-arango.com/
- python-arango cursors: https://docs.python-arango.com/en/main/cursor.html

Sample input:
    db = ArangoDB.from_config()
    db.fetch_one_by_property_value("cyclists", NamedValue(name="surname", value="Armstrong"))

Expected output:
    {'_key': '123', '_id': 'cyclists/123', '_rev': '...', 'name': 'Lance', 'surname': 'Armstrong'}
"""

from typing import Any, Dict, List, Optional, Union

from loguru import logger

from arango import ArangoClient
from arango.cursor import Cursor
from arango.database import StandardDatabase

from aqlkit.config import CONFIG
from aqlkit.core import queries
from aqlkit.core.db import structure as db_structure
from aqlkit.core.types import (
    AqlQuery,
    ArrayUpdateStrategy,
    Criteria,
    DbClearanceStrategy,
    DbStructure,
    DbStructureResult,
    DbStructureValidation,
    DocumentNotFoundError,
    DocumentTrimOptions,
    DocumentUpdate,
    EdgeRelation,
    FetchOptions,
    Identifier,
    InvalidInputError,
    ListOfFilters,
    LogOptions,
    MatchType,
    NamedValue,
    QueryResult,
    UniqueConstraint,
    UniqueConstraintResult,
)
from aqlkit.core.utils.connection import connect_arango, open_database
from aqlkit.core.utils.trim import trim_document, trim_documents

FilterInput = Union[str, ListOfFilters, AqlQuery, Criteria]


def _to_criteria(criteria: Optional[FilterInput]) -> Optional[Criteria]:
    if criteria is None or isinstance(criteria, Criteria):
        return criteria
    return Criteria(filter=criteria)


def _get_path(document: Dict[str, Any], path: str) -> Any:
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


class ArangoDB:
    """
    A thin wrapper around a python-arango `StandardDatabase`.

    The native database is exposed as `driver`; `system` is the `_system`
    database used for existence checks and provisioning.
    """

    def __init__(
        self,
        driver: StandardDatabase,
        system: Optional[StandardDatabase] = None,
        options: Optional[LogOptions] = None,
    ):
        self.driver = driver
        self.system = system
        self.options = options or LogOptions()

    @classmethod
    def from_config(
        cls,
        config: Optional[Dict[str, Any]] = None,
        client: Optional[ArangoClient] = None,
        options: Optional[LogOptions] = None,
    ) -> "ArangoDB":
        """Build a facade from a CONFIG["arango"]-shaped mapping."""
        cfg = config or CONFIG["arango"]
        client = client or connect_arango(cfg["host"])
        driver = open_database(client, cfg["db_name"], cfg["user"], cfg["password"])
        system = open_database(client, "_system", cfg["user"], cfg["password"])
        if options is None:
            options = LogOptions(
                print_queries=CONFIG["logging"]["print_queries"],
                debug_filters=CONFIG["logging"]["debug_filters"],
            )
        return cls(driver, system, options)

    @property
    def name(self) -> str:
        return self.driver.name

    def collection(self, name: str):
        return self.driver.collection(name)

    def _fetch_options(self, options: Optional[FetchOptions]) -> FetchOptions:
        options = options.model_copy() if options is not None else FetchOptions()
        if self.options.print_queries:
            options.print_query = True
        if self.options.debug_filters:
            options.debug_filters = True
        return options

    def _require_system(self) -> StandardDatabase:
        if self.system is None:
            raise RuntimeError(f"No _system database handle available for '{self.name}'")
        return self.system

    # ---- Query execution ----

    def query(self, query: Union[str, AqlQuery], bind_vars: Optional[Dict[str, Any]] = None, **driver_options) -> Cursor:
        """
        Execute a query and return the driver cursor.

        Args:
            query: AQL text, or an AqlQuery whose bind variables are used.
            bind_vars: Extra bind variables, merged over those of an AqlQuery.
            **driver_options: Passed to `db.aql.execute` (count, full_count, ...).
        """
        if isinstance(query, AqlQuery):
            bind_vars = {**query.bind_vars, **(bind_vars or {})}
            query = query.query

        return self.driver.aql.execute(query, bind_vars=bind_vars or {}, **driver_options)

    def return_all(self, query: Union[str, AqlQuery], options: Optional[FetchOptions] = None) -> QueryResult:
        """Execute a query and return all documents at once."""
        options = options or FetchOptions()
        documents = list(self.query(query, **options.query))
        return QueryResult(data=trim_documents(documents, options.trim))

    def return_one(self, query: Union[str, AqlQuery], options: Optional[FetchOptions] = None) -> Any:
        """
        Execute a query and return only its first result, or None.

        A first result that is itself a list is trimmed element by element.
        """
        options = options or FetchOptions()
        documents = list(self.query(query, **options.query))

        if not documents or not documents[0]:
            return None

        if isinstance(documents[0], list):
            return trim_documents(documents[0], options.trim)

        return trim_document(documents[0], options.trim)

    def _fetch(self, query: AqlQuery, options: FetchOptions) -> Union[Cursor, QueryResult]:
        driver_options = dict(options.query)
        if options.limit:
            driver_options.setdefault("count", True)
            driver_options.setdefault("full_count", True)

        cursor = self.query(query, **driver_options)

        if options.return_cursor:
            return cursor

        documents = list(cursor)
        stats = cursor.statistics() if driver_options.get("full_count") else None

        return QueryResult(
            data=trim_documents(documents, options.trim),
            size=cursor.count(),
            total=stats.get("full_count") if stats else None,
        )

    # ---- Document CRUD ----

    def read(
        self,
        collection: str,
        identifier: Union[str, int, Identifier, Dict[str, Any]],
        trim: Optional[DocumentTrimOptions] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Read one document by key, by `{"_key": ...}` / `{"_id": ...}`, or by
        `Identifier(property=..., value=...)`. Returns None when not found.
        """
        if isinstance(identifier, Identifier):
            if identifier.property:
                document = self.fetch_one_by_property_value(
                    collection, NamedValue(name=identifier.property, value=identifier.value)
                )
            else:
                document = self.collection(collection).get(str(identifier.value))
        elif isinstance(identifier, int):
            document = self.collection(collection).get(str(identifier))
        else:
            document = self.collection(collection).get(identifier)

        if not document:
            return None

        return trim_document(document, trim)

    def create(
        self,
        collection: str,
        data: Union[Dict[str, Any], List[Dict[str, Any]]],
        **insert_options,
    ) -> List[Any]:
        """Insert one document or a list of documents; always returns a list."""
        if isinstance(data, list):
            return self.collection(collection).insert_many(data, **insert_options)

        return [self.collection(collection).insert(data, **insert_options)]

    def update(
        self,
        collection: str,
        update: Union[DocumentUpdate, List[Dict[str, Any]]],
        **update_options,
    ) -> List[Any]:
        """
        Update documents.

        A list is passed to `update_many` (each entry must carry `_key` or
        `_id`). A DocumentUpdate whose key is an Identifier with a property
        updates every matching document through an AQL query.
        """
        if isinstance(update, list):
            return self.collection(collection).update_many(update, **update_options)

        key = update.key
        if isinstance(key, Identifier):
            if key.property:
                query = queries.update_documents_by_key_value(
                    collection, NamedValue(name=key.property, value=key.value), update.data
                )
                return list(self.query(query))
            key = str(key.value)

        document = {**update.data, "_key": key}
        return [self.collection(collection).update(document, **update_options)]

    def delete(
        self,
        collection: str,
        identifier: Union[str, Identifier, List[Any]],
        **delete_options,
    ) -> List[Any]:
        """Delete by key, by a list of keys/documents, or by Identifier."""
        if isinstance(identifier, list):
            return self.collection(collection).delete_many(identifier, **delete_options)

        if isinstance(identifier, Identifier):
            if identifier.property:
                query = queries.delete_documents_by_key_value(
                    collection, NamedValue(name=identifier.property, value=identifier.value)
                )
                return list(self.query(query))
            identifier = str(identifier.value)

        return [self.collection(collection).delete(identifier, **delete_options)]

    def fetch_property(
        self,
        collection: str,
        identifier: Union[str, Identifier, Dict[str, Any]],
        property: str,
    ) -> Any:
        """
        Return one (possibly nested, dot-separated) attribute of a document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """
        document = self.read(collection, identifier)
        if document is None:
            raise DocumentNotFoundError("Document not found")

        return _get_path(document, property)

    def update_property(
        self,
        collection: str,
        identifier: Union[str, Identifier, Dict[str, Any]],
        property: str,
        value: Any,
    ) -> List[Dict[str, Any]]:
        """
        Set one (possibly nested) attribute of a document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """
        document = self.read(collection, identifier)
        if document is None:
            raise DocumentNotFoundError("Document not found")

        query = queries.update_property(collection, document["_key"], property, value)
        return list(self.query(query))

    # ---- Arrays ----

    def _read_array(
        self,
        collection: str,
        identifier: Union[str, Identifier, Dict[str, Any]],
        property: str,
        action: str,
    ):
        document = self.read(collection, identifier)
        if document is None:
            raise DocumentNotFoundError("Document not found")

        current = _get_path(document, property)
        if current is not None and not isinstance(current, list):
            raise InvalidInputError(f"Cannot {action} an existing field that is not already of type array")

        return document["_key"], current

    def add_array_value(
        self,
        collection: str,
        identifier: Union[str, Identifier, Dict[str, Any]],
        property: str,
        value: Any,
        allow_duplicates: bool = False,
        unique_object_field: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Add a value (or every value of a list) to an array attribute.

        Scalars already in the array are skipped unless `allow_duplicates` is
        set. Objects are compared on `unique_object_field` instead, which is
        then required on the object.

        Raises:
            DocumentNotFoundError: If the document does not exist.
            InvalidInputError: If the attribute holds something other than an
                array, or an object value cannot be checked for uniqueness or
                is already present.
        """
        key, current = self._read_array(collection, identifier, property, "add array value to")

        if isinstance(value, dict) and not allow_duplicates:
            if not unique_object_field or not value.get(unique_object_field):
                raise InvalidInputError(
                    "The array object must be unique, no 'unique_object_field' was provided, "
                    "or the array object is missing that field"
                )
            marker = value[unique_object_field]
            for element in current or []:
                if isinstance(element, dict) and element.get(unique_object_field) == marker:
                    raise InvalidInputError("The array object being added is not unique")

        # objects are checked above, the server compares scalars
        unique = False if isinstance(value, dict) else not allow_duplicates

        query = queries.add_array_value(collection, key, property, value, unique)
        return list(self.query(query))

    def remove_array_value(
        self,
        collection: str,
        identifier: Union[str, Identifier, Dict[str, Any]],
        property: str,
        value: Any,
    ) -> Optional[List[Dict[str, Any]]]:
        """Remove a value from an array attribute; None when the array is missing or empty."""
        key, current = self._read_array(collection, identifier, property, "remove array value from")
        if not current:
            return None

        query = queries.remove_array_value(collection, key, property, value)
        return list(self.query(query))

    def add_array_object(
        self,
        collection: str,
        identifier: Union[str, Identifier, Dict[str, Any]],
        property: str,
        value: Dict[str, Any],
        unique_object_field: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Add an object to an array attribute.

        Without `unique_object_field` duplicates are allowed.
        """
        if not isinstance(value, dict):
            raise InvalidInputError("Array value is not an object")

        return self.add_array_value(
            collection, identifier, property, value,
            allow_duplicates=unique_object_field is None,
            unique_object_field=unique_object_field,
        )

    def remove_array_object(
        self,
        collection: str,
        identifier: Union[str, Identifier, Dict[str, Any]],
        property: str,
        id_field: str,
        id_value: Any,
    ) -> Optional[List[Dict[str, Any]]]:
        """
        Remove every array element whose `id_field` equals `id_value`.

        Returns None when nothing matched, so no write took place.
        """
        key, current = self._read_array(collection, identifier, property, "remove array value from")
        if not current:
            return None

        kept = [
            element for element in current
            if not (isinstance(element, dict) and element.get(id_field) is not None and element.get(id_field) == id_value)
        ]
        if len(kept) == len(current):
            return None

        return self.update_property(collection, key, property, kept)

    def update_array_object(
        self,
        collection: str,
        identifier: Union[str, Identifier, Dict[str, Any]],
        property: str,
        id_field: str,
        id_value: Any,
        updated: Dict[str, Any],
        strategy: ArrayUpdateStrategy = ArrayUpdateStrategy.MERGE,
        add_if_not_found: bool = False,
        allow_duplicates: bool = False,
    ) -> Optional[List[Dict[str, Any]]]:
        """
        Merge `updated` into (or replace with it) every array element whose
        `id_field` equals `id_value`.

        Args:
            strategy: MERGE keeps the element's other attributes, REPLACE
                drops them.
            add_if_not_found: Add `updated` as a new element when nothing
                matches.
            allow_duplicates: With `add_if_not_found`, skip the uniqueness
                check on `id_field`.

        Returns:
            The update result, or None when nothing was written.

        Raises:
            InvalidInputError: If `updated` carries a different `id_field`
                value and has to be added.
        """
        key, current = self._read_array(collection, identifier, property, "update array value from")

        updated = dict(updated)
        if not updated.get(id_field):
            updated[id_field] = id_value

        changed = False
        elements = []
        for element in current or []:
            if isinstance(element, dict) and element.get(id_field) is not None and element.get(id_field) == id_value:
                changed = True
                element = dict(updated) if strategy == ArrayUpdateStrategy.REPLACE else {**element, **updated}
            elements.append(element)

        if changed:
            return self.update_property(collection, key, property, elements)

        if not add_if_not_found:
            return None

        if updated[id_field] != id_value:
            raise InvalidInputError("Specified ID does not match the one provided in the object instance")

        return self.add_array_object(
            collection, key, property, updated,
            unique_object_field=None if allow_duplicates else id_field,
        )

    def replace_array_object(
        self,
        collection: str,
        identifier: Union[str, Identifier, Dict[str, Any]],
        property: str,
        id_field: str,
        id_value: Any,
        updated: Dict[str, Any],
        add_if_not_found: bool = False,
        allow_duplicates: bool = False,
    ) -> Optional[List[Dict[str, Any]]]:
        return self.update_array_object(
            collection, identifier, property, id_field, id_value, updated,
            ArrayUpdateStrategy.REPLACE, add_if_not_found, allow_duplicates,
        )

    def replace_array(
        self,
        collection: str,
        identifier: Union[str, Identifier, Dict[str, Any]],
        property: str,
        values: List[Any],
    ) -> List[Dict[str, Any]]:
        return self.update_property(collection, identifier, property, values)

    # ---- Graph ----

    def create_edge_relation(
        self,
        edge_collection: str,
        relation: Union[EdgeRelation, Dict[str, Any], List[Union[EdgeRelation, Dict[str, Any]]]],
        **insert_options,
    ) -> List[Any]:
        """
        Save one edge, or a batch of edges, into an edge collection.

        In a batch, relations missing `from` or `to` are skipped.

        Raises:
            InvalidInputError: If a single relation lacks `from` or `to`.
        """
        if isinstance(relation, list):
            edges = []
            for r in relation:
                r = EdgeRelation.model_validate(r)
                if not r.from_ or not r.to:
                    logger.debug(f"Skipping edge relation without endpoints: {r}")
                    continue
                edges.append({**r.data, "_from": r.from_, "_to": r.to})

            return self.collection(edge_collection).insert_many(edges, **insert_options)

        relation = EdgeRelation.model_validate(relation)
        if not relation.from_ or not relation.to:
            raise InvalidInputError("Cannot create edge relation without relational keys")

        edge = {**relation.data, "_from": relation.from_, "_to": relation.to}
        return [self.collection(edge_collection).insert(edge, **insert_options)]

    # ---- Lookups ----

    def fetch_all(self, collection: str, options: Optional[FetchOptions] = None) -> Union[Cursor, QueryResult]:
        options = self._fetch_options(options)
        return self._fetch(queries.fetch_all(collection, options), options)

    def fetch_all_by_property_value(
        self,
        collection: str,
        properties: Union[NamedValue, List[NamedValue]],
        match: MatchType = MatchType.ANY,
        options: Optional[FetchOptions] = None,
        criteria: Optional[FilterInput] = None,
    ) -> Union[Cursor, QueryResult]:
        """All documents where one or more properties equal the given values."""
        options = self._fetch_options(options)
        query = queries.fetch_by_property_value(collection, properties, match, options, _to_criteria(criteria))
        return self._fetch(query, options)

    def fetch_one_by_property_value(
        self,
        collection: str,
        properties: Union[NamedValue, List[NamedValue]],
        match: MatchType = MatchType.ANY,
        options: Optional[FetchOptions] = None,
        criteria: Optional[FilterInput] = None,
    ) -> Any:
        """The first document matching `fetch_all_by_property_value`, or None."""
        options = self._fetch_options(options)
        query = queries.fetch_by_property_value(collection, properties, match, options, _to_criteria(criteria))
        return self.return_one(query, options)

    def fetch_all_by_composite_value(
        self,
        collection: str,
        properties: List[NamedValue],
        options: Optional[FetchOptions] = None,
        criteria: Optional[FilterInput] = None,
    ) -> Union[Cursor, QueryResult]:
        options = self._fetch_options(options)
        query = queries.fetch_by_composite_value(collection, properties, options, _to_criteria(criteria))
        return self._fetch(query, options)

    def fetch_one_by_composite_value(
        self,
        collection: str,
        properties: List[NamedValue],
        options: Optional[FetchOptions] = None,
        criteria: Optional[FilterInput] = None,
    ) -> Any:
        options = self._fetch_options(options)
        query = queries.fetch_by_composite_value(collection, properties, options, _to_criteria(criteria))
        return self.return_one(query, options)

    def find_by_filter_criteria(
        self,
        collection: str,
        criteria: FilterInput,
        options: Optional[FetchOptions] = None,
    ) -> Union[Cursor, QueryResult]:
        """
        Documents matching a raw filter string, a ListOfFilters, an AqlQuery
        or a Criteria.

        Raises:
            InvalidInputError: If no criteria are supplied.
        """
        if criteria is None:
            raise InvalidInputError("No criteria supplied")

        options = self._fetch_options(options)
        query = queries.find_by_filter_criteria(collection, criteria, options)
        return self._fetch(query, options)

    def unique_constraint_validation(self, constraints: UniqueConstraint) -> UniqueConstraintResult:
        """Check whether any document already holds the constrained values."""
        query = queries.unique_constraint_query(constraints, self._fetch_options(None))
        documents = list(self.query(query))

        if documents:
            logger.debug(f"Unique constraint on '{constraints.collection}' violated by {documents}")

        return UniqueConstraintResult(
            violates_unique_constraint=len(documents) > 0,
            documents=documents,
        )

    # ---- Trimming ----

    @staticmethod
    def trim_document(document: Any, options: Optional[DocumentTrimOptions] = None) -> Any:
        return trim_document(document, options)

    @staticmethod
    def trim_documents(documents: Optional[List[Any]], options: Optional[DocumentTrimOptions] = None) -> Optional[List[Any]]:
        return trim_documents(documents, options)

    # ---- Structure ----

    def db_exists(self) -> bool:
        return db_structure.db_exists(self.driver, self._require_system())

    def clear_db(self, method: DbClearanceStrategy = DbClearanceStrategy.DELETE_DATA) -> None:
        db_structure.clear_db(self.driver, self._require_system(), method)

    def validate_db_structure(self, structure: DbStructure) -> DbStructureValidation:
        return db_structure.validate_db_structure(self.driver, self._require_system(), structure)

    def create_db_structure(
        self,
        structure: DbStructure,
        clear: Optional[DbClearanceStrategy] = None,
    ) -> DbStructureResult:
        return db_structure.create_db_structure(self.driver, self._require_system(), structure, clear)


if __name__ == "__main__":
    import sys
    from unittest.mock import MagicMock

    all_validation_failures = []
    total_tests = 0

    # A MagicMock stands in for the python-arango database
    driver = MagicMock()
    driver.name = "cycling"
    driver.aql.execute.return_value = iter([{"_key": "1", "name": "Lance"}])
    db = ArangoDB(driver)

    # Test 1: lookups bind the collection and values
    total_tests += 1
    lance = db.fetch_one_by_property_value("cyclists", NamedValue(name="name", value="Lance"))
    _, kwargs = driver.aql.execute.call_args
    if kwargs["bind_vars"] != {"@collection": "cyclists", "prop": "name", "val": "Lance"}:
        all_validation_failures.append(f"fetch_one_by_property_value bind_vars: got {kwargs['bind_vars']}")
    if lance != {"_key": "1", "name": "Lance"}:
        all_validation_failures.append(f"fetch_one_by_property_value: got {lance}")

    # Test 2: array helpers refuse non-array attributes
    total_tests += 1
    driver.collection.return_value.get.return_value = {"_key": "1", "country": "USA"}
    try:
        db.add_array_value("cyclists", "1", "country", "France")
        all_validation_failures.append("add_array_value: non-array attribute accepted")
    except InvalidInputError:
        pass

    # Test 3: edges carry both endpoints
    total_tests += 1
    db.create_edge_relation("rivals", {"from": "cyclists/1", "to": "cyclists/2"})
    saved = driver.collection.return_value.insert.call_args[0][0]
    if saved != {"_from": "cyclists/1", "_to": "cyclists/2"}:
        all_validation_failures.append(f"create_edge_relation: got {saved}")

    # Test 4: structure operations need a _system handle
    total_tests += 1
    try:
        db.db_exists()
        all_validation_failures.append("db_exists: ran without a _system handle")
    except RuntimeError:
        pass

    if all_validation_failures:
        print(f"❌ VALIDATION FAILED - {len(all_validation_failures)} of {total_tests} tests failed:")
        for failure in all_validation_failures:
            print(f"  - {failure}")
        sys.exit(1)
    else:
        print(f"✅ VALIDATION PASSED - All {total_tests} tests produced expected results")
        sys.exit(0)
