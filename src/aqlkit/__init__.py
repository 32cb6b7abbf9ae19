"""
AQL query construction and a convenience layer over python-arango.

This package is organised in two layers:
1. Core layer: filter compiler, query builders and the database facade
2. CLI layer: command-line interface

High-level usage examples:

1. Building queries:
   ```python
   from aqlkit import compose, fetch_by_property_value, NamedValue, MatchType

   compose('name == "Lance" && age > 40')
   # 'd.name == "Lance" && d.age > 40'

   q = fetch_by_property_value(
       "cyclists",
       [NamedValue(name="name", value="Lance"), NamedValue(name="surname", value="Armstrong")],
       MatchType.ALL,
   )
   # q.query, q.bind_vars
   ```

2. Running them through the facade:
   ```python
   from aqlkit import ArangoDB, ListOfFilters, MatchType

   db = ArangoDB.from_config()
   result = db.find_by_filter_criteria(
       "cyclists",
       ListOfFilters(filters=['d.name == "Lance"', 'd.name == "Chris"'], match=MatchType.ANY),
   )
   result.data
   ```

3. Several databases on one connection:
   ```python
   from aqlkit import ArangoConnection

   conn = ArangoConnection(hosts="http://localhost:8529", username="root", password="")
   conn.db("cycling").fetch_all("cyclists")
   ```
"""

# Version information
__version__ = "0.1.0"

from aqlkit.core.types import (
    InvalidInputError,
    DocumentNotFoundError,
    MatchType,
    MatchTypeOperator,
    DbClearanceStrategy,
    ArrayUpdateStrategy,
    NamedValue,
    CompositeKey,
    UniqueValue,
    UniqueConstraint,
    UniqueConstraintResult,
    ListOfFilters,
    SearchTerms,
    Criteria,
    AqlQuery,
    FetchOptions,
    DocumentTrimOptions,
    LogOptions,
    QueryResult,
    Identifier,
    DocumentUpdate,
    EdgeDefinition,
    EdgeRelation,
    GraphDefinition,
    DbStructure,
)

from aqlkit.core.filters import locate, prefix_clause, compose
from aqlkit.core.queries import (
    fetch_all,
    fetch_by_property_value,
    fetch_by_composite_value,
    find_by_filter_criteria,
    update_documents_by_key_value,
    delete_documents_by_key_value,
    update_property,
    add_array_value,
    remove_array_value,
    unique_constraint_query,
)
from aqlkit.core.db import ArangoDB, ArangoConnection

__all__ = [
    "__version__",

    # Types
    "InvalidInputError",
    "DocumentNotFoundError",
    "MatchType",
    "MatchTypeOperator",
    "DbClearanceStrategy",
    "ArrayUpdateStrategy",
    "NamedValue",
    "CompositeKey",
    "UniqueValue",
    "UniqueConstraint",
    "UniqueConstraintResult",
    "ListOfFilters",
    "SearchTerms",
    "Criteria",
    "AqlQuery",
    "FetchOptions",
    "DocumentTrimOptions",
    "LogOptions",
    "QueryResult",
    "Identifier",
    "DocumentUpdate",
    "EdgeDefinition",
    "EdgeRelation",
    "GraphDefinition",
    "DbStructure",

    # Filter compiler
    "locate",
    "prefix_clause",
    "compose",

    # Query builders
    "fetch_all",
    "fetch_by_property_value",
    "fetch_by_composite_value",
    "find_by_filter_criteria",
    "update_documents_by_key_value",
    "delete_documents_by_key_value",
    "update_property",
    "add_array_value",
    "remove_array_value",
    "unique_constraint_query",

    # Facade
    "ArangoDB",
    "ArangoConnection",
]
