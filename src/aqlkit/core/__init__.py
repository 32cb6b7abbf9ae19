"""Core functionality for AQL query construction.

This package provides the filter compiler, the query builders and the
database facade, with no presentation concerns.
"""

from aqlkit.core.types import (
    InvalidInputError,
    DocumentNotFoundError,
    MatchType,
    MatchTypeOperator,
    NamedValue,
    CompositeKey,
    UniqueValue,
    UniqueConstraint,
    ListOfFilters,
    SearchTerms,
    Criteria,
    AqlQuery,
    FetchOptions,
    DocumentTrimOptions,
)

# Filter compiler
from aqlkit.core.filters import (
    locate,
    prefix_clause,
    compose,
)

# Query builders
from aqlkit.core.queries import (
    fetch_all,
    fetch_by_property_value,
    fetch_by_composite_value,
    find_by_filter_criteria,
    update_documents_by_key_value,
    delete_documents_by_key_value,
    unique_constraint_query,
)

# Facade
from aqlkit.core.db import ArangoDB, ArangoConnection

__all__ = [
    # Types
    "InvalidInputError",
    "DocumentNotFoundError",
    "MatchType",
    "MatchTypeOperator",
    "NamedValue",
    "CompositeKey",
    "UniqueValue",
    "UniqueConstraint",
    "ListOfFilters",
    "SearchTerms",
    "Criteria",
    "AqlQuery",
    "FetchOptions",
    "DocumentTrimOptions",

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
    "unique_constraint_query",

    # Facade
    "ArangoDB",
    "ArangoConnection",
]
