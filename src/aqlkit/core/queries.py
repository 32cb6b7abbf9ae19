"""
AQL query builders.

Every builder is a pure function returning an `AqlQuery` (query text plus
bind variables). Literal values and property names taken from NamedValue
input are always bound as parameters; the collection is bound as
`@@collection`. Filter strings from ListOfFilters or raw-string criteria are
caller-authored AQL and are spliced into the query text. `sort_by` is spliced
as a raw identifier.

Links:
- AQL FOR/FILTER/SORT/LIMIT: https://docs.arangodb.com/stable/aql/high-level-operations/
- python-arango AQL: https://docs.python-arango.com/en/main/aql.html

Sample input:
    fetch_by_property_value(
        "users",
        [NamedValue(name="a", value=1), NamedValue(name="b", value=2)],
        MatchType.ALL,
    )

Expected output:
    AqlQuery(
        query="FOR d IN @@collection FILTER d.@a_key_1 == @a_val_1 && d.@b_key_2 == @b_val_2 RETURN d",
        bind_vars={"@collection": "users", "a_key_1": "a", "a_val_1": 1, "b_key_2": "b", "b_val_2": 2},
    )
"""

from typing import Any, Dict, List, Optional, Union

from aqlkit.core.filters import (
    attribute_path,
    bind_name,
    to_criteria_expression,
    to_search_filter,
)
from aqlkit.core.types import (
    AqlQuery,
    CompositeKey,
    Criteria,
    FetchOptions,
    InvalidInputError,
    ListOfFilters,
    MatchType,
    NamedValue,
    UniqueConstraint,
)
from aqlkit.core.utils.log_utils import log_filters, log_query


def _equality(
    prop: NamedValue,
    key_param: str,
    value_param: str,
    bind_vars: Dict[str, Any],
    lower: bool = False,
) -> str:
    bind_vars[key_param] = attribute_path(prop.name)

    if (lower or not prop.case_sensitive) and isinstance(prop.value, str):
        bind_vars[value_param] = prop.value.lower()
        return f"LOWER(d.@{key_param}) == @{value_param}"

    bind_vars[value_param] = prop.value
    return f"d.@{key_param} == @{value_param}"


def _query_options(options: Optional[FetchOptions]) -> str:
    if options is None:
        return ""

    opts = ""

    if options.sort_by:
        opts += f" SORT d.{options.sort_by}"
        order = (options.sort_order or "").lower()
        if order in ("ascending", "asc"):
            opts += " ASC"
        elif order in ("descending", "desc"):
            opts += " DESC"

    if options.limit:
        if options.offset:
            opts += f" LIMIT {options.offset}, {options.limit}"
        else:
            opts += f" LIMIT {options.limit}"

    return opts


def fetch_all(collection: str, options: Optional[FetchOptions] = None) -> AqlQuery:
    """All documents of a collection, with optional sort and paging."""
    query = AqlQuery(
        query=f"FOR d IN @@collection{_query_options(options)} RETURN d",
        bind_vars={"@collection": collection},
    )
    log_query("fetch_all", query, options)
    return query


def fetch_by_property_value(
    collection: str,
    properties: Union[NamedValue, List[NamedValue]],
    match: MatchType = MatchType.ANY,
    options: Optional[FetchOptions] = None,
    criteria: Optional[Criteria] = None,
) -> AqlQuery:
    """
    Equality lookup on one property, or on several combined with `match`.

    Args:
        collection: The collection to search.
        properties: One NamedValue, or a list of them.
        match: ANY joins the equalities with `||`, ALL with `&&`.
        options: Sort and paging options.
        criteria: Optional filter/search ANDed with the equality group.

    Returns:
        AqlQuery: The query and its bind variables.

    Raises:
        InvalidInputError: If an empty list of properties is given.
    """
    log_filters("fetch_by_property_value", properties, options)

    bind_vars: Dict[str, Any] = {"@collection": collection}

    if isinstance(properties, NamedValue):
        expression = _equality(properties, "prop", "val", bind_vars)
    else:
        if not properties:
            raise InvalidInputError("No property values specified")

        clauses = []
        for count, prop in enumerate(properties, start=1):
            stem = bind_name(prop.name)
            clauses.append(_equality(prop, f"{stem}_key_{count}", f"{stem}_val_{count}", bind_vars))
        expression = f" {match.operator} ".join(clauses)

    if criteria is not None:
        prefix = options.prefix_property_names if options is not None else True
        criteria_expression = to_criteria_expression(criteria, bind_vars, prefix)
        if criteria_expression:
            expression = f"( {expression} ) && {criteria_expression}"

    query = AqlQuery(
        query=f"FOR d IN @@collection FILTER {expression}{_query_options(options)} RETURN d",
        bind_vars=bind_vars,
    )
    log_query("fetch_by_property_value", query, options)
    return query


def fetch_by_composite_value(
    collection: str,
    properties: List[NamedValue],
    options: Optional[FetchOptions] = None,
    criteria: Optional[Criteria] = None,
) -> AqlQuery:
    """Equality lookup where every property of a composite key must match."""
    return fetch_by_property_value(collection, properties, MatchType.ALL, options, criteria)


def find_by_filter_criteria(
    collection: str,
    criteria: Union[str, ListOfFilters, AqlQuery, Criteria, None],
    options: Optional[FetchOptions] = None,
) -> AqlQuery:
    """
    Lookup by a raw filter string, a ListOfFilters, a prebuilt AqlQuery or a
    Criteria combining a filter with a search.

    Raw strings are run through `compose` unless
    `options.prefix_property_names` is false. An empty criteria yields a query
    without FILTER that returns every document.
    """
    log_filters("find_by_filter_criteria", criteria, options)

    bind_vars: Dict[str, Any] = {"@collection": collection}
    prefix = options.prefix_property_names if options is not None else True

    expression = None
    if criteria:
        if not isinstance(criteria, Criteria):
            criteria = Criteria(filter=criteria)
        expression = to_criteria_expression(criteria, bind_vars, prefix)

    filter_clause = f" FILTER {expression}" if expression else ""

    query = AqlQuery(
        query=f"FOR d IN @@collection{filter_clause}{_query_options(options)} RETURN d",
        bind_vars=bind_vars,
    )
    log_query("find_by_filter_criteria", query, options)
    return query


def update_documents_by_key_value(
    collection: str,
    identifier: NamedValue,
    data: Dict[str, Any],
) -> AqlQuery:
    """Update every document whose `identifier.name` equals its value."""
    bind_vars: Dict[str, Any] = {"@collection": collection, "data": data}
    expression = _equality(identifier, "property", "value", bind_vars)

    query = AqlQuery(
        query=(
            f"FOR d IN @@collection FILTER {expression} "
            "UPDATE d WITH @data IN @@collection RETURN { _key: NEW._key }"
        ),
        bind_vars=bind_vars,
    )
    log_query("update_documents_by_key_value", query)
    return query


def delete_documents_by_key_value(collection: str, identifier: NamedValue) -> AqlQuery:
    """Remove every document whose `identifier.name` equals its value."""
    bind_vars: Dict[str, Any] = {"@collection": collection}
    expression = _equality(identifier, "property", "value", bind_vars)

    query = AqlQuery(
        query=(
            f"FOR d IN @@collection FILTER {expression} "
            "REMOVE d IN @@collection RETURN { _key: OLD._key }"
        ),
        bind_vars=bind_vars,
    )
    log_query("delete_documents_by_key_value", query)
    return query


def update_property(collection: str, key: str, property: str, value: Any) -> AqlQuery:
    """
    Set one (possibly nested) attribute of a document.

    Nested paths such as `address.city` are turned into a nested patch object,
    so sibling attributes are merged rather than replaced. A None value removes
    the attribute.
    """
    patch: Any = value
    for part in reversed(property.split(".")):
        patch = {part: patch}

    query = AqlQuery(
        query=(
            "FOR d IN @@collection FILTER d._key == @key "
            "UPDATE d WITH @patch IN @@collection OPTIONS { keepNull: false } "
            "RETURN { _key: NEW._key, value: NEW.@property }"
        ),
        bind_vars={
            "@collection": collection,
            "key": key,
            "patch": patch,
            "property": attribute_path(property),
        },
    )
    log_query("update_property", query)
    return query


def _nested_patch(property: str, expression: str, bind_vars: Dict[str, Any]) -> str:
    """Object literal setting `property` (dot-separated) to an AQL expression."""
    parts = [part for part in property.split(".") if part]
    patch = expression
    for count in range(len(parts), 0, -1):
        bind_vars[f"field_{count}"] = parts[count - 1]
        patch = f"{{ [ @field_{count} ]: {patch} }}"
    return patch


def _array_update(collection: str, key: str, property: str, expression: str, bind_vars: Dict[str, Any]) -> str:
    bind_vars.update({"@collection": collection, "key": key, "property": attribute_path(property)})
    return (
        "FOR d IN @@collection FILTER d._key == @key "
        f"UPDATE d WITH {_nested_patch(property, expression, bind_vars)} IN @@collection "
        "RETURN { _key: NEW._key, value: NEW.@property }"
    )


def add_array_value(
    collection: str,
    key: str,
    property: str,
    value: Any,
    unique: bool = True,
) -> AqlQuery:
    """
    Append to the array held in a (possibly nested) attribute.

    A list value is concatenated with APPEND, anything else is added with
    PUSH. With `unique` set, values already in the array are skipped by the
    server. A missing attribute starts out as an empty array.
    """
    function = "APPEND" if isinstance(value, list) else "PUSH"
    bind_vars: Dict[str, Any] = {"value": value, "unique": unique}
    query = AqlQuery(
        query=_array_update(collection, key, property, f"{function}(d.@property, @value, @unique)", bind_vars),
        bind_vars=bind_vars,
    )
    log_query("add_array_value", query)
    return query


def remove_array_value(collection: str, key: str, property: str, value: Any) -> AqlQuery:
    """Remove every occurrence of `value` from an array attribute."""
    bind_vars: Dict[str, Any] = {"value": value}
    query = AqlQuery(
        query=_array_update(collection, key, property, "REMOVE_VALUE(d.@property, @value)", bind_vars),
        bind_vars=bind_vars,
    )
    log_query("remove_array_value", query)
    return query


def unique_constraint_query(
    constraints: UniqueConstraint,
    options: Optional[FetchOptions] = None,
) -> AqlQuery:
    """
    Find documents that would violate a uniqueness constraint.

    Each UniqueValue contributes one equality and each CompositeKey a
    parenthesised AND-group; all branches are OR-ed in input order. When
    `exclude_document_key` is set that document is left out, which allows the
    check to run while updating the same document. `options` only steers
    logging: `print_query` and `debug_filters` raise the records to INFO.

    Raises:
        InvalidInputError: If no constraints are given.
    """
    if constraints is None or not constraints.constraints:
        raise InvalidInputError("No constraints specified")

    log_filters("unique_constraint_query", constraints, options)

    bind_vars: Dict[str, Any] = {"@collection": constraints.collection}
    query = "FOR d IN @@collection FILTER"

    if constraints.exclude_document_key:
        bind_vars["excludeDocumentKey"] = constraints.exclude_document_key
        query += " d._key != @excludeDocumentKey FILTER"

    branches = []
    count = 0

    for constraint in constraints.constraints:
        if isinstance(constraint, CompositeKey):
            group = []
            for kv in constraint.composite:
                count += 1
                stem = bind_name(kv.name)
                group.append(_equality(
                    kv, f"{stem}_key_{count}", f"{stem}_val_{count}", bind_vars,
                    lower=constraints.case_insensitive,
                ))
            branches.append("( " + " && ".join(group) + " )")
        else:
            count += 1
            stem = bind_name(constraint.unique.name)
            branches.append(_equality(
                constraint.unique, f"{stem}_key_{count}", f"{stem}_val_{count}", bind_vars,
                lower=constraints.case_insensitive,
            ))

    query += " " + " || ".join(branches)

    if constraints.search:
        search_expression = to_search_filter(constraints.search, bind_vars)
        if search_expression:
            query += f" FILTER ( {search_expression} )"

    query += " RETURN d._key"

    result = AqlQuery(query=query, bind_vars=bind_vars)
    log_query("unique_constraint_query", result, options)
    return result


__all__ = [
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
]


if __name__ == "__main__":
    import sys

    from aqlkit.core.types import UniqueValue

    all_validation_failures = []
    total_tests = 0

    # Test 1: composite equality lookup
    total_tests += 1
    query = fetch_by_property_value(
        "users", [NamedValue(name="a", value=1), NamedValue(name="b", value=2)], MatchType.ALL
    )
    expected = "FOR d IN @@collection FILTER d.@a_key_1 == @a_val_1 && d.@b_key_2 == @b_val_2 RETURN d"
    if query.query != expected:
        all_validation_failures.append(f"fetch_by_property_value: got {query.query!r}")
    if query.bind_vars.get("@collection") != "users" or query.bind_vars.get("b_val_2") != 2:
        all_validation_failures.append(f"fetch_by_property_value bind_vars: got {query.bind_vars}")

    # Test 2: list of filters
    total_tests += 1
    query = find_by_filter_criteria(
        "users", ListOfFilters(filters=['d.name == "Lance"', 'd.name == "Chris"'], match=MatchType.ANY)
    )
    if query.query != 'FOR d IN @@collection FILTER ( d.name == "Lance" || d.name == "Chris" ) RETURN d':
        all_validation_failures.append(f"find_by_filter_criteria: got {query.query!r}")

    # Test 3: unique constraint branches share one counter
    total_tests += 1
    query = unique_constraint_query(UniqueConstraint(
        collection="users",
        constraints=[
            UniqueValue(unique=NamedValue(name="username", value="lance")),
            CompositeKey(composite=[NamedValue(name="username", value="chris")]),
        ],
    ))
    if "username_key_1" not in query.bind_vars or "username_key_2" not in query.bind_vars:
        all_validation_failures.append(f"unique_constraint_query bind_vars: got {query.bind_vars}")

    # Test 4: empty input is rejected
    total_tests += 1
    try:
        unique_constraint_query(UniqueConstraint(collection="users"))
        all_validation_failures.append("unique_constraint_query: empty constraints accepted")
    except InvalidInputError:
        pass

    # Test 5: array values are bound
    total_tests += 1
    query = add_array_value("users", "1", "tags.main", "x")
    if query.bind_vars.get("property") != ["tags", "main"] or "PUSH(d.@property, @value, @unique)" not in query.query:
        all_validation_failures.append(f"add_array_value: got {query.query!r}")

    if all_validation_failures:
        print(f"❌ VALIDATION FAILED - {len(all_validation_failures)} of {total_tests} tests failed:")
        for failure in all_validation_failures:
            print(f"  - {failure}")
        sys.exit(1)
    else:
        print(f"✅ VALIDATION PASSED - All {total_tests} tests produced expected results")
        sys.exit(0)
