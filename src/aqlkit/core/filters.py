"""
Filter-expression compiler for AQL queries.

This module turns caller-supplied boolean filter strings and search terms
into AQL filter expressions that address the iteration variable `d`:
- `locate` finds operator markers in a string
- `prefix_clause` qualifies the property name of a single clause
- `compose` splits a filter on `&&`/`||`, prefixes every clause and re-joins
- `to_search_filter`, `to_filter_expression` and `to_criteria_expression`
  build the grouped expressions spliced into a query's FILTER

Splitting is a flat substring search. An `&&` or `||` inside a quoted string
literal is still treated as an operator boundary, and only the first argument
of a function call is prefixed.

Links:
- AQL operators: https://docs.arangodb.com/stable/aql/operators/
- AQL LIKE(): https://docs.arangodb.com/stable/aql/functions/string/#like

Sample input:
    compose('(name == "Thomas" && age == 42) || name == "Lance"')

Expected output:
    '(d.name == "Thomas" && d.age == 42) || d.name == "Lance"'
"""

import re
from typing import Any, Dict, List, Optional, Sequence, Union

from loguru import logger

from aqlkit.core.types import (
    AqlQuery,
    Criteria,
    IndexedValue,
    InvalidInputError,
    ListOfFilters,
    SearchTerms,
)

LOGICAL_OPERATORS = ["||", "&&"]

_OPEN_PAREN = re.compile(r"\(\s*")
_SPACE_BEFORE_CLOSE_PAREN = re.compile(r"\s+\)")
_INVALID_BIND_CHARS = re.compile(r"[^A-Za-z0-9_]")


def locate(
    markers: Union[str, Sequence[str]],
    text: str,
    case_insensitive: bool = True,
) -> List[IndexedValue]:
    """
    Find every occurrence of one or more marker substrings in `text`.

    Args:
        markers: A single marker or a sequence of markers.
        text: The string to scan.
        case_insensitive: Compare case-folded text and markers. The reported
            value is then the case-folded marker. Indexes always refer to
            positions in `text` itself.

    Returns:
        list: IndexedValue entries ordered by ascending index. Entries at the
        same index keep the order of `markers`.
    """
    if not text:
        return []

    if not isinstance(markers, str):
        found: List[IndexedValue] = []
        for marker in markers:
            found.extend(locate(marker, text, case_insensitive))
        return sorted(found, key=lambda iv: iv.index)

    if not markers:
        return []

    needle = markers.lower() if case_insensitive else markers
    width = len(markers)

    found = []
    if not case_insensitive:
        index = text.find(needle)
        while index != -1:
            found.append(IndexedValue(index=index, value=needle))
            index = text.find(needle, index + 1)
        return found

    # lower() may change a string's length; indexes must refer to `text`
    for index in range(len(text) - width + 1):
        if text[index:index + width].lower() == needle:
            found.append(IndexedValue(index=index, value=needle))

    return found


def prefix_clause(clause: str) -> str:
    """
    Qualify the property name of one filter clause with `d.`.

    The clause must not contain a top-level `&&` or `||`. In function-call form
    only the first argument is prefixed, e.g. `LIKE(name, "x", true)` becomes
    `LIKE(d.name, "x", true)`.
    """
    clause = clause.strip()

    if "(" in clause:
        prefixed = _OPEN_PAREN.sub("(d.", clause, count=1)
        return _SPACE_BEFORE_CLOSE_PAREN.sub(")", prefixed)

    # closing half of a group split at an operator, e.g. `age == 42)`
    if ")" in clause:
        return _SPACE_BEFORE_CLOSE_PAREN.sub(")", "d." + clause)

    return "d." + clause


def compose(filter_string: str) -> str:
    """
    Prefix every clause of a `&&`/`||` filter expression.

    Operators are kept verbatim and joined back with single spaces, so an
    expression with N operators yields N + 1 prefixed clauses.
    """
    located = locate(LOGICAL_OPERATORS, filter_string, case_insensitive=False)

    if not located:
        return prefix_clause(filter_string)

    parts: List[str] = []
    cut = 0

    for operator in located:
        if operator.index < cut:
            # overlaps the previous operator, e.g. the middle of `|||`
            continue
        end = operator.index + len(operator.value)
        parts.append(prefix_clause(filter_string[cut:operator.index]))
        parts.append(filter_string[operator.index:end])
        cut = end

    parts.append(prefix_clause(filter_string[cut:]))

    return " ".join(parts)


def bind_name(name: str) -> str:
    """Turn a property path into a valid bind-parameter name stem."""
    stem = _INVALID_BIND_CHARS.sub("_", name).lstrip("_")
    return stem or "p"


def attribute_path(name: str) -> Union[str, List[str]]:
    """Bind value addressing a (possibly nested) attribute via `d.@param`."""
    if "." in name:
        return [part for part in name.split(".") if part]
    return name


def to_search_filter(search: SearchTerms, bind_vars: Dict[str, Any]) -> str:
    """
    Build a LIKE-based filter for each (property, term) pair of a search.

    The terms `null` and `!null` test for a missing / present attribute
    instead of a substring.
    """
    clauses: List[str] = []
    count = 0

    for prop in search.property_list():
        for term in search.term_list():
            count += 1
            prop_param = f"search_prop_{count}"
            bind_vars[prop_param] = attribute_path(prop)

            if term in ("null", "NULL"):
                clauses.append(f"d.@{prop_param} == null")
            elif term in ("!null", "!NULL"):
                clauses.append(f"d.@{prop_param} != null")
            else:
                term_param = f"search_term_{count}"
                bind_vars[term_param] = f"%{term}%"
                clauses.append(f"LIKE(d.@{prop_param}, @{term_param}, true)")

    return f" {search.match.operator} ".join(clauses)


def to_filter_expression(
    filter: Union[str, ListOfFilters, AqlQuery],
    bind_vars: Dict[str, Any],
    prefix_property_names: bool = True,
) -> str:
    """
    Turn a raw filter string, a ListOfFilters or a prebuilt AqlQuery into
    one boolean expression.

    Raw strings and ListOfFilters members are caller-authored AQL and are
    spliced verbatim (after optional prefixing). The bind variables of an
    AqlQuery are merged into `bind_vars`; a name already present there raises
    InvalidInputError.
    """
    if isinstance(filter, str):
        return compose(filter) if prefix_property_names else filter.strip()

    if isinstance(filter, AqlQuery):
        clashes = sorted(set(filter.bind_vars) & set(bind_vars))
        if clashes:
            raise InvalidInputError(f"Filter bind variables clash with the query's own: {clashes}")
        bind_vars.update(filter.bind_vars)
        return filter.query.strip()

    if isinstance(filter, ListOfFilters):
        if not filter.filters:
            raise InvalidInputError("No filters specified")

        clauses = [
            prefix_clause(f) if filter.auto_prefix_prop_names else f.strip()
            for f in filter.filters
        ]
        return f" {filter.match.operator} ".join(clauses)

    raise InvalidInputError(f"Invalid input received for filter conversion: {type(filter).__name__}")


def to_criteria_expression(
    criteria: Criteria,
    bind_vars: Dict[str, Any],
    prefix_property_names: bool = True,
) -> Optional[str]:
    """
    Build the parenthesised FILTER group for a Criteria.

    Returns None when the criteria carry neither a filter nor a search.
    """
    filter_expression = None
    search_expression = None

    if criteria.filter:
        filter_expression = to_filter_expression(criteria.filter, bind_vars, prefix_property_names)

    if criteria.search:
        search_expression = to_search_filter(criteria.search, bind_vars) or None

    if filter_expression and search_expression:
        return f"( ( {filter_expression} ) {criteria.match.operator} ( {search_expression} ) )"

    expression = filter_expression or search_expression
    if not expression:
        logger.debug("Criteria produced no filter expression")
        return None

    return f"( {expression} )"


__all__ = [
    "LOGICAL_OPERATORS",
    "locate",
    "prefix_clause",
    "compose",
    "bind_name",
    "attribute_path",
    "to_search_filter",
    "to_filter_expression",
    "to_criteria_expression",
]


if __name__ == "__main__":
    import sys

    all_validation_failures = []
    total_tests = 0

    # Test 1: grouped expression
    total_tests += 1
    composed = compose('(name == "Thomas" && age == 42) || name == "Lance"')
    expected = '(d.name == "Thomas" && d.age == 42) || d.name == "Lance"'
    if composed != expected:
        all_validation_failures.append(f"compose: expected {expected!r}, got {composed!r}")

    # Test 2: function call, first argument only
    total_tests += 1
    prefixed = prefix_clause('LIKE( name, "%x%", true )')
    if prefixed != 'LIKE(d.name, "%x%", true)':
        all_validation_failures.append(f"prefix_clause: got {prefixed!r}")

    # Test 3: indexes survive characters whose lower case is longer
    total_tests += 1
    text = 'city == "İzmir" && age > 5'
    found = locate(LOGICAL_OPERATORS, text)
    if [iv.index for iv in found] != [text.index("&&")]:
        all_validation_failures.append(f"locate: got {found}")

    # Test 4: criteria group with a search
    total_tests += 1
    bind_vars = {}
    group = to_criteria_expression(
        Criteria(filter="age > 30", search=SearchTerms(properties="name", terms="lan")), bind_vars
    )
    if group != "( ( d.age > 30 ) || ( LIKE(d.@search_prop_1, @search_term_1, true) ) )":
        all_validation_failures.append(f"to_criteria_expression: got {group!r}")

    if all_validation_failures:
        print(f"❌ VALIDATION FAILED - {len(all_validation_failures)} of {total_tests} tests failed:")
        for failure in all_validation_failures:
            print(f"  - {failure}")
        sys.exit(1)
    else:
        print(f"✅ VALIDATION PASSED - All {total_tests} tests produced expected results")
        sys.exit(0)
