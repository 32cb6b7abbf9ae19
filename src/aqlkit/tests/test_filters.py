"""
Tests for the filter-expression compiler.

Covers operator location, clause prefixing, filter composition and the
search/criteria expressions spliced into FILTER statements.

Links:
- pytest: https://docs.pytest.org/
"""

import pytest

from aqlkit.core.filters import (
    attribute_path,
    bind_name,
    compose,
    locate,
    prefix_clause,
    to_criteria_expression,
    to_filter_expression,
    to_search_filter,
)
from aqlkit.core.types import (
    AqlQuery,
    Criteria,
    IndexedValue,
    InvalidInputError,
    ListOfFilters,
    MatchType,
    SearchTerms,
)


# === locate ===

def test_locate_orders_operators_by_index():
    """Operators from different markers come back left to right."""
    assert locate(["||", "&&"], "a || b && c") == [
        IndexedValue(index=2, value="||"),
        IndexedValue(index=7, value="&&"),
    ]


def test_locate_merges_and_sorts_all_markers():
    found = locate(["||", "&&"], "a && b || c && d")
    assert [iv.index for iv in found] == [2, 7, 12]
    assert [iv.value for iv in found] == ["&&", "||", "&&"]


@pytest.mark.parametrize("markers", ["||", ["||", "&&"], "like", ""])
def test_locate_empty_text(markers):
    assert locate(markers, "") == []


def test_locate_case_insensitive_reports_folded_marker():
    assert locate("LIKE", 'LIKE(name, "%like%")') == [
        IndexedValue(index=0, value="like"),
        IndexedValue(index=13, value="like"),
    ]


def test_locate_case_sensitive():
    assert locate("LIKE", 'LIKE(name, "%like%")', case_insensitive=False) == [
        IndexedValue(index=0, value="LIKE"),
    ]


def test_locate_ties_keep_marker_order():
    found = locate(["=", "=="], "a == b")
    assert [(iv.index, iv.value) for iv in found] == [(2, "="), (2, "=="), (3, "=")]


def test_locate_no_match():
    assert locate(["||", "&&"], "age > 5") == []


def test_locate_indexes_refer_to_original_text():
    """Lowering "İ" yields two characters; positions must not drift past it."""
    text = 'city == "İstanbul" && age > 5'
    found = locate(["&&", "LIKE"], text)

    assert found == [IndexedValue(index=text.index("&&"), value="&&")]
    assert locate("STANBUL", text) == [IndexedValue(index=text.index("stanbul"), value="stanbul")]


# === prefix_clause ===

def test_prefix_plain_comparison():
    assert prefix_clause("age > 5") == "d.age > 5"


def test_prefix_function_call_first_argument():
    assert prefix_clause('LIKE(name, "x", true)') == 'LIKE(d.name, "x", true)'


def test_prefix_function_call_tidies_whitespace():
    assert prefix_clause('LIKE( name, "x", true )') == 'LIKE(d.name, "x", true)'


def test_prefix_only_first_argument():
    """Later bare arguments are left untouched."""
    assert prefix_clause("POSITION(tags, name)") == "POSITION(d.tags, name)"


def test_prefix_closing_half_of_group():
    assert prefix_clause("age == 42 )") == "d.age == 42)"


def test_prefix_strips_surrounding_whitespace():
    assert prefix_clause("   age > 5  ") == "d.age > 5"


# === compose ===

@pytest.mark.parametrize("clause", ["age > 5", 'LIKE(name, "x", true)', 'name IN ["a", "b"]'])
def test_compose_single_clause_matches_prefix_clause(clause):
    assert compose(clause) == prefix_clause(clause)


@pytest.mark.parametrize("filter_string, expected", [
    (
        '(name == "Thomas" && age == 42) || name == "Lance"',
        '(d.name == "Thomas" && d.age == 42) || d.name == "Lance"',
    ),
    (
        'name IN ["Thomas","Lance"] && (age > 42 || speciality != "timetrial")',
        'd.name IN ["Thomas","Lance"] && (d.age > 42 || d.speciality != "timetrial")',
    ),
    (
        'LIKE(name, "%thomas%", true) || age IN arr',
        'LIKE(d.name, "%thomas%", true) || d.age IN arr',
    ),
    (
        "a == 1 && b == 2 || c == 3",
        "d.a == 1 && d.b == 2 || d.c == 3",
    ),
])
def test_compose_prefixes_every_clause(filter_string, expected):
    assert compose(filter_string) == expected


def test_compose_clause_count_is_operator_count_plus_one():
    composed = compose("a == 1 && b == 2 || c == 3 && d == 4")
    assert composed.count("d.") == 4
    assert [iv.value for iv in locate(["||", "&&"], composed)] == ["&&", "||", "&&"]


def test_compose_normalises_spacing_around_operators():
    assert compose("a == 1&&b == 2") == "d.a == 1 && d.b == 2"


def test_compose_keeps_operators_after_non_ascii_literals():
    assert compose('name == "İstanbul" && age > 5') == 'd.name == "İstanbul" && d.age > 5'
    assert compose('city == "Ærøskøbing" || city == "İzmir"') == 'd.city == "Ærøskøbing" || d.city == "İzmir"'


def test_compose_operator_inside_string_literal_is_still_split():
    """Flat substring search does not know about quoted literals."""
    assert compose('name == "a && b"') == 'd.name == "a && d.b"'


# === bind names and attribute paths ===

def test_bind_name_sanitises():
    assert bind_name("address.city") == "address_city"
    assert bind_name("_key") == "key"
    assert bind_name("first-name") == "first_name"
    assert bind_name("__") == "p"


def test_attribute_path():
    assert attribute_path("name") == "name"
    assert attribute_path("address.city") == ["address", "city"]


# === search and criteria expressions ===

def test_search_filter_every_property_term_pair():
    bind_vars = {}
    expression = to_search_filter(SearchTerms(properties="name, surname", terms="lan"), bind_vars)

    assert expression == (
        "LIKE(d.@search_prop_1, @search_term_1, true) || LIKE(d.@search_prop_2, @search_term_2, true)"
    )
    assert bind_vars == {
        "search_prop_1": "name",
        "search_term_1": "%lan%",
        "search_prop_2": "surname",
        "search_term_2": "%lan%",
    }


def test_search_filter_match_all():
    bind_vars = {}
    expression = to_search_filter(
        SearchTerms(properties=["name"], terms=["la", "ce"], match=MatchType.ALL), bind_vars
    )
    assert expression == "LIKE(d.@search_prop_1, @search_term_1, true) && LIKE(d.@search_prop_2, @search_term_2, true)"


def test_search_filter_null_terms():
    bind_vars = {}
    expression = to_search_filter(SearchTerms(properties="team", terms=["null", "!null"]), bind_vars)

    assert expression == "d.@search_prop_1 == null || d.@search_prop_2 != null"
    assert bind_vars == {"search_prop_1": "team", "search_prop_2": "team"}


def test_filter_expression_raw_string():
    assert to_filter_expression('name == "Lance"', {}) == 'd.name == "Lance"'
    assert to_filter_expression(' d.name == "Lance" ', {}, prefix_property_names=False) == 'd.name == "Lance"'


def test_filter_expression_list_of_filters_verbatim_by_default():
    filters = ListOfFilters(filters=['d.name == "Lance"', 'd.name == "Chris"'])
    assert to_filter_expression(filters, {}) == 'd.name == "Lance" || d.name == "Chris"'


def test_filter_expression_list_of_filters_auto_prefix():
    filters = ListOfFilters(filters=['name == "Lance"', "age > 40"], match=MatchType.ALL, auto_prefix_prop_names=True)
    assert to_filter_expression(filters, {}) == 'd.name == "Lance" && d.age > 40'


def test_filter_expression_empty_list_of_filters():
    with pytest.raises(InvalidInputError):
        to_filter_expression(ListOfFilters(filters=[]), {})


def test_filter_expression_aql_query_merges_bind_vars():
    bind_vars = {"@collection": "cyclists"}
    expression = to_filter_expression(AqlQuery(query="d.age > @min", bind_vars={"min": 30}), bind_vars)

    assert expression == "d.age > @min"
    assert bind_vars == {"@collection": "cyclists", "min": 30}


def test_filter_expression_aql_query_bind_var_clash():
    """A prebuilt filter may not overwrite a parameter the query already binds."""
    bind_vars = {"@collection": "cyclists", "prop": "surname"}

    with pytest.raises(InvalidInputError, match="prop"):
        to_filter_expression(AqlQuery(query="d.@prop > 1", bind_vars={"prop": "age"}), bind_vars)

    assert bind_vars == {"@collection": "cyclists", "prop": "surname"}


def test_filter_expression_rejects_other_types():
    with pytest.raises(InvalidInputError):
        to_filter_expression(42, {})


def test_criteria_filter_and_search():
    bind_vars = {}
    criteria = Criteria(
        filter='name == "Lance"',
        search=SearchTerms(properties="team", terms="postal"),
        match=MatchType.ALL,
    )

    assert to_criteria_expression(criteria, bind_vars) == (
        '( ( d.name == "Lance" ) && ( LIKE(d.@search_prop_1, @search_term_1, true) ) )'
    )


def test_criteria_search_only():
    criteria = Criteria(search=SearchTerms(properties="team", terms="postal"))
    assert to_criteria_expression(criteria, {}) == "( LIKE(d.@search_prop_1, @search_term_1, true) )"


def test_criteria_empty():
    assert to_criteria_expression(Criteria(), {}) is None
