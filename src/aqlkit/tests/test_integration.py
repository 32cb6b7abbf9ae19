"""
End-to-end tests against a live ArangoDB.

Skipped unless AQLKIT_INTEGRATION=1. Connection settings come from the
ARANGO_* environment variables; a throwaway database is created and dropped.

Links:
- pytest: https://docs.pytest.org/
- ArangoDB: https://docs.arangodb.com/
"""

import os
import uuid

import pytest

from aqlkit.config import CONFIG
from aqlkit.core.db import ArangoConnection
from aqlkit.core.types import (
    CompositeKey,
    DbClearanceStrategy,
    DbStructure,
    DocumentUpdate,
    EdgeRelation,
    FetchOptions,
    Identifier,
    ListOfFilters,
    MatchType,
    NamedValue,
    UniqueConstraint,
    UniqueValue,
)

pytestmark = pytest.mark.skipif(
    os.environ.get("AQLKIT_INTEGRATION") != "1",
    reason="set AQLKIT_INTEGRATION=1 to run against a live ArangoDB",
)

CYCLISTS = [
    {"name": "Lance", "surname": "Armstrong", "country": "USA", "age": 51},
    {"name": "Chris", "surname": "Froome", "country": "GBR", "age": 38},
    {"name": "Eddy", "surname": "Merckx", "country": "BEL", "age": 78},
    {"name": "Miguel", "surname": "Indurain", "country": "ESP", "age": 59},
]


@pytest.fixture(scope="module")
def conn():
    return ArangoConnection(
        hosts=CONFIG["arango"]["host"],
        username=CONFIG["arango"]["user"],
        password=CONFIG["arango"]["password"],
    )


@pytest.fixture
def db(conn):
    """A fresh database seeded with a cyclists collection."""
    name = f"aqlkit_test_{uuid.uuid4().hex[:8]}"
    facade = conn.db(name)

    result = facade.create_db_structure(DbStructure(collections=["cyclists"]))
    assert result.error is None

    facade.create("cyclists", CYCLISTS)

    yield facade

    conn.system.delete_database(name, ignore_missing=True)


def test_find_by_list_of_filters(db):
    result = db.find_by_filter_criteria(
        "cyclists",
        ListOfFilters(filters=['d.name == "Lance"', 'd.name == "Chris"'], match=MatchType.ANY),
    )

    assert sorted(d["name"] for d in result.data) == ["Chris", "Lance"]


def test_find_by_composed_filter(db):
    result = db.find_by_filter_criteria(
        "cyclists", 'age > 50 && country != "USA"', FetchOptions(sort_by="age", sort_order="asc")
    )

    assert [d["name"] for d in result.data] == ["Miguel", "Eddy"]


def test_fetch_by_property_value(db):
    lance = db.fetch_one_by_property_value("cyclists", NamedValue(name="surname", value="Armstrong"))
    assert lance["name"] == "Lance"

    both = db.fetch_all_by_property_value(
        "cyclists",
        [NamedValue(name="country", value="BEL"), NamedValue(name="country", value="ESP")],
        MatchType.ANY,
    )
    assert both.size == 2


def test_paging_reports_total(db):
    result = db.fetch_all("cyclists", FetchOptions(sort_by="age", limit=2, offset=1))

    assert [d["name"] for d in result.data] == ["Lance", "Miguel"]
    assert result.total == 4


def test_unique_constraint_validation(db):
    lance = db.fetch_one_by_property_value("cyclists", NamedValue(name="name", value="Lance"))

    taken = db.unique_constraint_validation(UniqueConstraint(
        collection="cyclists",
        constraints=[CompositeKey(composite=[
            NamedValue(name="name", value="Lance"),
            NamedValue(name="surname", value="Armstrong"),
        ])],
    ))
    assert taken.violates_unique_constraint is True
    assert taken.documents == [lance["_key"]]

    excluded = db.unique_constraint_validation(UniqueConstraint(
        collection="cyclists",
        constraints=[UniqueValue(unique=NamedValue(name="surname", value="Armstrong"))],
        exclude_document_key=lance["_key"],
    ))
    assert excluded.violates_unique_constraint is False

    folded = db.unique_constraint_validation(UniqueConstraint(
        collection="cyclists",
        constraints=[UniqueValue(unique=NamedValue(name="surname", value="MERCKX"))],
        case_insensitive=True,
    ))
    assert folded.violates_unique_constraint is True


def test_update_and_delete_by_property(db):
    db.update("cyclists", DocumentUpdate(key=Identifier(property="country", value="USA"), data={"banned": True}))
    assert db.fetch_property("cyclists", Identifier(property="country", value="USA"), "banned") is True

    db.update_property("cyclists", Identifier(property="country", value="USA"), "team.name", "US Postal")
    assert db.fetch_property("cyclists", Identifier(property="country", value="USA"), "team.name") == "US Postal"

    removed = db.delete("cyclists", Identifier(property="country", value="USA"))
    assert len(removed) == 1
    assert db.fetch_one_by_property_value("cyclists", NamedValue(name="country", value="USA")) is None


def test_clear_db(db):
    db.clear_db(DbClearanceStrategy.DELETE_DATA)
    assert db.fetch_all("cyclists").data == []


def test_array_attributes(db):
    key = db.fetch_one_by_property_value("cyclists", NamedValue(name="name", value="Eddy"))["_key"]

    db.add_array_value("cyclists", key, "wins", "Tour")
    db.add_array_value("cyclists", key, "wins", "Tour")
    db.add_array_value("cyclists", key, "results.wins", ["Giro", "Vuelta"])
    db.add_array_object("cyclists", key, "teams", {"id": "faema", "years": 2}, "id")
    db.update_array_object("cyclists", key, "teams", "id", "faema", {"years": 3})
    db.remove_array_value("cyclists", key, "results.wins", "Giro")

    eddy = db.read("cyclists", key)
    assert eddy["wins"] == ["Tour"]
    assert eddy["results"]["wins"] == ["Vuelta"]
    assert eddy["teams"] == [{"id": "faema", "years": 3}]

    db.remove_array_object("cyclists", key, "teams", "id", "faema")
    db.replace_array("cyclists", key, "wins", ["Worlds"])

    eddy = db.read("cyclists", key)
    assert eddy["teams"] == []
    assert eddy["wins"] == ["Worlds"]


def test_create_edge_relation(db):
    db.driver.create_collection("rivals", edge=True)
    lance = db.fetch_one_by_property_value("cyclists", NamedValue(name="name", value="Lance"))
    chris = db.fetch_one_by_property_value("cyclists", NamedValue(name="name", value="Chris"))

    created = db.create_edge_relation("rivals", [
        EdgeRelation(from_=lance["_id"], to=chris["_id"], data={"since": 2012}),
        EdgeRelation(from_=chris["_id"]),
    ])

    assert len(created) == 1
    edge = db.read("rivals", created[0]["_key"])
    assert (edge["_from"], edge["_to"], edge["since"]) == (lance["_id"], chris["_id"], 2012)
