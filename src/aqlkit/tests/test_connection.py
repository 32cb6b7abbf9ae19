"""Tests for client connection helpers, the facade registry and configuration."""

from unittest.mock import MagicMock, patch

import pytest

from aqlkit import config as aqlkit_config
from aqlkit.core.db import ArangoConnection, ArangoDB
from aqlkit.core.types import LogOptions
from aqlkit.core.utils.connection import connect_arango, open_database


# === Client helpers ===

def test_connect_arango_uses_given_host():
    with patch("aqlkit.core.utils.connection.ArangoClient") as client_cls:
        client = connect_arango("http://db:8529")

    client_cls.assert_called_once_with(hosts="http://db:8529")
    assert client is client_cls.return_value


def test_connect_arango_failure():
    with patch("aqlkit.core.utils.connection.ArangoClient", side_effect=ValueError("bad url")):
        with pytest.raises(ConnectionError, match="bad url"):
            connect_arango("nope")


def test_open_database_defaults_to_config(monkeypatch):
    monkeypatch.setitem(aqlkit_config.CONFIG["arango"], "db_name", "cycling")
    monkeypatch.setitem(aqlkit_config.CONFIG["arango"], "user", "rider")
    monkeypatch.setitem(aqlkit_config.CONFIG["arango"], "password", "secret")
    client = MagicMock()

    open_database(client)

    client.db.assert_called_once_with("cycling", username="rider", password="secret")


# === Registry ===

def test_registry_populates_named_databases():
    client = MagicMock()

    conn = ArangoConnection(username="root", password="", databases=["cycling", "running"], client=client)

    assert conn.list_connections() == ["cycling", "running"]
    client.db.assert_any_call("_system", username="root", password="")
    client.db.assert_any_call("cycling", username="root", password="")
    assert isinstance(conn.db("cycling"), ArangoDB)


def test_registry_adds_databases_lazily():
    client = MagicMock()
    conn = ArangoConnection(username="root", password="", client=client)
    assert conn.list_connections() == []

    first = conn.db("cycling")
    calls = client.db.call_count
    second = conn.db("cycling")

    assert first is second
    assert client.db.call_count == calls
    assert conn.list_connections() == ["cycling"]


def test_registry_single_database_name():
    conn = ArangoConnection(username="root", password="", databases="cycling", client=MagicMock())
    assert conn.list_connections() == ["cycling"]


def test_registry_shares_system_and_options():
    client = MagicMock()
    options = LogOptions(print_queries=True)

    conn = ArangoConnection(username="root", password="", client=client, options=options)
    facade = conn.db("cycling")

    assert facade.system is conn.system
    assert facade.options is options
    assert conn.driver("cycling") is facade.driver


def test_registry_collection():
    client = MagicMock()
    conn = ArangoConnection(username="root", password="", client=client)

    conn.collection("cycling", "cyclists")

    conn.driver("cycling").collection.assert_called_with("cyclists")


def test_registry_connects_with_hosts():
    with patch("aqlkit.core.utils.connection.ArangoClient") as client_cls:
        conn = ArangoConnection(hosts="http://db:8529", username="root", password="")

    client_cls.assert_called_once_with(hosts="http://db:8529")
    assert conn.client is client_cls.return_value


# === Configuration ===

@pytest.mark.parametrize("raw, expected", [("1", True), ("true", True), ("Yes", True), ("0", False), ("", False)])
def test_env_flag(monkeypatch, raw, expected):
    monkeypatch.setenv("AQLKIT_TEST_FLAG", raw)
    assert aqlkit_config._env_flag("AQLKIT_TEST_FLAG") is expected


def test_validate_config(monkeypatch):
    monkeypatch.setitem(aqlkit_config.CONFIG["arango"], "password", "")
    assert aqlkit_config.validate_config() is True

    monkeypatch.setitem(aqlkit_config.CONFIG["arango"], "host", "")
    assert aqlkit_config.validate_config() is False
