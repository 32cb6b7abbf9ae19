"""Shared fixtures for the aqlkit test suite."""

import sys
from unittest.mock import MagicMock

import pytest
from loguru import logger


class FakeCursor:
    """Stand-in for a python-arango Cursor over a fixed list of documents."""

    def __init__(self, documents, full_count=None):
        self._documents = list(documents)
        self._full_count = full_count

    def __iter__(self):
        return iter(self._documents)

    def count(self):
        return len(self._documents)

    def statistics(self):
        full_count = self._full_count if self._full_count is not None else len(self._documents)
        return {"full_count": full_count}


@pytest.fixture(autouse=True)
def reset_logger():
    """The CLI callback replaces the loguru sink; restore it after every test."""
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def driver() -> MagicMock:
    """A MagicMock standing in for a python-arango StandardDatabase."""
    db = MagicMock()
    db.name = "cycling"
    db.aql.execute.return_value = FakeCursor([])
    return db


@pytest.fixture
def system() -> MagicMock:
    """A MagicMock standing in for the _system database."""
    db = MagicMock()
    db.name = "_system"
    return db


@pytest.fixture
def info_records():
    """Messages logged at INFO or above while the test runs."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record["message"]), level="INFO")
    yield records
    logger.remove(handler_id)
