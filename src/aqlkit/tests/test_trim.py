"""Tests for document trimming."""

from aqlkit.core.types import DocumentTrimOptions
from aqlkit.core.utils.trim import (
    keep_props,
    strip_props,
    strip_underscore_props,
    trim_document,
    trim_documents,
)

DOC = {"_key": "1", "_id": "cyclists/1", "_rev": "abc", "_internal": True, "name": "Lance", "age": 51}


def test_strip_underscore_props_keeps_meta():
    assert strip_underscore_props(DOC) == {
        "_key": "1", "_id": "cyclists/1", "_rev": "abc", "name": "Lance", "age": 51,
    }


def test_strip_underscore_props_custom_keep():
    assert strip_underscore_props(DOC, keep=["_key"]) == {"_key": "1", "name": "Lance", "age": 51}


def test_strip_and_keep_props():
    assert strip_props(DOC, ["age", "_internal"]) == {"_key": "1", "_id": "cyclists/1", "_rev": "abc", "name": "Lance"}
    assert keep_props(DOC, "name") == {"name": "Lance"}
    assert keep_props(DOC, ["name", "missing"]) == {"name": "Lance"}


def test_trim_keep_wins():
    options = DocumentTrimOptions(keep=["name"], omit=["name"], strip_private_props=True)
    assert trim_document(DOC, options) == {"name": "Lance"}


def test_trim_omit_then_strip():
    options = DocumentTrimOptions(omit="age", strip_private_props=True)
    assert trim_document(DOC, options) == {"_key": "1", "_id": "cyclists/1", "_rev": "abc", "name": "Lance"}


def test_trim_without_options_is_identity():
    assert trim_document(DOC) is DOC
    assert trim_document("123", DocumentTrimOptions(strip_private_props=True)) == "123"


def test_trim_documents():
    options = DocumentTrimOptions(keep="name")
    assert trim_documents([DOC, DOC], options) == [{"name": "Lance"}, {"name": "Lance"}]
    assert trim_documents([], options) == []
    assert trim_documents(None, options) is None
