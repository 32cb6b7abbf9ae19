"""
Document trimming.

Removes private (underscore-prefixed) attributes from result documents, or
keeps / omits an explicit list of attributes, as selected by
DocumentTrimOptions.

Sample input:
    trim_document({"_key": "1", "_rev": "x", "_secret": 1, "name": "Lance"},
                  DocumentTrimOptions(strip_private_props=True))

Expected output:
    {"_key": "1", "_rev": "x", "name": "Lance"}
"""

from typing import Any, Iterable, List, Optional, Union

from aqlkit.core.types import DocumentTrimOptions

DOCUMENT_META_PROPS = ["_key", "_id", "_rev"]


def _as_list(props: Union[str, Iterable[str]]) -> List[str]:
    if isinstance(props, str):
        return [props]
    return list(props)


def strip_underscore_props(document: Any, keep: Iterable[str] = DOCUMENT_META_PROPS) -> Any:
    """Drop `_`-prefixed attributes except those listed in `keep`."""
    if not isinstance(document, dict):
        return document

    keep = set(keep or [])
    return {k: v for k, v in document.items() if not k.startswith("_") or k in keep}


def strip_props(document: Any, props: Union[str, Iterable[str], None]) -> Any:
    if not isinstance(document, dict) or not props:
        return document

    omit = set(_as_list(props))
    return {k: v for k, v in document.items() if k not in omit}


def keep_props(document: Any, props: Union[str, Iterable[str], None]) -> Any:
    if not isinstance(document, dict) or not props:
        return document

    return {k: document[k] for k in _as_list(props) if k in document}


def trim_document(document: Any, options: Optional[DocumentTrimOptions] = None) -> Any:
    """
    Apply trim options to one document.

    `keep` takes precedence; otherwise `omit` is applied first and private
    attributes are stripped afterwards when requested. Non-dict values are
    returned unchanged.
    """
    if options is None or not isinstance(document, dict):
        return document

    if options.keep:
        return keep_props(document, options.keep)

    if options.omit:
        document = strip_props(document, options.omit)

    if options.strip_private_props:
        return strip_underscore_props(document)

    return document


def trim_documents(documents: Optional[List[Any]], options: Optional[DocumentTrimOptions] = None) -> Optional[List[Any]]:
    if not documents:
        return documents

    return [trim_document(document, options) for document in documents]
