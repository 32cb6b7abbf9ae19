"""
Utility functions for query construction and result handling.

- Connection utilities for opening clients and database handles
- Trimming utilities for dropping private or unwanted document attributes
- Logging utilities for formatting and truncating log output
"""

from aqlkit.core.utils.connection import (
    connect_arango,
    open_database,
)

from aqlkit.core.utils.trim import (
    strip_underscore_props,
    strip_props,
    keep_props,
    trim_document,
    trim_documents,
)

from aqlkit.core.utils.log_utils import (
    truncate_large_value,
    log_query,
    log_filters,
)

__all__ = [
    # Connection utilities
    "connect_arango",
    "open_database",

    # Trimming utilities
    "strip_underscore_props",
    "strip_props",
    "keep_props",
    "trim_document",
    "trim_documents",

    # Logging utilities
    "truncate_large_value",
    "log_query",
    "log_filters",
]
