"""
Logging utilities for query construction.

This module provides helpers that keep log records readable when bind
variables carry large strings or long lists.
"""

from typing import Any

from loguru import logger

from aqlkit.core.types import AqlQuery, FetchOptions


def truncate_large_value(
    value: Any,
    max_str_len: int = 100,
    max_list_elements_shown: int = 10,
) -> Any:
    """
    Truncate large strings or lists to make them log-friendly.

    Args:
        value: The value to potentially truncate
        max_str_len: Maximum string length before the middle is elided
        max_list_elements_shown: Lists longer than this are summarised

    Returns:
        Truncated or original value
    """
    if isinstance(value, str):
        if len(value) > max_str_len:
            half_len = max(max_str_len // 2, 1)
            return f"{value[:half_len]}...{value[-half_len:]}"
        return value

    if isinstance(value, list):
        if len(value) > max_list_elements_shown:
            element_type = type(value[0]).__name__
            return f"[<{len(value)} {element_type} elements>]"
        return [truncate_large_value(item, max_str_len, max_list_elements_shown) for item in value]

    if isinstance(value, dict):
        return {
            k: truncate_large_value(v, max_str_len, max_list_elements_shown)
            for k, v in value.items()
        }

    return value


def log_query(name: str, query: AqlQuery, options: FetchOptions = None) -> None:
    """Log a built query at DEBUG, or INFO when printing was requested."""
    level = "INFO" if options is not None and (options.print_query or options.debug_filters) else "DEBUG"
    logger.log(level, "{}: {} | bind_vars={}", name, query.query, truncate_large_value(query.bind_vars))


def log_filters(name: str, filters: Any, options: FetchOptions = None) -> None:
    """Log the structured filter input of a builder."""
    level = "INFO" if options is not None and options.debug_filters else "DEBUG"
    if hasattr(filters, "model_dump"):
        filters = filters.model_dump()
    elif isinstance(filters, list):
        filters = [f.model_dump() if hasattr(f, "model_dump") else f for f in filters]
    logger.log(level, "{} filters: {}", name, truncate_large_value(filters))
