"""Command-line interface for aqlkit.

This module provides a user interface built with Typer for composing
filters, running lookups and provisioning database structure.
"""
