"""Command implementations for the aqlkit CLI.

This package contains the command groups mounted by `aqlkit.cli.app`.
"""

from aqlkit.cli.commands.query import app as query_app
from aqlkit.cli.commands.structure import app as structure_app

__all__ = ["query_app", "structure_app"]
