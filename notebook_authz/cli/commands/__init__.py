"""CLI command modules."""

from notebook_authz.cli.commands import info, permissions

__all__ = [
    "info",
    "permissions",
]
