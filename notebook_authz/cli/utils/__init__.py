"""CLI utilities for building the service and formatting output."""

from notebook_authz.cli.utils.formatters import (
    error,
    format_principals,
    info,
    section,
    success,
    warning,
)
from notebook_authz.cli.utils.service import get_service

__all__ = [
    "error",
    "format_principals",
    "get_service",
    "info",
    "section",
    "success",
    "warning",
]
