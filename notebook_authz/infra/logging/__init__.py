"""Logging infrastructure.

Structured logging with:
- JSONL format for log aggregation
- Automatic context injection (note_id, user, etc.)
- QueueHandler + QueueListener for non-blocking I/O
- OpenTelemetry trace correlation

Basic usage:
    from notebook_authz.infra.logging import set_log_context
    import logging

    logger = logging.getLogger(__name__)

    set_log_context(note_id="2A94M5J1Z")
    logger.info("Permissions updated")  # Automatically includes note_id
"""

from notebook_authz.infra.logging.config import (
    complete,
    configure_logging,
    setup_logging,
    shutdown,
)
from notebook_authz.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from notebook_authz.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "clear_log_context",
    "complete",
    "configure_logging",
    "get_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
