"""Application lifespan management.

Startup Order:
1. Logging
2. Notebook authorization service (built from settings and hydrated from
   its snapshot, unless one was injected into ``create_app``)

Shutdown flushes pending log records.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from starlette.concurrency import run_in_threadpool

from notebook_authz.features.authorization.service import NotebookAuthorizationService
from notebook_authz.infra.logging.config import complete, setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start and stop application services."""
    setup_logging()

    service: NotebookAuthorizationService | None = getattr(
        app.state, "authorization_service", None
    )
    if service is None:
        # Snapshot download is blocking I/O
        service = await run_in_threadpool(NotebookAuthorizationService.from_settings)
        app.state.authorization_service = service

    logger.info(
        "Notebook authorization ready",
        extra={
            "backend": service.persistence.backend_name,
            "location": str(service.persistence.location),
            "notes": len(service.list_note_ids()),
            "anonymous_allowed": service.anonymous_allowed,
            "public_by_default": service.is_public,
        },
    )

    yield

    logger.info("Notebook authorization shutting down")
    complete()
