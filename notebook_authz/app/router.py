"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from notebook_authz.features.authorization.router import router as permissions_router

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def setup_routers(app: FastAPI, api_prefix: str = API_PREFIX) -> None:
    """Register all feature routers with the application.

    Args:
        app: FastAPI application instance.
        api_prefix: Prefix of the versioned API.
    """
    app.include_router(permissions_router, prefix=api_prefix)
    logger.debug("Note permission endpoints registered at %s/notebooks", api_prefix)
