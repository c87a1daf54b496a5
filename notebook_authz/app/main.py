"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from notebook_authz import __version__
from notebook_authz.app.exception_handlers import configure_exception_handlers
from notebook_authz.app.lifespan import lifespan
from notebook_authz.app.router import API_PREFIX, setup_routers

if TYPE_CHECKING:
    from notebook_authz.features.authorization.service import NotebookAuthorizationService


def create_app(
    service: NotebookAuthorizationService | None = None,
    api_prefix: str = API_PREFIX,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        service: Pre-built authorization service. When omitted the lifespan
            builds one from settings and loads its snapshot.
        api_prefix: Prefix of the versioned API.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Notebook Authorization",
        summary="Per-note owners, readers and writers",
        version=__version__,
        lifespan=lifespan,
    )

    if service is not None:
        app.state.authorization_service = service

    # Exception handlers before routers
    configure_exception_handlers(app)
    setup_routers(app, api_prefix=api_prefix)

    return app
