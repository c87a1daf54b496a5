"""Authorization service construction for CLI commands."""

from __future__ import annotations

import sys

import click

from notebook_authz.cli.utils.formatters import error
from notebook_authz.core.settings import AuthorizationSettings, get_authorization_settings
from notebook_authz.features.authorization.service import NotebookAuthorizationService
from notebook_authz.infra.persistence.exceptions import PersistenceError


def get_service(ctx: click.Context) -> NotebookAuthorizationService:
    """Return the service stored on the context, building it on first use.

    The group's ``--storage-path`` option overrides the configured location.
    Exits with status 1 if the location cannot be resolved or an existing
    snapshot cannot be read.
    """
    obj = ctx.ensure_object(dict)
    service = obj.get("service")
    if service is not None:
        return service

    storage_path = obj.get("storage_path")
    settings = (
        AuthorizationSettings(storage_path=storage_path)
        if storage_path
        else get_authorization_settings()
    )

    try:
        service = NotebookAuthorizationService.from_settings(settings)
    except PersistenceError as e:
        error(f"Cannot open authorization snapshot: {e.detail}")
        sys.exit(1)

    # An unreadable snapshot must not be overwritten with an empty store
    if service.last_load_error is not None:
        error(f"Cannot open authorization snapshot: {service.last_load_error.detail}")
        sys.exit(1)

    obj["service"] = service
    return service
