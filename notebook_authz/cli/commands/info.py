"""Configuration overview command."""

import click

from notebook_authz.cli.utils import get_service, section, success, warning
from notebook_authz.core.settings import get_storage_settings


@click.command(name="info")
@click.pass_context
def info_cmd(ctx: click.Context) -> None:
    """Show the snapshot backend and the authorization policy."""
    service = get_service(ctx)
    persistence = service.persistence

    section("Notebook Authorization")
    click.echo(f"Backend: {persistence.backend_name}")
    click.echo(f"Location: {persistence.location}")
    click.echo(f"Encoding: {service.settings.encoding}")
    click.echo(f"Notes with permissions: {len(service.list_note_ids())}")

    if persistence.backend_name == "s3":
        storage_settings = get_storage_settings()
        click.echo(f"Endpoint: {storage_settings.endpoint or 'AWS S3 (default)'}")
        click.echo(f"Region: {storage_settings.region}")
        click.echo(f"Server-side encryption: {storage_settings.server_side_encryption}")

    click.echo(f"\nPublic by default: {service.is_public}")
    click.echo(f"Anonymous allowed: {service.anonymous_allowed}")

    if service.anonymous_allowed:
        warning("Anonymous access is allowed: note permissions are not enforced")
    else:
        success("Note permissions are enforced")
