"""Main CLI entry point for notebook authorization management commands."""

import click

from notebook_authz import __version__
from notebook_authz.cli.commands import info, permissions
from notebook_authz.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="notebook-authz")
@click.option(
    "--storage-path",
    default=None,
    help="Snapshot location (path, file:// URI or s3://bucket/key); overrides configuration",
)
@click.pass_context
def cli(ctx: click.Context, storage_path: str | None) -> None:
    """Notebook authorization CLI - inspect and edit note permissions.

    \b
    Command Groups:
      info         Snapshot backend and authorization policy
      permissions  Note owners, readers and writers

    \b
    Quick Start:
      notebook-authz info
      notebook-authz permissions list
      notebook-authz permissions set 2A94M5J1Z --owner alice
      notebook-authz permissions check 2A94M5J1Z --principal bob
    """
    ctx.ensure_object(dict)
    if storage_path:
        ctx.obj["storage_path"] = storage_path


cli.add_command(info.info_cmd)
cli.add_command(permissions.permissions)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
