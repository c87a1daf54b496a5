"""Note permission commands.

Inspect and edit the persisted authorization snapshot:
- List and show note permissions
- Replace owners, readers and writers
- Remove the permissions of deleted notes
- Check decisions for a principal set
"""

import sys

import click

from notebook_authz.cli.utils import (
    error,
    format_principals,
    get_service,
    info,
    section,
    success,
    warning,
)
from notebook_authz.core.acl import NOTE_RELATIONS, NoteRelation
from notebook_authz.features.authorization.service import NotebookAuthorizationService


def _echo_permissions(service: NotebookAuthorizationService, note_id: str) -> None:
    permissions = service.get_permissions(note_id)
    click.echo(f"  owners:  {format_principals(permissions.owners)}")
    click.echo(f"  readers: {format_principals(permissions.readers)}")
    click.echo(f"  writers: {format_principals(permissions.writers)}")


def _exit_on_persist_error(service: NotebookAuthorizationService) -> None:
    if service.last_persist_error is not None:
        error(f"Change applied in memory but not saved: {service.last_persist_error.detail}")
        sys.exit(1)


@click.group(name="permissions")
def permissions() -> None:
    """Note permission management commands.

    An empty relation is open to everyone.
    """


@permissions.command(name="list")
@click.option("--json", "as_json", is_flag=True, help="Print the raw snapshot document")
@click.pass_context
def list_cmd(ctx: click.Context, as_json: bool) -> None:
    """List every note with recorded permissions."""
    service = get_service(ctx)

    if as_json:
        click.echo(service.snapshot().to_json())
        return

    note_ids = service.list_note_ids()
    if not note_ids:
        info("No note permissions recorded")
        return

    for note_id in note_ids:
        click.secho(note_id, bold=True)
        _echo_permissions(service, note_id)

    click.echo(f"\n{len(note_ids)} note(s)")


@permissions.command(name="show")
@click.argument("note_id")
@click.pass_context
def show_cmd(ctx: click.Context, note_id: str) -> None:
    """Show the permissions of NOTE_ID."""
    service = get_service(ctx)

    if note_id not in service.list_note_ids():
        warning(f"No permissions recorded for {note_id}; it is open to everyone")

    click.secho(note_id, bold=True)
    _echo_permissions(service, note_id)


@permissions.command(name="set")
@click.argument("note_id")
@click.option("--owner", "owners", multiple=True, help="Owner principal (repeatable)")
@click.option("--reader", "readers", multiple=True, help="Reader principal (repeatable)")
@click.option("--writer", "writers", multiple=True, help="Writer principal (repeatable)")
@click.option(
    "--clear",
    "cleared",
    multiple=True,
    type=click.Choice([relation.value for relation in NOTE_RELATIONS]),
    help="Empty a relation, opening it to everyone (repeatable)",
)
@click.pass_context
def set_cmd(
    ctx: click.Context,
    note_id: str,
    owners: tuple[str, ...],
    readers: tuple[str, ...],
    writers: tuple[str, ...],
    cleared: tuple[str, ...],
) -> None:
    """Replace relations of NOTE_ID.

    Only the relations given are replaced; the others are kept.

    \b
    Examples:
      notebook-authz permissions set 2A94M5J1Z --owner alice --reader bob --reader analysts
      notebook-authz permissions set 2A94M5J1Z --clear readers
    """
    given = {
        NoteRelation.OWNERS.value: list(owners) if owners else None,
        NoteRelation.READERS.value: list(readers) if readers else None,
        NoteRelation.WRITERS.value: list(writers) if writers else None,
    }
    for relation in cleared:
        if given[relation] is not None:
            raise click.UsageError(f"--clear {relation} conflicts with principals given for it")
        given[relation] = []

    if all(value is None for value in given.values()):
        raise click.UsageError("Nothing to change: pass --owner, --reader, --writer or --clear")

    service = get_service(ctx)
    service.set_permissions(note_id, **given)
    _exit_on_persist_error(service)

    success(f"Permissions of {note_id} updated")
    _echo_permissions(service, note_id)


@permissions.command(name="remove")
@click.argument("note_id")
@click.pass_context
def remove_cmd(ctx: click.Context, note_id: str) -> None:
    """Remove every permission of NOTE_ID."""
    service = get_service(ctx)

    if note_id not in service.list_note_ids():
        info(f"No permissions recorded for {note_id}")
        return

    service.remove_note(note_id)
    _exit_on_persist_error(service)
    success(f"Permissions of {note_id} removed")


@permissions.command(name="check")
@click.argument("note_id")
@click.option(
    "--principal",
    "principals",
    multiple=True,
    required=True,
    help="User or role principal (repeatable)",
)
@click.pass_context
def check_cmd(ctx: click.Context, note_id: str, principals: tuple[str, ...]) -> None:
    """Show owner/writer/reader decisions of NOTE_ID for a principal set."""
    service = get_service(ctx)
    principal_set = frozenset(principals)

    section(f"{note_id} for {', '.join(sorted(principal_set))}")
    for label, allowed in (
        ("owner", service.is_owner(note_id, principal_set)),
        ("writer", service.is_writer(note_id, principal_set)),
        ("reader", service.is_reader(note_id, principal_set)),
    ):
        click.echo(f"  {label:<7} {'yes' if allowed else 'no'}")

    if service.anonymous_allowed:
        warning("Anonymous access is allowed: the server grants every request regardless")
