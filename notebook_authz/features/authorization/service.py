"""Notebook authorization service.

Owns the per-note ACL store, the user role registry, the policy flags and the
snapshot persistence backend. One instance is built at startup and shared by
reference (``app.state`` for the HTTP surface, the click context for the CLI).

Concurrency model:
- Every mutator holds ``_lock`` across mutation and save, so each persisted
  snapshot matches the in-memory state at the end of that mutation.
- Note entries are immutable and replaced on every write, so queries read
  without locking and never observe a half-updated entry.
- Queries never touch the persistence backend.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import threading
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from notebook_authz.core.acl import NoteRelation, is_member, normalize_principals
from notebook_authz.core.schemas.auth import AuthenticationInfo, is_anonymous
from notebook_authz.core.schemas.authorization import AuthorizationSnapshot, NotePermissions
from notebook_authz.infra.persistence.exceptions import PersistenceError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from notebook_authz.core.settings.authorization import AuthorizationSettings
    from notebook_authz.core.settings.storage import StorageSettings
    from notebook_authz.infra.persistence.protocol import SnapshotPersistence

logger = logging.getLogger(__name__)


class HasNoteId(Protocol):
    """Anything exposing a note identifier."""

    @property
    def id(self) -> str: ...


NoteT = TypeVar("NoteT", bound=HasNoteId)


@dataclass(frozen=True)
class NoteEntry:
    """Immutable ACL entry of one note; principals kept in insertion order."""

    owners: tuple[str, ...] = ()
    readers: tuple[str, ...] = ()
    writers: tuple[str, ...] = ()

    @classmethod
    def from_permissions(cls, permissions: NotePermissions) -> NoteEntry:
        return cls(
            owners=normalize_principals(permissions.owners),
            readers=normalize_principals(permissions.readers),
            writers=normalize_principals(permissions.writers),
        )

    def to_permissions(self) -> NotePermissions:
        return NotePermissions(
            owners=list(self.owners),
            readers=list(self.readers),
            writers=list(self.writers),
        )

    def relation(self, relation: NoteRelation) -> frozenset[str]:
        return frozenset(getattr(self, relation.value))


_EMPTY_ENTRY = NoteEntry()


class NotebookAuthorizationService:
    """Per-note owners/readers/writers and the authorization queries over them.

    Example:
        service = NotebookAuthorizationService.from_settings()
        service.set_new_note_permissions("2A94M5J1Z", AuthenticationInfo(user="alice"))
        service.is_reader("2A94M5J1Z", {"bob"})
    """

    def __init__(
        self,
        persistence: SnapshotPersistence,
        settings: AuthorizationSettings | None = None,
    ) -> None:
        """Initialize an empty service.

        Args:
            persistence: Backend receiving a full snapshot after every mutation.
            settings: Policy flags; loaded from the environment when omitted.
        """
        if settings is None:
            from notebook_authz.core.settings import get_authorization_settings

            settings = get_authorization_settings()

        self._persistence = persistence
        self._settings = settings
        self._auth_info: dict[str, NoteEntry] = {}
        self._user_roles: dict[str, frozenset[str]] = {}
        self._lock = threading.RLock()
        self.last_persist_error: PersistenceError | None = None
        self.last_load_error: PersistenceError | None = None

    @classmethod
    def from_settings(
        cls,
        settings: AuthorizationSettings | None = None,
        storage_settings: StorageSettings | None = None,
        *,
        s3_client: Any | None = None,
        load: bool = True,
    ) -> NotebookAuthorizationService:
        """Build the service and its backend from configuration.

        Args:
            settings: Authorization settings; loaded from the environment when omitted.
            storage_settings: S3 connection settings for s3:// storage paths.
            s3_client: Pre-built boto3 client for the S3 backend.
            load: Hydrate the store from the backend right away.

        Raises:
            PersistenceNotConfiguredError: If the storage path is malformed.
        """
        from notebook_authz.infra.persistence.factory import create_snapshot_persistence

        if settings is None:
            from notebook_authz.core.settings import get_authorization_settings

            settings = get_authorization_settings()

        persistence = create_snapshot_persistence(settings, storage_settings, s3_client=s3_client)
        service = cls(persistence, settings)
        if load:
            service.load()
        return service

    # ──────────────────────────────────────────────────────────────
    # Policy flags
    # ──────────────────────────────────────────────────────────────

    @property
    def settings(self) -> AuthorizationSettings:
        return self._settings

    @property
    def persistence(self) -> SnapshotPersistence:
        return self._persistence

    @property
    def is_public(self) -> bool:
        """Whether new notes are created readable and writable by everyone."""
        return self._settings.public_by_default

    @property
    def anonymous_allowed(self) -> bool:
        """Whether every access is granted without consulting note permissions."""
        return self._settings.anonymous_allowed

    # ──────────────────────────────────────────────────────────────
    # Persistence
    # ──────────────────────────────────────────────────────────────

    def load(self) -> bool:
        """Hydrate the store from the persistence backend.

        A missing snapshot leaves the store untouched. A broken one is logged,
        recorded in ``last_load_error`` and also leaves the store untouched,
        so startup continues.

        Returns:
            True if a snapshot was loaded.
        """
        with self._lock:
            try:
                snapshot = self._persistence.load()
            except PersistenceError as e:
                self.last_load_error = e
                logger.exception(
                    "Failed to load authorization snapshot",
                    extra={"location": str(self._persistence.location)},
                )
                return False

            self.last_load_error = None
            if snapshot is None:
                return False

            self._auth_info = {
                note_id: NoteEntry.from_permissions(permissions)
                for note_id, permissions in snapshot.auth_info.items()
            }

        logger.info(
            "Note permissions loaded",
            extra={"notes": len(self._auth_info), "backend": self._persistence.backend_name},
        )
        return True

    def snapshot(self) -> AuthorizationSnapshot:
        """Consistent image of the whole store."""
        with self._lock:
            return AuthorizationSnapshot(
                auth_info={
                    note_id: entry.to_permissions() for note_id, entry in self._auth_info.items()
                }
            )

    def save(self) -> None:
        """Persist the current store.

        Raises:
            PersistenceError: If the backend rejects the snapshot.
        """
        with self._lock:
            self._persistence.save(self.snapshot())
            self.last_persist_error = None

    def _persist(self) -> None:
        # Caller holds the lock. Save failures do not roll back the mutation.
        try:
            self.save()
        except PersistenceError as e:
            self.last_persist_error = e
            logger.exception(
                "Failed to persist note permissions",
                extra={"location": str(self._persistence.location), "error": e.detail},
            )

    # ──────────────────────────────────────────────────────────────
    # ACL store mutators
    # ──────────────────────────────────────────────────────────────

    def set_owners(self, note_id: str, principals: Iterable[str]) -> None:
        """Replace the owners of a note and persist."""
        self._set_relation(note_id, NoteRelation.OWNERS, principals)

    def set_readers(self, note_id: str, principals: Iterable[str]) -> None:
        """Replace the readers of a note and persist."""
        self._set_relation(note_id, NoteRelation.READERS, principals)

    def set_writers(self, note_id: str, principals: Iterable[str]) -> None:
        """Replace the writers of a note and persist."""
        self._set_relation(note_id, NoteRelation.WRITERS, principals)

    def _set_relation(
        self,
        note_id: str,
        relation: NoteRelation,
        principals: Iterable[str] | None,
    ) -> None:
        cleaned = normalize_principals(principals)
        with self._lock:
            entry = self._auth_info.get(note_id, _EMPTY_ENTRY)
            self._auth_info[note_id] = replace(entry, **{relation.value: cleaned})
            self._persist()

        logger.info(
            "Note %s updated",
            relation.value,
            extra={"note_id": note_id, "relation": relation.value, "principals": list(cleaned)},
        )

    def set_permissions(
        self,
        note_id: str,
        owners: Iterable[str] | None = None,
        readers: Iterable[str] | None = None,
        writers: Iterable[str] | None = None,
    ) -> NotePermissions:
        """Replace several relations of a note with a single save.

        Relations passed as None are kept unchanged.

        Returns:
            The permissions stored for the note afterwards.
        """
        changes: dict[str, tuple[str, ...]] = {}
        for relation, principals in (
            (NoteRelation.OWNERS, owners),
            (NoteRelation.READERS, readers),
            (NoteRelation.WRITERS, writers),
        ):
            if principals is not None:
                changes[relation.value] = normalize_principals(principals)

        with self._lock:
            entry = replace(self._auth_info.get(note_id, _EMPTY_ENTRY), **changes)
            self._auth_info[note_id] = entry
            self._persist()

        logger.info(
            "Note permissions updated",
            extra={"note_id": note_id, "relations": sorted(changes)},
        )
        return entry.to_permissions()

    def remove_note(self, note_id: str) -> None:
        """Drop every permission of a deleted note and persist."""
        with self._lock:
            removed = self._auth_info.pop(note_id, None)
            self._persist()

        if removed is not None:
            logger.info("Note permissions removed", extra={"note_id": note_id})

    def set_new_note_permissions(self, note_id: str, subject: AuthenticationInfo | None) -> None:
        """Seed the permissions of a freshly created note.

        The creator becomes an owner. When notes are private by default the
        creator also becomes reader and writer, which closes the note to
        everyone else. Anonymous creators get no permissions.
        """
        if is_anonymous(subject):
            logger.debug("Skipping permissions for note created anonymously", extra={"note_id": note_id})
            return

        user = subject.user
        with self._lock:
            entry = self._auth_info.get(note_id, _EMPTY_ENTRY)
            entry = replace(entry, owners=normalize_principals((*entry.owners, user)))
            if not self.is_public:
                entry = replace(
                    entry,
                    readers=normalize_principals((*entry.readers, user)),
                    writers=normalize_principals((*entry.writers, user)),
                )
            self._auth_info[note_id] = entry
            self._persist()

        logger.info(
            "New note permissions set",
            extra={"note_id": note_id, "user": user, "public": self.is_public},
        )

    # ──────────────────────────────────────────────────────────────
    # ACL store reads
    # ──────────────────────────────────────────────────────────────

    def _relation(self, note_id: str, relation: NoteRelation) -> frozenset[str]:
        return self._auth_info.get(note_id, _EMPTY_ENTRY).relation(relation)

    def get_owners(self, note_id: str) -> frozenset[str]:
        return self._relation(note_id, NoteRelation.OWNERS)

    def get_readers(self, note_id: str) -> frozenset[str]:
        return self._relation(note_id, NoteRelation.READERS)

    def get_writers(self, note_id: str) -> frozenset[str]:
        return self._relation(note_id, NoteRelation.WRITERS)

    def get_permissions(self, note_id: str) -> NotePermissions:
        """All relations of a note; empty lists for an unknown note."""
        return self._auth_info.get(note_id, _EMPTY_ENTRY).to_permissions()

    def list_note_ids(self) -> list[str]:
        """IDs of all notes with recorded permissions, in insertion order."""
        with self._lock:
            return list(self._auth_info)

    # ──────────────────────────────────────────────────────────────
    # Role registry
    # ──────────────────────────────────────────────────────────────

    def set_roles(self, user: str, roles: Iterable[str] | None) -> None:
        """Replace the roles granted to a user. Blank users are ignored."""
        if not user or not user.strip():
            logger.warning("Ignoring role assignment for a blank user")
            return
        self._user_roles[user.strip()] = frozenset(normalize_principals(roles))

    def get_roles(self, user: str) -> frozenset[str]:
        if not user:
            return frozenset()
        return self._user_roles.get(user.strip(), frozenset())

    def expand_principals(self, subject: AuthenticationInfo | None) -> frozenset[str]:
        """Identity, roles carried by the subject and roles from the registry."""
        if subject is None:
            return frozenset()
        return subject.principals | self.get_roles(subject.user)

    # ──────────────────────────────────────────────────────────────
    # Queries
    # ──────────────────────────────────────────────────────────────

    def is_owner(self, note_id: str, principals: Iterable[str]) -> bool:
        return is_member(principals, self.get_owners(note_id))

    def is_writer(self, note_id: str, principals: Iterable[str]) -> bool:
        principals = frozenset(principals)
        return is_member(principals, self.get_writers(note_id)) or self.is_owner(note_id, principals)

    def is_reader(self, note_id: str, principals: Iterable[str]) -> bool:
        principals = frozenset(principals)
        return (
            is_member(principals, self.get_readers(note_id))
            or self.is_owner(note_id, principals)
            or is_member(principals, self.get_writers(note_id))
        )

    def has_read_authorization(self, principals: Iterable[str] | None, note_id: str) -> bool:
        if self.anonymous_allowed:
            logger.debug("Anonymous access allowed, granting read", extra={"note_id": note_id})
            return True
        if principals is None:
            return False
        return self.is_reader(note_id, principals)

    def has_write_authorization(self, principals: Iterable[str] | None, note_id: str) -> bool:
        if self.anonymous_allowed:
            logger.debug("Anonymous access allowed, granting write", extra={"note_id": note_id})
            return True
        if principals is None:
            return False
        return self.is_writer(note_id, principals)

    def has_owner_authorization(self, principals: Iterable[str] | None, note_id: str) -> bool:
        if self.anonymous_allowed:
            logger.debug("Anonymous access allowed, granting ownership", extra={"note_id": note_id})
            return True
        if principals is None:
            return False
        return self.is_owner(note_id, principals)

    def filter_by_user(
        self,
        notes: Iterable[NoteT | None],
        subject: AuthenticationInfo | None,
    ) -> list[NoteT]:
        """Keep the notes the subject may read.

        The subject is expanded with its registry roles before the check.
        """
        principals = self.expand_principals(subject)
        return [note for note in notes if note is not None and self.is_reader(note.id, principals)]
