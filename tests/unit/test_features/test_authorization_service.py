"""Unit tests for NotebookAuthorizationService."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import threading
from unittest.mock import patch

import pytest

from notebook_authz.core.acl import NoteRelation
from notebook_authz.core.schemas.auth import AuthenticationInfo
from notebook_authz.core.schemas.authorization import AuthorizationSnapshot, NotePermissions
from notebook_authz.core.settings import AuthorizationSettings, StorageSettings
from notebook_authz.features.authorization.service import NotebookAuthorizationService, NoteEntry
from notebook_authz.infra.persistence import (
    FileSnapshotPersistence,
    PersistenceNotConfiguredError,
    SnapshotLoadError,
    SnapshotSaveError,
)

ALICE = AuthenticationInfo(user="alice")


@dataclass
class Note:
    id: str
    name: str = ""


@pytest.mark.unit
class TestNoteEntry:
    """Test the immutable ACL entry."""

    def test_round_trips_permissions(self):
        permissions = NotePermissions(owners=["alice"], readers=["bob", "carol"])

        entry = NoteEntry.from_permissions(permissions)

        assert entry.readers == ("bob", "carol")
        assert entry.to_permissions() == permissions

    def test_relation_returns_frozenset(self):
        entry = NoteEntry(writers=("bob",))

        assert entry.relation(NoteRelation.WRITERS) == frozenset({"bob"})
        assert entry.relation(NoteRelation.OWNERS) == frozenset()


@pytest.mark.unit
class TestUnknownNote:
    """Queries about a note without an entry."""

    def test_relations_are_empty(self, service: NotebookAuthorizationService):
        assert service.get_owners("missing") == frozenset()
        assert service.get_readers("missing") == frozenset()
        assert service.get_writers("missing") == frozenset()

    def test_everyone_is_member(self, service: NotebookAuthorizationService):
        """Empty relations are open to any principal set."""
        assert service.is_reader("missing", {"bob"}) is True
        assert service.is_writer("missing", {"bob"}) is True
        assert service.is_owner("missing", {"bob"}) is True

    def test_permissions_are_empty_lists(self, service: NotebookAuthorizationService):
        assert service.get_permissions("missing") == NotePermissions()


@pytest.mark.unit
class TestMutators:
    """Test ACL store mutators and their persistence."""

    def test_set_owners_normalizes(self, service, persistence):
        service.set_owners("n1", ["a", " b ", ""])

        assert service.get_owners("n1") == frozenset({"a", "b"})
        assert persistence.saved[-1].auth_info["n1"].owners == ["a", "b"]

    def test_first_write_creates_full_entry(self, service):
        """The other relations default to empty."""
        service.set_writers("n1", ["bob"])

        assert service.get_permissions("n1") == NotePermissions(writers=["bob"])
        assert service.snapshot().auth_info["n1"].owners == []

    def test_set_readers_is_idempotent(self, service):
        service.set_readers("n1", ["alice", "bob"])
        service.set_readers("n1", ["alice", "bob"])

        assert service.get_readers("n1") == frozenset({"alice", "bob"})

    def test_set_replaces_relation(self, service):
        service.set_readers("n1", ["alice", "bob"])
        service.set_readers("n1", ["carol"])

        assert service.get_readers("n1") == frozenset({"carol"})

    def test_every_mutation_saves_full_snapshot(self, service, persistence):
        service.set_owners("n1", ["alice"])
        service.set_owners("n2", ["bob"])

        assert len(persistence.saved) == 2
        assert set(persistence.saved[-1].auth_info) == {"n1", "n2"}

    def test_set_permissions_keeps_omitted_relations(self, service, persistence):
        service.set_permissions("n1", owners=["alice"], readers=["bob"], writers=["carol"])
        persistence.saved.clear()

        result = service.set_permissions("n1", readers=["dave"])

        assert result == NotePermissions(owners=["alice"], readers=["dave"], writers=["carol"])
        assert len(persistence.saved) == 1

    def test_remove_note(self, service, persistence):
        service.set_owners("n1", ["alice"])

        service.remove_note("n1")

        assert service.get_owners("n1") == frozenset()
        assert "n1" not in persistence.saved[-1].auth_info
        assert service.list_note_ids() == []

    def test_remove_unknown_note_is_noop(self, service, persistence):
        service.remove_note("missing")

        assert service.list_note_ids() == []
        assert persistence.saved[-1].auth_info == {}

    def test_list_note_ids_in_insertion_order(self, service):
        service.set_owners("b", ["x"])
        service.set_owners("a", ["x"])

        assert service.list_note_ids() == ["b", "a"]


@pytest.mark.unit
class TestNewNotePermissions:
    """Test seeding permissions on note creation."""

    def test_public_mode_adds_owner_only(self, service):
        service.set_new_note_permissions("n1", ALICE)

        assert service.get_owners("n1") == frozenset({"alice"})
        assert service.get_readers("n1") == frozenset()
        assert service.get_writers("n1") == frozenset()
        assert service.is_reader("n1", {"bob"}) is True
        assert service.is_owner("n1", {"bob"}) is False

    def test_private_mode_closes_note(self, private_service):
        private_service.set_new_note_permissions("n1", ALICE)

        for relation in (
            private_service.get_owners,
            private_service.get_readers,
            private_service.get_writers,
        ):
            assert relation("n1") == frozenset({"alice"})
        assert private_service.is_reader("n1", {"bob"}) is False
        assert private_service.is_reader("n1", {"alice"}) is True

    def test_existing_principals_kept(self, service):
        service.set_owners("n1", ["bob"])

        service.set_new_note_permissions("n1", ALICE)

        assert service.get_owners("n1") == frozenset({"bob", "alice"})

    def test_single_save(self, private_service, persistence):
        private_service.set_new_note_permissions("n1", ALICE)

        assert len(persistence.saved) == 1

    @pytest.mark.parametrize("subject", [None, AuthenticationInfo.anonymous()])
    def test_anonymous_creator_gets_nothing(self, service, persistence, subject):
        service.set_new_note_permissions("n1", subject)

        assert service.list_note_ids() == []
        assert persistence.saved == []


@pytest.mark.unit
class TestQueries:
    """Test the inheritance between relations."""

    def test_owner_can_write_and_read(self, service):
        service.set_permissions("n1", owners=["alice"], readers=["bob"], writers=["carol"])

        assert service.is_writer("n1", {"alice"}) is True
        assert service.is_reader("n1", {"alice"}) is True

    def test_writer_can_read_but_not_own(self, service):
        service.set_permissions("n1", owners=["alice"], readers=["bob"], writers=["carol"])

        assert service.is_reader("n1", {"carol"}) is True
        assert service.is_owner("n1", {"carol"}) is False

    def test_reader_cannot_write(self, service):
        service.set_permissions("n1", owners=["alice"], readers=["bob"], writers=["carol"])

        assert service.is_writer("n1", {"bob"}) is False
        assert service.is_reader("n1", {"dave"}) is False

    def test_empty_owners_is_vacuous(self, service):
        """Without owners everyone is writer and reader."""
        service.set_permissions("n1", readers=["bob"], writers=["carol"])

        assert service.is_writer("n1", {"dave"}) is True
        assert service.is_reader("n1", {"dave"}) is True

    def test_role_principal_matches(self, service):
        service.set_readers("n1", ["analysts"])
        service.set_owners("n1", ["alice"])

        assert service.is_reader("n1", {"bob", "analysts"}) is True


@pytest.mark.unit
class TestPolicyAwareChecks:
    """Test the anonymous-mode bypass and fail-closed checks."""

    @pytest.mark.parametrize(
        "check",
        ["has_read_authorization", "has_write_authorization", "has_owner_authorization"],
    )
    def test_anonymous_mode_grants_without_store(self, make_service, check):
        service = make_service(anonymous_allowed=True)
        service.set_permissions("n1", owners=["alice"], readers=["alice"], writers=["alice"])

        with patch.object(service, "_relation", side_effect=AssertionError("store consulted")):
            assert getattr(service, check)(None, "n1") is True
            assert getattr(service, check)({"bob"}, "n1") is True
            assert getattr(service, check)(set(), "other") is True

    @pytest.mark.parametrize(
        "check",
        ["has_read_authorization", "has_write_authorization", "has_owner_authorization"],
    )
    def test_missing_principals_denied(self, service, check):
        """Even an open note denies an undefined principal set."""
        assert getattr(service, check)(None, "missing") is False

    def test_enforced_checks_use_store(self, service):
        service.set_permissions("n1", owners=["alice"], readers=["bob"])

        assert service.has_read_authorization({"bob"}, "n1") is True
        assert service.has_write_authorization({"bob"}, "n1") is False
        assert service.has_owner_authorization({"alice"}, "n1") is True
        assert service.has_owner_authorization({"bob"}, "n1") is False

    def test_policy_flags_exposed(self, make_service):
        service = make_service(anonymous_allowed=False, public_by_default=False)

        assert service.anonymous_allowed is False
        assert service.is_public is False


@pytest.mark.unit
class TestRoles:
    """Test the role registry."""

    def test_set_and_get_roles(self, service):
        service.set_roles("alice", ["analysts", " admins ", ""])

        assert service.get_roles("alice") == frozenset({"analysts", "admins"})

    def test_set_roles_replaces(self, service):
        service.set_roles("alice", ["analysts"])
        service.set_roles("alice", ["admins"])

        assert service.get_roles("alice") == frozenset({"admins"})

    def test_unknown_user_has_no_roles(self, service):
        assert service.get_roles("nobody") == frozenset()
        assert service.get_roles("") == frozenset()

    def test_blank_user_ignored_with_warning(self, service, caplog):
        with caplog.at_level(logging.WARNING):
            service.set_roles("  ", ["admins"])

        assert "Ignoring role assignment for a blank user" in caplog.text
        assert service.get_roles("  ") == frozenset()

    def test_roles_not_persisted(self, service, persistence):
        service.set_roles("alice", ["admins"])

        assert persistence.saved == []

    def test_expand_principals(self, service):
        service.set_roles("alice", ["admins"])
        subject = AuthenticationInfo(user="alice", roles=["analysts"])

        assert service.expand_principals(subject) == frozenset({"alice", "analysts", "admins"})
        assert service.expand_principals(None) == frozenset()


@pytest.mark.unit
class TestFilterByUser:
    """Test projecting a note list to readable notes."""

    def test_keeps_readable_notes(self, private_service):
        private_service.set_new_note_permissions("mine", ALICE)
        private_service.set_new_note_permissions("theirs", AuthenticationInfo(user="bob"))
        notes = [Note("mine"), None, Note("theirs"), Note("open")]

        visible = private_service.filter_by_user(notes, ALICE)

        assert [note.id for note in visible] == ["mine", "open"]

    def test_expands_registry_roles(self, private_service):
        private_service.set_permissions("n1", owners=["admins"], readers=["admins"], writers=["admins"])
        private_service.set_roles("alice", ["admins"])

        assert private_service.filter_by_user([Note("n1")], ALICE) == [Note("n1")]

    def test_no_subject_sees_only_open_notes(self, private_service):
        private_service.set_new_note_permissions("mine", ALICE)

        visible = private_service.filter_by_user([Note("mine"), Note("open")], None)

        assert [note.id for note in visible] == ["open"]


@pytest.mark.unit
class TestPersistenceFailures:
    """Test load and save failure handling."""

    def test_load_snapshot(self, make_service, persistence):
        persistence.initial = AuthorizationSnapshot(
            auth_info={"n1": NotePermissions(owners=["alice"])}
        )
        service = make_service()

        assert service.load() is True
        assert service.get_owners("n1") == frozenset({"alice"})

    def test_missing_snapshot_keeps_store(self, service):
        service.set_owners("n1", ["alice"])

        assert service.load() is False
        assert service.get_owners("n1") == frozenset({"alice"})

    def test_load_failure_keeps_store(self, service, persistence, caplog):
        service.set_owners("n1", ["alice"])
        persistence.fail_load = True

        with caplog.at_level(logging.ERROR):
            assert service.load() is False

        assert "Failed to load authorization snapshot" in caplog.text
        assert service.get_owners("n1") == frozenset({"alice"})
        assert isinstance(service.last_load_error, SnapshotLoadError)

    def test_successful_load_clears_load_error(self, service, persistence):
        persistence.fail_load = True
        service.load()
        persistence.fail_load = False

        service.load()

        assert service.last_load_error is None

    def test_save_failure_keeps_mutation(self, service, persistence, caplog):
        persistence.fail_save = True

        with caplog.at_level(logging.ERROR):
            service.set_owners("n1", ["alice"])

        assert service.get_owners("n1") == frozenset({"alice"})
        assert isinstance(service.last_persist_error, SnapshotSaveError)
        assert "Failed to persist note permissions" in caplog.text

    def test_next_successful_save_clears_error(self, service, persistence):
        persistence.fail_save = True
        service.set_owners("n1", ["alice"])
        persistence.fail_save = False

        service.set_readers("n1", ["bob"])

        assert service.last_persist_error is None
        assert persistence.saved[-1].auth_info["n1"].owners == ["alice"]

    def test_explicit_save_raises(self, service, persistence):
        persistence.fail_save = True

        with pytest.raises(SnapshotSaveError):
            service.save()


@pytest.mark.unit
class TestFromSettings:
    """Test building the service from configuration."""

    def test_file_round_trip(self, tmp_path: Path):
        """A reloaded store equals the saved one."""
        settings = AuthorizationSettings(storage_path=str(tmp_path / "conf" / "authz.json"))
        service = NotebookAuthorizationService.from_settings(settings)
        for index in range(5):
            service.set_permissions(
                f"note-{index}",
                owners=[f"owner-{index}"],
                readers=[f"reader-{index}", "shared"],
                writers=[] if index % 2 else [f"writer-{index}"],
            )

        reloaded = NotebookAuthorizationService.from_settings(settings)

        assert isinstance(reloaded.persistence, FileSnapshotPersistence)
        assert reloaded.snapshot() == service.snapshot()

    def test_skip_load(self, tmp_path: Path):
        path = tmp_path / "authz.json"
        path.write_text('{"authInfo": {"n1": {"owners": ["alice"]}}}', encoding="utf-8")
        settings = AuthorizationSettings(storage_path=str(path))

        service = NotebookAuthorizationService.from_settings(settings, load=False)

        assert service.list_note_ids() == []

    def test_malformed_object_storage_path(self):
        with pytest.raises(PersistenceNotConfiguredError):
            NotebookAuthorizationService.from_settings(AuthorizationSettings(storage_path="s3://bucket"))

    def test_invalid_object_storage_endpoint_does_not_raise_from_mutators(self, caplog):
        """A client that cannot be built fails the save, not the mutation."""
        service = NotebookAuthorizationService.from_settings(
            AuthorizationSettings(storage_path="s3://bucket/key"),
            StorageSettings(endpoint="not a url"),
            load=False,
        )

        with caplog.at_level(logging.ERROR):
            service.set_owners("n1", ["alice"])

        assert isinstance(service.last_persist_error, SnapshotSaveError)
        assert service.get_owners("n1") == frozenset({"alice"})


@pytest.mark.unit
class TestConcurrency:
    """Test concurrent mutators against one service."""

    def test_persisted_state_matches_memory(self, service, persistence):
        threads_per_relation = 8
        barrier = threading.Barrier(threads_per_relation * 2)

        def set_owner(index: int) -> None:
            barrier.wait()
            service.set_owners("n1", [f"owner-{index}"])

        def set_reader(index: int) -> None:
            barrier.wait()
            service.set_readers("n1", [f"reader-{index}"])

        threads = [
            threading.Thread(target=target, args=(index,))
            for index in range(threads_per_relation)
            for target in (set_owner, set_reader)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(persistence.saved) == threads_per_relation * 2
        for saved in persistence.saved:
            entry = saved.auth_info["n1"]
            assert len(entry.owners) <= 1
            assert len(entry.readers) <= 1
            assert entry.writers == []
        assert persistence.saved[-1] == service.snapshot()
