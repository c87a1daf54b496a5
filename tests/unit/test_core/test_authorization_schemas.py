"""Unit tests for identity and snapshot schemas."""

from __future__ import annotations

import json

from pydantic import ValidationError
import pytest

from notebook_authz.core.schemas.auth import AuthenticationInfo, is_anonymous
from notebook_authz.core.schemas.authorization import (
    AuthorizationSnapshot,
    NoteInfo,
    NotePermissions,
    NotePermissionsUpdate,
)


@pytest.mark.unit
class TestAuthenticationInfo:
    """Test the request subject model."""

    def test_principals_include_user_and_roles(self):
        subject = AuthenticationInfo(user="alice", roles=["analysts", " admins ", ""])

        assert subject.roles == frozenset({"analysts", "admins"})
        assert subject.principals == frozenset({"alice", "analysts", "admins"})

    def test_anonymous(self):
        """The anonymous factory and a blank user are both anonymous."""
        assert AuthenticationInfo.anonymous().is_anonymous is True
        assert AuthenticationInfo(user="  ").is_anonymous is True
        assert AuthenticationInfo(user="alice").is_anonymous is False

    def test_module_level_predicate_accepts_none(self):
        assert is_anonymous(None) is True
        assert is_anonymous(AuthenticationInfo(user="alice")) is False

    def test_frozen(self):
        subject = AuthenticationInfo(user="alice")

        with pytest.raises(ValidationError):
            subject.user = "mallory"  # type: ignore[misc]


@pytest.mark.unit
class TestNotePermissions:
    """Test per-note relation lists."""

    def test_null_and_missing_relations_load_empty(self):
        permissions = NotePermissions.model_validate({"owners": ["alice"], "readers": None})

        assert permissions.owners == ["alice"]
        assert permissions.readers == []
        assert permissions.writers == []

    def test_principals_normalized(self):
        permissions = NotePermissions(owners=["alice", " alice ", "", "bob"])

        assert permissions.owners == ["alice", "bob"]

    def test_update_keeps_none_for_omitted_relations(self):
        update = NotePermissionsUpdate.model_validate({"readers": []})

        assert update.owners is None
        assert update.readers == []
        assert update.writers is None


@pytest.mark.unit
class TestAuthorizationSnapshot:
    """Test the persisted snapshot document."""

    def test_parses_persisted_layout(self):
        payload = json.dumps(
            {
                "authInfo": {
                    "2A94M5J1Z": {
                        "owners": ["user1"],
                        "readers": ["user1", "user2"],
                        "writers": ["user1"],
                    }
                }
            }
        )

        snapshot = AuthorizationSnapshot.from_json(payload)

        entry = snapshot.auth_info["2A94M5J1Z"]
        assert entry.owners == ["user1"]
        assert entry.readers == ["user1", "user2"]
        assert entry.writers == ["user1"]

    @pytest.mark.parametrize("payload", ["{}", '{"authInfo": null}'])
    def test_missing_or_null_auth_info_is_empty(self, payload: str):
        assert AuthorizationSnapshot.from_json(payload).auth_info == {}

    def test_entry_without_relations(self):
        snapshot = AuthorizationSnapshot.from_json('{"authInfo": {"n1": {}}}')

        assert snapshot.auth_info["n1"] == NotePermissions()

    def test_to_json_uses_persisted_key_and_indentation(self):
        snapshot = AuthorizationSnapshot(
            auth_info={"n1": NotePermissions(owners=["alice"], readers=["bob", "alice"])}
        )

        text = snapshot.to_json()

        assert text.startswith('{\n  "authInfo": {')
        document = json.loads(text)
        assert document == {
            "authInfo": {"n1": {"owners": ["alice"], "readers": ["bob", "alice"], "writers": []}}
        }

    def test_malformed_document_raises(self):
        with pytest.raises(ValidationError):
            AuthorizationSnapshot.from_json("{not json")

        with pytest.raises(ValidationError):
            AuthorizationSnapshot.from_json('{"authInfo": ["n1"]}')


@pytest.mark.unit
def test_note_info_from_attributes():
    """NoteInfo accepts objects exposing id and name."""

    class Note:
        id = "n1"
        name = "Quarterly report"

    note = NoteInfo.model_validate(Note())

    assert note.id == "n1"
    assert note.name == "Quarterly report"
