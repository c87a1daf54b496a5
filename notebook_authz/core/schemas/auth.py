"""Identity schemas consumed from the hosting notebook server.

Authentication itself happens upstream; this service only needs to know who
the caller is and which roles the identity layer granted.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from notebook_authz.core.acl.constants import ANONYMOUS_USER
from notebook_authz.core.acl.membership import normalize_principals


class AuthenticationInfo(BaseModel):
    """Authenticated (or anonymous) subject of a request.

    Example:
        >>> subject = AuthenticationInfo(user="alice", roles=frozenset({"analysts"}))
        >>> sorted(subject.principals)
        ['alice', 'analysts']
        >>> AuthenticationInfo.anonymous().is_anonymous
        True
    """

    user: str = Field(default=ANONYMOUS_USER, description="Principal name of the caller")
    roles: frozenset[str] = Field(
        default_factory=frozenset,
        description="Roles granted to the caller by the identity layer",
    )

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @field_validator("roles", mode="before")
    @classmethod
    def _clean_roles(cls, value: object) -> frozenset[str]:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(normalize_principals(value))  # type: ignore[arg-type]

    @classmethod
    def anonymous(cls) -> AuthenticationInfo:
        """Subject used when the host could not identify the caller."""
        return cls(user=ANONYMOUS_USER)

    @property
    def is_anonymous(self) -> bool:
        """True for the anonymous identity or a blank user."""
        return not self.user or self.user == ANONYMOUS_USER

    @property
    def principals(self) -> frozenset[str]:
        """Identity plus granted roles, ready for membership checks."""
        if not self.user:
            return self.roles
        return self.roles | {self.user}


def is_anonymous(subject: AuthenticationInfo | None) -> bool:
    """Return True when there is no subject or the subject is anonymous."""
    return subject is None or subject.is_anonymous
