"""Note ACL primitives.

Components:
    - NoteRelation: the owners/readers/writers relation names
    - ANONYMOUS_USER: identity used for unauthenticated subjects
    - normalize_principals: trim, drop blanks and de-duplicate principal names
    - is_member: membership rule where an empty relation admits everyone

Relation implication:
    owners  -> may write, may read
    writers -> may read
    readers -> may read

Example:
    >>> from notebook_authz.core.acl import is_member
    >>> is_member({"alice"}, frozenset({"alice", "bob"}))
    True
"""

from __future__ import annotations

from notebook_authz.core.acl.constants import (
    ANONYMOUS_USER,
    NOTE_RELATIONS,
    NoteRelation,
)
from notebook_authz.core.acl.membership import is_member, normalize_principals

__all__ = [
    "ANONYMOUS_USER",
    "NOTE_RELATIONS",
    "NoteRelation",
    "is_member",
    "normalize_principals",
]
