"""Principal normalization and the membership rule used by every note check.

The membership rule is deliberately permissive for empty relations:

    >>> is_member({"alice"}, frozenset())
    True
    >>> is_member({"alice"}, frozenset({"bob"}))
    False
    >>> is_member({"alice", "analysts"}, frozenset({"analysts"}))
    True

An empty relation therefore means "open to everyone" for that relation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

__all__ = ["is_member", "normalize_principals"]


def normalize_principals(principals: Iterable[str] | None) -> tuple[str, ...]:
    """Trim principals, drop blank ones and remove duplicates.

    The order of first appearance is kept so that persisted snapshots stay
    readable and stable across saves.

    Args:
        principals: Raw principal names as received from the caller.

    Returns:
        Cleaned principals in their original order.

    Example:
        >>> normalize_principals(["a", " b ", "", "a"])
        ('a', 'b')
    """
    if not principals:
        return ()

    cleaned: dict[str, None] = {}
    for principal in principals:
        if principal is None:
            continue
        value = str(principal).strip()
        if value:
            cleaned.setdefault(value, None)
    return tuple(cleaned)


def is_member(principals: Iterable[str], relation: frozenset[str]) -> bool:
    """Return True if ``relation`` is empty or shares a principal with ``principals``.

    Args:
        principals: Caller identity plus granted roles.
        relation: Principals recorded for one note relation.

    Returns:
        Membership decision under the vacuous-empty rule.
    """
    if not relation:
        return True
    return not relation.isdisjoint(principals)
