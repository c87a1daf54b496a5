"""Note ACL relation names and well-known principals.

Every note carries three principal relations. The names double as the
keys of the persisted snapshot, so they must not change:

    >>> NoteRelation.OWNERS.value
    'owners'
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "ANONYMOUS_USER",
    "NOTE_RELATIONS",
    "NoteRelation",
]

# Identity the host assigns to unauthenticated requests
ANONYMOUS_USER = "anonymous"


class NoteRelation(str, Enum):
    """Principal relations recorded for each note.

    - OWNERS: may change permissions, implies write and read
    - WRITERS: may edit the note, implies read
    - READERS: may view the note
    """

    OWNERS = "owners"
    READERS = "readers"
    WRITERS = "writers"


# Serialization order of the relations inside a snapshot entry
NOTE_RELATIONS: tuple[NoteRelation, ...] = (
    NoteRelation.OWNERS,
    NoteRelation.READERS,
    NoteRelation.WRITERS,
)
