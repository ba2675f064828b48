"""
Declarative sync planning for nested create/update/delete-by-id payloads.

Pure functions: given the currently persisted ids and the desired entries,
decide which ids to delete and tag every entry as an update of an existing
row or a new row. No persistence happens here.
"""

from dataclasses import dataclass
from typing import Generic, Protocol, Sequence, TypeVar, Union


class HasOptionalId(Protocol):
    id: int | None


EntryT = TypeVar("EntryT", bound=HasOptionalId)


@dataclass(frozen=True)
class Existing(Generic[EntryT]):
    """Update the persisted row `id` with `fields`."""

    id: int
    fields: EntryT
    position: int


@dataclass(frozen=True)
class New(Generic[EntryT]):
    """Create a new row from `fields`."""

    fields: EntryT
    position: int


PlannedEntry = Union[Existing[EntryT], New[EntryT]]


@dataclass(frozen=True)
class SyncPlan(Generic[EntryT]):
    delete_ids: list[int]
    entries: list[PlannedEntry]


def plan_sync(existing_ids: Sequence[int], desired: Sequence[EntryT]) -> SyncPlan[EntryT]:
    """
    Plan a declarative sync of `desired` against `existing_ids`.

    keep_ids is built only from entries that carry an id. When no entry
    carries an id (including an empty payload) every existing row is
    deleted. Otherwise only existing rows absent from keep_ids are deleted.

    An entry whose id matches a surviving row becomes Existing; every other
    entry (no id, or an id that is not persisted here) becomes New. In a
    payload mixing id-bearing and id-less entries, the id-less ones are
    created alongside the kept rows, never matched by name.
    """
    keep_ids = {entry.id for entry in desired if entry.id is not None}

    if keep_ids:
        delete_ids = [row_id for row_id in existing_ids if row_id not in keep_ids]
    else:
        delete_ids = list(existing_ids)

    surviving = set(existing_ids) - set(delete_ids)

    entries: list[PlannedEntry] = []
    for position, entry in enumerate(desired):
        if entry.id is not None and entry.id in surviving:
            entries.append(Existing(id=entry.id, fields=entry, position=position))
        else:
            entries.append(New(fields=entry, position=position))

    return SyncPlan(delete_ids=delete_ids, entries=entries)
