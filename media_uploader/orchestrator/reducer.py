"""
Pure list transitions.

Every mutation of the bound list is a function of the list as it is at the
moment of mutation, so overlapping batches compose without lost updates.
"""
from dataclasses import replace
from typing import Iterable, Optional, Sequence, Set, Tuple

from ..errors import EntryNotFoundError
from ..models import Annotation, MediaEntry, MediaList, Placeholder, Resolved


def append_placeholders(entries: MediaList, placeholders: Iterable[Placeholder]) -> MediaList:
    return tuple(entries) + tuple(placeholders)


def settle_batch(
    entries: MediaList,
    outcomes: Sequence[Tuple[Placeholder, Optional[Resolved]]],
    discard_removed: bool = False,
) -> MediaList:
    """
    Drop this batch's placeholders and append its successes.

    ``outcomes`` is in submission order; successes keep that order. With
    ``discard_removed`` a success whose placeholder is no longer in the list
    (removed by the user mid-flight) is not appended.
    """
    batch_ids: Set[str] = {placeholder.id for placeholder, _ in outcomes}
    present_ids = {e.id for e in entries if isinstance(e, Placeholder)}

    kept = tuple(
        e for e in entries
        if not (isinstance(e, Placeholder) and e.id in batch_ids)
    )
    added = tuple(
        entry for placeholder, entry in outcomes
        if entry is not None and (not discard_removed or placeholder.id in present_ids)
    )
    return kept + added


def remove_entry(entries: MediaList, key: str) -> MediaList:
    """Splice out the entry with this key (resolved key or placeholder id)."""
    return tuple(e for e in entries if e.key != key)


def update_annotation(
    entries: MediaList,
    key: str,
    title: Optional[str] = None,
    analysis: Optional[str] = None,
) -> MediaList:
    """Shallow-merge text fields into the resolved entry with this key."""
    updated = []
    found = False
    for entry in entries:
        if isinstance(entry, Resolved) and entry.key == key:
            current = entry.annotation or Annotation()
            patch = {}
            if title is not None:
                patch["title"] = title
            if analysis is not None:
                patch["analysis"] = analysis
            entry = replace(entry, annotation=replace(current, **patch))
            found = True
        updated.append(entry)

    if not found:
        raise EntryNotFoundError(f"No resolved entry with key {key!r}")
    return tuple(updated)


def placeholder_count(entries: Iterable[MediaEntry]) -> int:
    return sum(1 for e in entries if isinstance(e, Placeholder))
