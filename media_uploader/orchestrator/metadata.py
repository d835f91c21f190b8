"""Metadata binding - free-text fields attached to resolved entries."""
from typing import TYPE_CHECKING, Optional

from ..errors import EntryNotFoundError
from ..models import Annotation, Resolved
from .reducer import update_annotation

if TYPE_CHECKING:
    from .reconciler import ListReconciler


class MetadataBinding:
    """
    Edits title/analysis of resolved entries by storage key.

    Addressing by key keeps edits on the right entry while batches are still
    reshaping the list. Editing text never touches the image and never
    starts an upload.
    """

    def __init__(self, reconciler: "ListReconciler"):
        self._reconciler = reconciler

    def get(self, key: str) -> Optional[Annotation]:
        for entry in self._reconciler.entries:
            if isinstance(entry, Resolved) and entry.key == key:
                return entry.annotation
        raise EntryNotFoundError(f"No resolved entry with key {key!r}")

    async def update(
        self,
        key: str,
        title: Optional[str] = None,
        analysis: Optional[str] = None,
    ) -> Optional[Resolved]:
        """
        Shallow-merge text fields into the entry with ``key``.

        Raises:
            EntryNotFoundError: if no resolved entry has this key
        """
        if self._reconciler.disabled:
            return None
        entries = await self._reconciler.dispatch(
            update_annotation, key, title=title, analysis=analysis
        )
        return next(e for e in entries if isinstance(e, Resolved) and e.key == key)
