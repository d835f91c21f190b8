"""List reconciler - owns the bound media list and merges batch outcomes into it."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Sequence, Union

from ..models import (
    FROM_CONFIG,
    BatchResult,
    CandidateFile,
    MediaList,
    Placeholder,
    UploadConfig,
    UploadResult,
)
from ..utils.events import (
    BATCH_FAILED,
    BATCH_SETTLED,
    CHANGE,
    VALIDATION_FAILED,
    EventEmitter,
)
from .input_surface import ClipboardItem, DropItem, InputSurfaceAdapter
from .metadata import MetadataBinding
from .models import UploadTask
from .parallel import get_parallel_count, run_bounded
from .pipeline import UploadPipeline
from .reducer import append_placeholders, remove_entry, settle_batch

logger = logging.getLogger(__name__)


def failure_message(count: int) -> str:
    noun = "item" if count == 1 else "items"
    return f"{count} {noun} failed to upload; please retry"


class ListReconciler:
    """
    Controlled media list bound to one form field.

    ``entries`` is the current value; every replacement is announced through
    the ``change`` event with the whole new list. Mutations are reducers over
    the current value, so overlapping batches never overwrite each other.
    Each field has its own emitter; per-task ``task_state`` events go to the
    pipeline's emitter instead. A ``max_items`` of None means uncapped.

    Usage:
        field = orchestrator.bind(max_items=5)
        field.on("change", render)
        result = await field.pick([Path("chart.png")])
    """

    def __init__(
        self,
        pipeline: UploadPipeline,
        config: Optional[UploadConfig] = None,
        entries: Iterable[Any] = (),
        events: Optional[EventEmitter] = None,
        max_items: Optional[int] = FROM_CONFIG,
        annotated: Optional[bool] = None,
        disabled: bool = False,
    ):
        self._pipeline = pipeline
        self._config = config or UploadConfig()
        self._entries: MediaList = tuple(entries)
        self._events = events or EventEmitter()
        self._surface = InputSurfaceAdapter(self._config)
        self._max_items = self._config.max_items if max_items is FROM_CONFIG else max_items
        self._annotated = self._config.annotated if annotated is None else annotated
        self.disabled = disabled
        self._metadata = MetadataBinding(self)

    @property
    def entries(self) -> MediaList:
        return self._entries

    @property
    def max_items(self) -> Optional[int]:
        return self._max_items

    @property
    def reach_max(self) -> bool:
        if self._max_items is None:
            return False
        return len(self._entries) >= self._max_items

    @property
    def metadata(self) -> MetadataBinding:
        return self._metadata

    @property
    def surface(self) -> InputSurfaceAdapter:
        return self._surface

    def on(self, event_name: str, callback: Callable) -> None:
        self._events.on(event_name, callback)

    def off(self, event_name: str, callback: Callable) -> None:
        self._events.off(event_name, callback)

    async def dispatch(self, reducer: Callable[..., MediaList], *args, **kwargs) -> MediaList:
        """Apply a pure transition to the current list and announce it."""
        self._entries = reducer(self._entries, *args, **kwargs)
        await self._events.emit(CHANGE, self._entries)
        return self._entries

    async def pick(self, paths: Iterable[Union[Path, str]]) -> BatchResult:
        return await self.submit(self._surface.pick(paths))

    async def drop(self, items: Iterable[DropItem]) -> BatchResult:
        return await self.submit(self._surface.drop(items))

    async def paste(self, items: Iterable[ClipboardItem]) -> BatchResult:
        return await self.submit(self._surface.paste(items))

    async def remove(self, key: str) -> None:
        """Remove a resolved entry or placeholder. In-flight uploads keep running."""
        if self.disabled:
            return
        await self.dispatch(remove_entry, key)

    async def submit(self, candidates: Sequence[CandidateFile]) -> BatchResult:
        """
        Admit, upload and reconcile one batch.

        Placeholders are published before any network activity. The returned
        BatchResult carries counts only; per-file diagnostics are logged.
        """
        if self.disabled or not candidates:
            return BatchResult(admitted=0)

        admission = self._surface.admit(candidates, len(self._entries), self._max_items)
        for error in admission.rejected:
            await self._events.emit(VALIDATION_FAILED, error)

        if not admission.admitted:
            result = BatchResult(
                admitted=0,
                dropped=admission.dropped,
                rejected=admission.rejected_tuple,
            )
            await self._events.emit(BATCH_SETTLED, result)
            return result

        tasks = [
            UploadTask(index=idx, source=candidate, placeholder=Placeholder.new())
            for idx, candidate in enumerate(admission.admitted)
        ]
        await self.dispatch(append_placeholders, [task.placeholder for task in tasks])

        concurrency = self._config.max_concurrency
        if not concurrency:
            avg_size = sum(t.source.size for t in tasks) / len(tasks)
            concurrency = get_parallel_count(avg_size)

        logger.info(
            f"Uploading batch of {len(tasks)} file(s) "
            f"({admission.dropped} dropped, {len(admission.rejected)} rejected, "
            f"max {concurrency} parallel)"
        )
        results = await run_bounded(tasks, self._run_task, concurrency)

        outcomes = [
            (task.placeholder, result.entry if result.success else None)
            for task, result in zip(tasks, results)
        ]
        discard_removed = self._config.discard_removed_uploads
        present = {e.id for e in self._entries if isinstance(e, Placeholder)}
        added = tuple(
            entry for placeholder, entry in outcomes
            if entry is not None and (not discard_removed or placeholder.id in present)
        )
        await self.dispatch(settle_batch, outcomes, discard_removed=discard_removed)

        failed = sum(1 for r in results if not r.success)
        message = failure_message(failed) if failed else None
        if failed:
            logger.warning(message)
            await self._events.emit(BATCH_FAILED, failed, message)

        result = BatchResult(
            admitted=len(tasks),
            added=added,
            failed=failed,
            dropped=admission.dropped,
            rejected=admission.rejected_tuple,
            message=message,
        )
        logger.info(f"Batch settled: {len(added)} added, {failed} failed")
        await self._events.emit(BATCH_SETTLED, result)
        return result

    async def _run_task(self, task: UploadTask) -> UploadResult:
        return await self._pipeline.run(task, annotated=self._annotated)
