"""Per-file upload pipeline: compress -> credential -> transfer -> resolve."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from urllib.parse import quote

from ..models import Annotation, MediaResource, Resolved, UploadConfig, UploadResult
from ..protocols import ICompressor, ICredentialClient, ITransferClient, IURLResolver
from ..utils.events import TASK_STATE, EventEmitter
from .models import TaskState, UploadTask

logger = logging.getLogger(__name__)

# encodeURIComponent leaves these unescaped
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_file_name(name: str) -> str:
    return quote(name, safe=_URI_COMPONENT_SAFE)


def utc_date_partition() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def _describe_exception(exc: Exception) -> str:
    message = str(exc).strip()
    if message:
        return message
    return f"{type(exc).__name__}: {repr(exc)}"


class UploadPipeline:
    """
    Runs one UploadTask through every stage.

    ``run`` never raises: failures become a failed UploadResult so sibling
    tasks in the same batch are unaffected.
    """

    def __init__(
        self,
        compressor: Optional[ICompressor],
        credentials: ICredentialClient,
        transfer: ITransferClient,
        resolver: IURLResolver,
        config: Optional[UploadConfig] = None,
        events: Optional[EventEmitter] = None,
        date_partition: Callable[[], str] = utc_date_partition,
    ):
        self._compressor = compressor
        self._credentials = credentials
        self._transfer = transfer
        self._resolver = resolver
        self._config = config or UploadConfig()
        self._events = events or EventEmitter()
        self._date_partition = date_partition

    async def _advance(self, task: UploadTask, state: TaskState) -> None:
        task.state = state
        logger.debug("Task %d (%s) -> %s", task.index, task.filename, state.value)
        await self._events.emit(TASK_STATE, task)

    async def run(self, task: UploadTask, annotated: Optional[bool] = None) -> UploadResult:
        annotated = self._config.annotated if annotated is None else annotated
        source = task.source

        try:
            payload = source
            if self._compressor is not None and self._config.compress:
                await self._advance(task, TaskState.COMPRESSING)
                payload = await self._compressor.compress(source)
            task.payload = payload

            await self._advance(task, TaskState.REQUESTING_CREDENTIAL)
            task.target = await self._credentials.request_upload_target(
                encode_file_name(source.name),
                source.content_type,
                self._date_partition(),
            )

            await self._advance(task, TaskState.TRANSFERRING)
            await self._transfer.put(task.target.upload_url, payload.data, payload.content_type)

            await self._advance(task, TaskState.RESOLVING)
            key = task.target.storage_key
            entry = Resolved(
                image=MediaResource(key=key, url=self._resolver.resolve(key)),
                annotation=Annotation() if annotated else None,
            )
        except Exception as exc:
            error_msg = _describe_exception(exc)
            logger.error(
                "Upload failed for %s (state=%s): %s",
                source.name,
                task.state.value,
                error_msg,
            )
            task.result = UploadResult.fail(source.name, error_msg)
            await self._advance(task, TaskState.FAILED)
            return task.result

        logger.info("Uploaded %s -> %s", source.name, entry.url)
        task.result = UploadResult.ok(source.name, entry)
        await self._advance(task, TaskState.SUCCEEDED)
        return task.result
