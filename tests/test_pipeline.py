"""Tests for the per-file upload pipeline."""
from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

from media_uploader.errors import CredentialError, TransferError
from media_uploader.models import Annotation, CandidateFile, Placeholder, UploadConfig, UploadTarget
from media_uploader.orchestrator.models import TaskState, UploadTask
from media_uploader.orchestrator.pipeline import UploadPipeline, encode_file_name
from media_uploader.services.resolver import URLResolver
from media_uploader.utils.events import TASK_STATE, EventEmitter


def _task(name="chart.png", data=b"original-bytes"):
    return UploadTask(
        index=0,
        source=CandidateFile(name, "image/png", data),
        placeholder=Placeholder.new(),
    )


def _build_pipeline(config: UploadConfig):
    compressor = AsyncMock()
    compressor.compress.side_effect = lambda f: replace(f, data=b"small")
    credentials = AsyncMock()
    credentials.request_upload_target.return_value = UploadTarget(
        upload_url="https://bucket.test/put?sig=1",
        storage_key="images/2024-05-01/chart.png",
    )
    transfer = AsyncMock()
    events = EventEmitter()
    pipeline = UploadPipeline(
        compressor,
        credentials,
        transfer,
        URLResolver("cdn.test"),
        config,
        events,
        date_partition=lambda: "2024-05-01",
    )
    return pipeline, compressor, credentials, transfer, events


def test_encode_file_name_matches_uri_component_rules():
    assert encode_file_name("my chart (1).png") == "my%20chart%20(1).png"
    assert encode_file_name("a/b?c.png") == "a%2Fb%3Fc.png"
    assert encode_file_name("图表.png") == "%E5%9B%BE%E8%A1%A8.png"


@pytest.mark.asyncio
async def test_success_walks_every_state():
    pipeline, compressor, credentials, transfer, events = _build_pipeline(UploadConfig())
    states = []
    events.on(TASK_STATE, lambda task: states.append(task.state))

    task = _task()
    result = await pipeline.run(task)

    assert result.success is True
    assert result.entry.key == "images/2024-05-01/chart.png"
    assert result.entry.url == "https://cdn.test/images/2024-05-01/chart.png"
    assert result.entry.annotation is None
    assert states == [
        TaskState.COMPRESSING,
        TaskState.REQUESTING_CREDENTIAL,
        TaskState.TRANSFERRING,
        TaskState.RESOLVING,
        TaskState.SUCCEEDED,
    ]
    assert task.state is TaskState.SUCCEEDED
    assert task.target.storage_key == "images/2024-05-01/chart.png"


@pytest.mark.asyncio
async def test_compressed_bytes_are_transferred():
    pipeline, compressor, credentials, transfer, _ = _build_pipeline(UploadConfig())

    await pipeline.run(_task(name="my chart.png"))

    credentials.request_upload_target.assert_awaited_once_with(
        "my%20chart.png", "image/png", "2024-05-01"
    )
    transfer.put.assert_awaited_once_with("https://bucket.test/put?sig=1", b"small", "image/png")


@pytest.mark.asyncio
async def test_compression_disabled_skips_stage():
    pipeline, compressor, credentials, transfer, events = _build_pipeline(UploadConfig(compress=False))
    states = []
    events.on(TASK_STATE, lambda task: states.append(task.state))

    await pipeline.run(_task())

    compressor.compress.assert_not_awaited()
    transfer.put.assert_awaited_once_with("https://bucket.test/put?sig=1", b"original-bytes", "image/png")
    assert TaskState.COMPRESSING not in states


@pytest.mark.asyncio
async def test_annotated_entries_get_empty_annotation():
    pipeline, *_ = _build_pipeline(UploadConfig(annotated=True))
    result = await pipeline.run(_task())
    assert result.entry.annotation == Annotation(title="", analysis="")


@pytest.mark.asyncio
async def test_credential_failure_is_captured():
    pipeline, _, credentials, transfer, _ = _build_pipeline(UploadConfig())
    credentials.request_upload_target.side_effect = CredentialError("quota exceeded")

    task = _task()
    result = await pipeline.run(task)

    assert result.success is False
    assert result.error == "quota exceeded"
    assert task.state is TaskState.FAILED
    transfer.put.assert_not_awaited()


@pytest.mark.asyncio
async def test_transfer_failure_is_captured():
    pipeline, _, _, transfer, _ = _build_pipeline(UploadConfig())
    transfer.put.side_effect = TransferError("Upload to storage failed with status 403: denied")

    result = await pipeline.run(_task())

    assert result.success is False
    assert "403" in result.error


@pytest.mark.asyncio
async def test_exception_without_message_is_described():
    pipeline, _, credentials, _, _ = _build_pipeline(UploadConfig())
    credentials.request_upload_target.side_effect = RuntimeError()

    result = await pipeline.run(_task())

    assert result.error.startswith("RuntimeError")
