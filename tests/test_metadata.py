"""Tests for key-based metadata editing."""
import asyncio
from unittest.mock import AsyncMock

import pytest

from media_uploader.errors import EntryNotFoundError
from media_uploader.models import (
    Annotation,
    CandidateFile,
    MediaResource,
    Placeholder,
    Resolved,
    UploadConfig,
    UploadTarget,
)
from media_uploader.orchestrator.pipeline import UploadPipeline
from media_uploader.orchestrator.reconciler import ListReconciler
from media_uploader.services.resolver import URLResolver


def _resolved(key):
    return Resolved(MediaResource(key, f"https://cdn.test/{key}"), Annotation())


def _field(entries=(), credentials=None, disabled=False):
    if credentials is None:
        credentials = AsyncMock()
        credentials.request_upload_target.side_effect = lambda name, ctype, date: UploadTarget(
            upload_url=f"https://bucket.test/{name}", storage_key=f"images/{date}/{name}"
        )
    pipeline = UploadPipeline(
        None,
        credentials,
        AsyncMock(),
        URLResolver("cdn.test"),
        UploadConfig(compress=False, annotated=True),
        date_partition=lambda: "2024-05-01",
    )
    return ListReconciler(pipeline, UploadConfig(compress=False, annotated=True), entries=entries, disabled=disabled)


@pytest.mark.asyncio
async def test_update_title_keeps_image():
    field = _field(entries=(_resolved("k1"), _resolved("k2")))

    updated = await field.metadata.update("k2", title="Breakout")

    assert updated.annotation == Annotation(title="Breakout", analysis="")
    assert field.entries[1].image == MediaResource("k2", "https://cdn.test/k2")
    assert field.entries[0].annotation == Annotation()
    assert field.metadata.get("k2").title == "Breakout"


@pytest.mark.asyncio
async def test_update_merges_with_existing_fields():
    field = _field(entries=(_resolved("k1"),))

    await field.metadata.update("k1", title="Breakout")
    await field.metadata.update("k1", analysis="Volume confirms")

    assert field.metadata.get("k1") == Annotation(title="Breakout", analysis="Volume confirms")


@pytest.mark.asyncio
async def test_edit_during_batch_survives_settlement():
    gate = asyncio.Event()
    credentials = AsyncMock()

    async def issue(name, ctype, date):
        await gate.wait()
        return UploadTarget(upload_url=f"https://bucket.test/{name}", storage_key=f"images/{date}/{name}")

    credentials.request_upload_target.side_effect = issue
    field = _field(entries=(_resolved("k1"), _resolved("k2")), credentials=credentials)

    batch = asyncio.create_task(
        field.submit([CandidateFile("new.png", "image/png", b"data")])
    )
    while not any(isinstance(e, Placeholder) for e in field.entries):
        await asyncio.sleep(0)

    await field.metadata.update("k2", title="Edited mid-flight")
    gate.set()
    await batch

    assert [e.key for e in field.entries] == ["k1", "k2", "images/2024-05-01/new.png"]
    assert field.metadata.get("k2").title == "Edited mid-flight"


@pytest.mark.asyncio
async def test_update_unknown_key_raises():
    field = _field(entries=(_resolved("k1"),))
    with pytest.raises(EntryNotFoundError):
        await field.metadata.update("missing", title="x")
    assert field.entries == (_resolved("k1"),)


@pytest.mark.asyncio
async def test_placeholder_cannot_be_annotated():
    placeholder = Placeholder("p1")
    field = _field(entries=(placeholder,))
    with pytest.raises(EntryNotFoundError):
        await field.metadata.update(placeholder.key, title="x")
    with pytest.raises(EntryNotFoundError):
        field.metadata.get(placeholder.key)


@pytest.mark.asyncio
async def test_disabled_field_ignores_edits():
    field = _field(entries=(_resolved("k1"),), disabled=True)
    assert await field.metadata.update("k1", title="x") is None
    assert field.metadata.get("k1") == Annotation()
