"""Tests for pure list transitions."""
import pytest

from media_uploader.errors import EntryNotFoundError
from media_uploader.models import Annotation, MediaResource, Placeholder, Resolved
from media_uploader.orchestrator.reducer import (
    append_placeholders,
    placeholder_count,
    remove_entry,
    settle_batch,
    update_annotation,
)


def _resolved(key, annotated=False):
    return Resolved(MediaResource(key, f"https://cdn.test/{key}"), Annotation() if annotated else None)


def test_append_placeholders_keeps_existing():
    existing = (_resolved("k1"),)
    placeholders = [Placeholder("p1"), Placeholder("p2")]
    assert append_placeholders(existing, placeholders) == (existing[0], placeholders[0], placeholders[1])


def test_settle_replaces_only_this_batch():
    other_batch = Placeholder("other")
    p1, p2 = Placeholder("p1"), Placeholder("p2")
    entries = (_resolved("k0"), p1, other_batch, p2)

    settled = settle_batch(entries, [(p1, _resolved("k1")), (p2, None)])

    assert settled == (_resolved("k0"), other_batch, _resolved("k1"))


def test_settle_appends_in_submission_order():
    ps = [Placeholder(f"p{i}") for i in range(3)]
    outcomes = [(ps[0], _resolved("a")), (ps[1], _resolved("b")), (ps[2], _resolved("c"))]
    settled = settle_batch(tuple(ps), outcomes)
    assert [e.key for e in settled] == ["a", "b", "c"]


def test_settle_keeps_success_of_removed_placeholder_by_default():
    p1, p2 = Placeholder("p1"), Placeholder("p2")
    entries = (p2,)  # p1 removed by the user mid-flight
    settled = settle_batch(entries, [(p1, _resolved("k1")), (p2, _resolved("k2"))])
    assert [e.key for e in settled] == ["k1", "k2"]


def test_settle_discards_success_of_removed_placeholder():
    p1, p2 = Placeholder("p1"), Placeholder("p2")
    entries = (p2,)
    settled = settle_batch(
        entries,
        [(p1, _resolved("k1")), (p2, _resolved("k2"))],
        discard_removed=True,
    )
    assert [e.key for e in settled] == ["k2"]


def test_remove_by_key_and_placeholder_id():
    entries = (_resolved("k1"), Placeholder("p1"), _resolved("k2"))
    assert remove_entry(entries, "k1") == (Placeholder("p1"), _resolved("k2"))
    assert remove_entry(entries, "p1") == (_resolved("k1"), _resolved("k2"))
    assert remove_entry(entries, "missing") == entries


def test_update_annotation_merges_fields():
    entries = (_resolved("k1", annotated=True),)
    entries = update_annotation(entries, "k1", title="Breakout")
    entries = update_annotation(entries, "k1", analysis="Volume confirms")
    assert entries[0].annotation == Annotation(title="Breakout", analysis="Volume confirms")
    assert entries[0].image == MediaResource("k1", "https://cdn.test/k1")
    assert entries[0].url == "https://cdn.test/k1"


def test_update_annotation_on_plain_entry_creates_annotation():
    entries = update_annotation((_resolved("k1"),), "k1", title="t")
    assert entries[0].annotation == Annotation(title="t", analysis="")


def test_update_annotation_unknown_key():
    with pytest.raises(EntryNotFoundError):
        update_annotation((Placeholder("p1"),), "p1", title="t")


def test_placeholder_count():
    assert placeholder_count((_resolved("k1"), Placeholder("p1"), Placeholder("p2"))) == 2
