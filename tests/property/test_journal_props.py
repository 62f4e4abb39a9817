# -*- coding: utf-8 -*-
"""
Property tests for the write journal's checkpoint laws.

    begin → writes → revert_to   ⇒ visible state equals the baseline
    begin → writes → commit_to   ⇒ baseline ∪ writes (last write wins)
    nested: outer A, inner B, revert inner, commit outer ⇒ baseline ∪ A
    nested: outer A, inner B, commit both                ⇒ baseline ∪ A ∪ B

Values are non-empty: an empty value means "delete" in contract storage.
"""
from __future__ import annotations

from typing import Dict

from hypothesis import given, settings, strategies as st

from execution.state import Journal, StorageView

ADDR = b"\x11" * 32

HKEY = st.binary(min_size=1, max_size=32)
HVAL = st.binary(min_size=1, max_size=64)
MAP_SMALL = st.dictionaries(keys=HKEY, values=HVAL, min_size=0, max_size=16)


def _merge_last_wins(*maps: Dict[bytes, bytes]) -> Dict[bytes, bytes]:
    out: Dict[bytes, bytes] = {}
    for m in maps:
        out.update(m)
    return out


def _journal_with(baseline: Dict[bytes, bytes]) -> tuple[Journal, StorageView]:
    storage = StorageView()
    storage.import_account(ADDR, baseline)
    return Journal({}, storage), storage


def _write(j: Journal, changes: Dict[bytes, bytes]) -> None:
    for k, v in changes.items():
        j.storage_set(ADDR, k, v)


@given(MAP_SMALL, MAP_SMALL)
@settings(max_examples=120)
def test_revert_restores_baseline(baseline: Dict[bytes, bytes], changes: Dict[bytes, bytes]):
    j, storage = _journal_with(baseline)
    marker = j.begin()
    _write(j, changes)
    j.revert_to(marker)

    assert dict(j.storage_items(ADDR)) == baseline
    j.flush()
    assert storage.export_account(ADDR) == baseline


@given(MAP_SMALL, MAP_SMALL)
@settings(max_examples=120)
def test_commit_accumulates_changes(baseline: Dict[bytes, bytes], changes: Dict[bytes, bytes]):
    j, storage = _journal_with(baseline)
    marker = j.begin()
    _write(j, changes)
    j.commit_to(marker)
    j.flush()

    assert storage.export_account(ADDR) == _merge_last_wins(baseline, changes)


@given(MAP_SMALL, MAP_SMALL, MAP_SMALL)
@settings(max_examples=100)
def test_inner_revert_keeps_outer_writes(
    baseline: Dict[bytes, bytes],
    outer: Dict[bytes, bytes],
    inner: Dict[bytes, bytes],
):
    j, storage = _journal_with(baseline)
    m1 = j.begin()
    _write(j, outer)
    m2 = j.begin()
    _write(j, inner)

    j.revert_to(m2)
    assert dict(j.storage_items(ADDR)) == _merge_last_wins(baseline, outer)
    j.commit_to(m1)
    j.flush()

    assert storage.export_account(ADDR) == _merge_last_wins(baseline, outer)


@given(MAP_SMALL, MAP_SMALL, MAP_SMALL)
@settings(max_examples=100)
def test_nested_commits_are_last_write_wins(
    baseline: Dict[bytes, bytes],
    outer: Dict[bytes, bytes],
    inner: Dict[bytes, bytes],
):
    j, storage = _journal_with(baseline)
    m1 = j.begin()
    _write(j, outer)
    m2 = j.begin()
    _write(j, inner)

    j.commit_to(m2)
    j.commit_to(m1)
    j.flush()

    assert storage.export_account(ADDR) == _merge_last_wins(baseline, outer, inner)
    assert j.depth() == 1


@given(MAP_SMALL, st.integers(min_value=1, max_value=5))
@settings(max_examples=60)
def test_outer_revert_discards_committed_inner_layers(baseline: Dict[bytes, bytes], depth: int):
    j, storage = _journal_with(baseline)
    m1 = j.begin()
    for i in range(depth):
        j.begin()
        j.storage_set(ADDR, b"layer", bytes([i + 1]))
    j.commit_to(m1 + 1)
    j.revert_to(m1)
    j.flush()

    assert storage.export_account(ADDR) == baseline
