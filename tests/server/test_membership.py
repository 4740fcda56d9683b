"""Unit tests for ordered-set file membership helpers."""

from __future__ import annotations

from chatspace.server.managers.workspace_files import merge_file_ids, remove_file_ids


def test_merge_appends_new_ids_in_request_order() -> None:
    assert merge_file_ids(["a", "b"], ["d", "c"]) == ["a", "b", "d", "c"]


def test_merge_skips_existing_and_repeated_ids() -> None:
    assert merge_file_ids(["a", "b"], ["b", "c", "c", "a"]) == ["a", "b", "c"]


def test_merge_is_idempotent() -> None:
    once = merge_file_ids([], ["x", "y"])
    assert merge_file_ids(once, ["x", "y"]) == once


def test_merge_does_not_mutate_input() -> None:
    existing = ["a"]
    merge_file_ids(existing, ["b"])
    assert existing == ["a"]


def test_remove_keeps_remaining_order() -> None:
    assert remove_file_ids(["a", "b", "c", "d"], ["c", "a"]) == ["b", "d"]


def test_remove_absent_ids_is_noop() -> None:
    assert remove_file_ids(["a", "b"], ["zzz"]) == ["a", "b"]
    assert remove_file_ids([], ["a"]) == []
