"""Tests for redraft-store implementations."""

from __future__ import annotations

import os

from redraft_store.local import LocalDraftStore
from redraft_store.noop import NoOpStore

DOC = "commit 1111\ndiff --git a/a b/a\n@@ -1 +1 @@\n-x\n+y\nwhy y?\n"


# ---------------------------------------------------------------------------
# NoOpStore
# ---------------------------------------------------------------------------


class TestNoOpStore:
    def test_save_does_not_raise(self):
        record = NoOpStore().save(1, DOC)
        assert record.pr_number == 1
        assert record.path == ""

    def test_load_returns_none(self):
        store = NoOpStore()
        store.save(1, DOC)
        assert store.load(1) is None

    def test_list_drafts_returns_empty(self):
        assert NoOpStore().list_drafts() == []

    def test_delete_and_close_do_not_raise(self):
        store = NoOpStore()
        store.delete(1)
        store.close()


# ---------------------------------------------------------------------------
# LocalDraftStore
# ---------------------------------------------------------------------------


class TestLocalDraftStore:
    def test_save_then_load(self, tmp_path):
        store = LocalDraftStore(str(tmp_path))
        record = store.save(42, DOC)

        assert record.pr_number == 42
        assert record.path == str(tmp_path / "42.redraft")
        assert record.size == len(DOC.encode())
        assert store.load(42) == DOC

    def test_save_overwrites(self, tmp_path):
        store = LocalDraftStore(str(tmp_path))
        store.save(42, "first")
        store.save(42, "second")
        assert store.load(42) == "second"
        assert len(store.list_drafts()) == 1

    def test_save_creates_directory(self, tmp_path):
        store = LocalDraftStore(str(tmp_path / "nested" / "drafts"))
        store.save(1, DOC)
        assert (tmp_path / "nested" / "drafts" / "1.redraft").exists()

    def test_load_missing_returns_none(self, tmp_path):
        assert LocalDraftStore(str(tmp_path)).load(99) is None

    def test_list_drafts_oldest_first(self, tmp_path):
        store = LocalDraftStore(str(tmp_path))
        store.save(2, DOC)
        store.save(1, DOC)
        os.utime(tmp_path / "2.redraft", (1_000_000, 1_000_000))
        os.utime(tmp_path / "1.redraft", (2_000_000, 2_000_000))

        assert [r.pr_number for r in store.list_drafts()] == [2, 1]

    def test_list_drafts_ignores_other_files(self, tmp_path):
        (tmp_path / "notes.redraft").write_text("x")
        (tmp_path / "12.redraft.bak").write_text("x")
        (tmp_path / "README.md").write_text("x")
        store = LocalDraftStore(str(tmp_path))
        store.save(3, DOC)

        assert [r.pr_number for r in store.list_drafts()] == [3]

    def test_list_drafts_missing_directory(self, tmp_path):
        assert LocalDraftStore(str(tmp_path / "absent")).list_drafts() == []

    def test_delete(self, tmp_path):
        store = LocalDraftStore(str(tmp_path))
        store.save(5, DOC)
        store.delete(5)
        assert store.load(5) is None

    def test_delete_missing_is_not_an_error(self, tmp_path):
        LocalDraftStore(str(tmp_path)).delete(5)
