"""Tests for the virtual folder ledger and folder listings."""

import json

import pytest

from slipbox.errors import ErrorCode, SlipboxError
from slipbox.folders import (
    VirtualFolderLedger,
    all_folder_paths,
    child_folder_names,
    folder_path_from_input,
    is_direct_child_note,
    load_ledger,
    save_ledger,
)


# ─────────────────────────────────────────────────────────────────────────────
# Ledger
# ─────────────────────────────────────────────────────────────────────────────


class TestVirtualFolderLedger:
    def test_declare_keeps_sorted(self):
        ledger = VirtualFolderLedger()
        for path in ["travel", "archive", "projects/q3", "projects"]:
            ledger.declare(path)
        assert ledger.paths == ["archive", "projects", "projects/q3", "travel"]

    def test_declare_twice(self):
        ledger = VirtualFolderLedger()
        assert ledger.declare("a") is True
        assert ledger.declare("a") is False
        assert len(ledger) == 1

    def test_code_point_order(self):
        ledger = VirtualFolderLedger(["a-b", "a/b", "a0"])
        assert ledger.paths == ["a-b", "a/b", "a0"]

    def test_reconcile_removes_ancestors(self):
        ledger = VirtualFolderLedger(["projects", "projects/q3", "projects/q4", "travel"])
        removed = ledger.reconcile("projects/q3/plan")
        assert removed == ["projects", "projects/q3"]
        assert ledger.paths == ["projects/q4", "travel"]

    def test_reconcile_is_idempotent(self):
        ledger = VirtualFolderLedger(["a", "b"])
        ledger.reconcile("a/note")
        ledger.reconcile("a/note")
        assert ledger.paths == ["b"]

    def test_reconcile_root_note(self):
        ledger = VirtualFolderLedger(["a"])
        assert ledger.reconcile("note") == []
        assert "a" in ledger

    def test_remove(self):
        ledger = VirtualFolderLedger(["a"])
        assert ledger.remove("a") is True
        assert ledger.remove("a") is False

    def test_iteration_is_a_snapshot(self):
        ledger = VirtualFolderLedger(["a", "b"])
        for path in ledger:
            ledger.remove(path)
        assert len(ledger) == 0


class TestLedgerPersistence:
    def test_save_and_load(self, tmp_path):
        path = tmp_path / "folders.json"
        save_ledger(VirtualFolderLedger(["b", "a"]), path)
        assert json.loads(path.read_text()) == {"folders": ["a", "b"]}
        assert load_ledger(path).paths == ["a", "b"]

    def test_missing_file(self, tmp_path):
        assert len(load_ledger(tmp_path / "nope.json")) == 0

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "folders.json"
        path.write_text("{not json")
        assert len(load_ledger(path)) == 0

    def test_invalid_entries_dropped(self, tmp_path):
        path = tmp_path / "folders.json"
        path.write_text(json.dumps({"folders": ["ok", "Not OK", 3, "a//b"]}))
        assert load_ledger(path).paths == ["ok"]


# ─────────────────────────────────────────────────────────────────────────────
# Folder input and listings
# ─────────────────────────────────────────────────────────────────────────────


class TestFolderPathFromInput:
    def test_at_root(self):
        assert folder_path_from_input("Road Trips") == "road-trips"

    def test_inside_current_folder(self):
        assert folder_path_from_input("Summer 2024", "travel") == "travel/summer-2024"

    def test_nested_input(self):
        assert folder_path_from_input("a / b", "x") == "x/a/b"

    @pytest.mark.parametrize("text", ["", "   ", "///", "???"])
    def test_empty_rejected(self, text):
        with pytest.raises(SlipboxError) as exc_info:
            folder_path_from_input(text)
        assert exc_info.value.code == ErrorCode.INVALID_IDENTIFIER
        assert "folder" in exc_info.value.message

    def test_invalid_current_folder_rejected(self):
        with pytest.raises(SlipboxError):
            folder_path_from_input("ok", "Bad Parent")


class TestListings:
    NOTE_IDS = ["readme", "travel/road-trip", "travel/summer/beach", "work/q3/plan"]

    def test_is_direct_child_note(self):
        assert is_direct_child_note("readme", "")
        assert not is_direct_child_note("travel/road-trip", "")
        assert is_direct_child_note("travel/road-trip", "travel")
        assert not is_direct_child_note("travel/summer/beach", "travel")
        assert not is_direct_child_note("travelling/x", "travel")

    def test_child_folders_at_root(self):
        assert child_folder_names(self.NOTE_IDS, ["archive"], "") == ["archive", "travel", "work"]

    def test_child_folders_nested(self):
        names = child_folder_names(self.NOTE_IDS, ["travel/winter", "travel/summer/x"], "travel")
        assert names == ["summer", "winter"]

    def test_child_folders_of_prefix_lookalike(self):
        assert child_folder_names(["travelling/a/b"], [], "travel") == []

    def test_all_folder_paths(self):
        paths = all_folder_paths(self.NOTE_IDS, ["archive"])
        assert paths == ["archive", "travel", "travel/summer", "work", "work/q3"]
