"""Virtual folders and folder listings.

A virtual folder is a folder the user created that has no note in it yet.
It only exists in the ledger; as soon as a note is saved anywhere under it
the folder is real and the ledger entry goes away.
"""

from __future__ import annotations

import bisect
import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from .errors import SlipboxError
from .note_id import folder_prefixes, is_valid_note_id, join_note_id, to_slug

log = logging.getLogger(__name__)


class VirtualFolderLedger:
    """Sorted set of folder paths with no backing note."""

    def __init__(self, paths: Iterable[str] = ()) -> None:
        self._paths: list[str] = sorted(set(paths))

    def declare(self, path: str) -> bool:
        """Add a folder path. Returns False if it was already declared."""
        index = bisect.bisect_left(self._paths, path)
        if index < len(self._paths) and self._paths[index] == path:
            return False
        self._paths.insert(index, path)
        return True

    def remove(self, path: str) -> bool:
        index = bisect.bisect_left(self._paths, path)
        if index < len(self._paths) and self._paths[index] == path:
            del self._paths[index]
            return True
        return False

    def reconcile(self, saved_note_id: str) -> list[str]:
        """Drop every ancestor folder of a note that now exists.

        Returns the paths that were removed.
        """
        removed = [path for path in folder_prefixes(saved_note_id) if self.remove(path)]
        if removed:
            log.debug("Folders now backed by %s: %s", saved_note_id, ", ".join(removed))
        return removed

    @property
    def paths(self) -> list[str]:
        return list(self._paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._paths))

    def __len__(self) -> int:
        return len(self._paths)

    def __repr__(self) -> str:
        return f"VirtualFolderLedger({self._paths!r})"


def load_ledger(path: Path) -> VirtualFolderLedger:
    """Load a ledger saved by save_ledger. Missing or unreadable files give an empty ledger."""
    if not path.exists():
        return VirtualFolderLedger()

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        log.warning("Ignoring unreadable folder ledger %s: %s", path, e)
        return VirtualFolderLedger()

    folders = payload.get("folders", []) if isinstance(payload, dict) else []
    return VirtualFolderLedger(p for p in folders if isinstance(p, str) and is_valid_note_id(p))


def save_ledger(ledger: VirtualFolderLedger, path: Path) -> None:
    path.write_text(json.dumps({"folders": ledger.paths}, indent=2), encoding="utf-8")


def folder_path_from_input(text: str, current_folder: str | None = None) -> str:
    """Turn user input into a folder path inside current_folder.

    Raises:
        SlipboxError: If the input slugifies to nothing or to an invalid path.
    """
    slug = to_slug(text)
    if not slug:
        raise SlipboxError.invalid_identifier(text.strip(), kind="folder")

    folder_path = join_note_id(current_folder or "", slug)
    if not is_valid_note_id(folder_path):
        raise SlipboxError.invalid_identifier(folder_path, kind="folder")
    return folder_path


def is_direct_child_note(note_id: str, folder: str) -> bool:
    """Whether note_id sits directly in folder ("" is the root)."""
    if not folder:
        return "/" not in note_id
    if not note_id.startswith(folder + "/"):
        return False
    return "/" not in note_id[len(folder) + 1 :]


def _child_name(path: str, folder: str, *, include_leaf: bool) -> str | None:
    if folder:
        if not path.startswith(folder + "/"):
            return None
        rest = path[len(folder) + 1 :]
    else:
        rest = path
    if "/" in rest:
        return rest.split("/", 1)[0]
    return rest if include_leaf and rest else None


def child_folder_names(
    note_ids: Iterable[str],
    virtual_folders: Iterable[str],
    folder: str,
) -> list[str]:
    """Immediate subfolder names under folder, from notes and virtual folders."""
    names: set[str] = set()
    for note_id in note_ids:
        name = _child_name(note_id, folder, include_leaf=False)
        if name:
            names.add(name)
    for path in virtual_folders:
        # A virtual folder is itself a folder, so its last segment counts
        name = _child_name(path, folder, include_leaf=True)
        if name:
            names.add(name)
    return sorted(names)


def all_folder_paths(note_ids: Iterable[str], virtual_folders: Iterable[str]) -> list[str]:
    """Every folder that can be a move target, sorted. Root ("") is implied."""
    paths: set[str] = set(virtual_folders)
    for note_id in note_ids:
        paths.update(folder_prefixes(note_id))
    return sorted(paths)
