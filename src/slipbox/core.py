"""Rename and move engines.

Both engines read one snapshot of the file set (storage key -> content) and
return a single WriteBatch that keeps every wikilink pointing at a note that
exists once the batch is applied. They never write anything themselves;
handing the batch to a NoteStore, and reconciling the folder ledger once
the store has accepted it, is the caller's job.

Design principles:
- Rename is all-or-nothing: any problem returns a failed result and no batch
- Move is best effort per item: unmovable notes are skipped, the rest move
"""

from __future__ import annotations

import logging

from .models import MoveResult, RenameResult, WriteBatch
from .note_id import basename, is_valid_note_id, join_note_id, note_path
from .parser.links import update_wikilinks

log = logging.getLogger(__name__)


def rename_note(
    old_id: str,
    new_id: str,
    content: str,
    files: dict[str, str],
) -> RenameResult:
    """Rename a note and update every link to it.

    Args:
        old_id: Current note id.
        new_id: Requested note id.
        content: Content to store under the new id (usually the note's
            current content, possibly edited).
        files: Snapshot of storage key -> content.

    Returns:
        RenameResult. On success `batch` holds the rewritten notes, the
        renamed note under its new key and a tombstone for the old key.
    """
    if not old_id or not new_id or old_id == new_id:
        return RenameResult.failed("no-op", old_id, new_id)

    if not is_valid_note_id(new_id):
        return RenameResult.failed("invalid", old_id, new_id)

    old_path = note_path(old_id)
    new_path = note_path(new_id)

    # Prevent overwriting an existing file
    if new_path != old_path and new_path in files:
        return RenameResult.failed("duplicate", old_id, new_id)

    updated: dict[str, str | None] = {}

    for path, file_content in files.items():
        if path == old_path:
            continue
        new_content = update_wikilinks(file_content, old_id, new_id)
        if new_content is not file_content:
            updated[path] = new_content

    updated[new_path] = update_wikilinks(content, old_id, new_id)
    if old_path in files:
        updated[old_path] = None

    log.debug(
        "Rename %s -> %s touches %d file(s)", old_id, new_id, len(updated)
    )

    batch = WriteBatch(files=updated, commit_message=f"Rename note {old_id} to {new_id}")

    return RenameResult(success=True, old_id=old_id, new_id=new_id, batch=batch)


def move_notes(
    note_ids: list[str],
    target_folder: str,
    files: dict[str, str],
) -> MoveResult:
    """Move notes into target_folder, keeping their basename.

    "a/b" moved to "folder" becomes "folder/b"; target_folder "" is the root.
    Notes that cannot move (missing, invalid destination, destination taken)
    are reported in `skipped`; notes already in place are silently left alone.

    Args:
        note_ids: Notes to move, processed in this order.
        target_folder: Destination folder path, "" for root.
        files: Snapshot of storage key -> content.

    Returns:
        MoveResult with the number moved, their new ids, the skipped ids and
        the batch
        (None when nothing moves).
    """
    queued: list[tuple[str, str, str]] = []  # (old_id, new_id, content)
    claimed: set[str] = set()
    skipped: list[str] = []

    for old_id in note_ids:
        old_path = note_path(old_id)
        content = files.get(old_path)
        if content is None:
            log.debug("Skipping %s: no such note", old_id)
            skipped.append(old_id)
            continue

        new_id = join_note_id(target_folder, basename(old_id))
        if new_id == old_id:
            continue

        if not is_valid_note_id(new_id):
            log.debug("Skipping %s: %r is not a valid id", old_id, new_id)
            skipped.append(old_id)
            continue

        new_path = note_path(new_id)
        if new_path in files or new_path in claimed:
            log.debug("Skipping %s: %s already exists", old_id, new_id)
            skipped.append(old_id)
            continue

        claimed.add(new_path)
        queued.append((old_id, new_id, content))

    if not queued:
        return MoveResult(success=True, moved=0, skipped=skipped, target_folder=target_folder)

    def rewrite(text: str) -> str:
        for old_id, new_id, _ in queued:
            text = update_wikilinks(text, old_id, new_id)
        return text

    updated: dict[str, str | None] = {}

    for path, file_content in files.items():
        new_content = rewrite(file_content)
        if new_content is not file_content:
            updated[path] = new_content

    for old_id, new_id, content in queued:
        updated[note_path(new_id)] = rewrite(content)
        updated[note_path(old_id)] = None

    log.debug(
        "Move of %d note(s) to %s touches %d file(s)",
        len(queued),
        target_folder or "root",
        len(updated),
    )

    batch = WriteBatch(
        files=updated,
        commit_message=f"Move {len(queued)} note(s) to {target_folder or 'root'}",
    )

    return MoveResult(
        success=True,
        moved=len(queued),
        moved_ids=[new_id for _, new_id, _ in queued],
        skipped=skipped,
        target_folder=target_folder,
        batch=batch,
    )
