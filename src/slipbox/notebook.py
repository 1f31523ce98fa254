"""Notebook: the engines wired to a store, a folder ledger and a mirror.

The engines in core.py only compute batches. This module reads snapshots
from a NoteStore, submits the batches, keeps the virtual folder ledger in
step and fires the optional gist mirror afterwards. Publishing is the one
write that talks to the mirror first, since the new gist id goes into the
note.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from .config import NOTE_ID_MAX_ATTEMPTS, ConfigurationError
from .core import move_notes, rename_note
from .errors import SlipboxError
from .folders import (
    VirtualFolderLedger,
    all_folder_paths,
    child_folder_names,
    folder_path_from_input,
    is_direct_child_note,
)
from .frontmatter import build_frontmatter, update_frontmatter_value
from .mirror import GistMirror, MirrorError
from .models import MoveResult, Note, RenameResult, TagFrequency, WriteBatch
from .note_id import generate_note_id, is_valid_note_id, join_note_id, note_path, to_slug
from .parser import ParseError, parse_note, parse_notes, split_frontmatter
from .search import search_notes, tag_frequencies
from .store import NoteStore

log = logging.getLogger(__name__)


class Notebook:
    """High-level note operations over a store."""

    def __init__(
        self,
        store: NoteStore,
        *,
        folders: VirtualFolderLedger | None = None,
        mirror: GistMirror | None = None,
    ) -> None:
        self.store = store
        self.folders = folders if folders is not None else VirtualFolderLedger()
        self.mirror = mirror

    # ─────────────────────────────────────────────────────────────────────
    # Reading
    # ─────────────────────────────────────────────────────────────────────

    def notes(self) -> dict[str, Note]:
        return parse_notes(self.store.files())

    def get(self, note_id: str) -> Note:
        content = self.store.files().get(note_path(note_id))
        if content is None:
            raise SlipboxError.note_not_found(note_id)
        return parse_note(note_id, content)

    def search(self, text: str) -> list[Note]:
        return search_notes(self.notes().values(), text)

    def tag_cloud(self, text: str = "") -> list[TagFrequency]:
        return tag_frequencies(self.search(text))

    def list_folder(self, folder: str = "") -> tuple[list[str], list[Note]]:
        """Subfolder names and notes directly inside folder."""
        notes = self.notes()
        subfolders = child_folder_names(notes, self.folders, folder)
        children = [note for note_id, note in sorted(notes.items()) if is_direct_child_note(note_id, folder)]
        return subfolders, children

    def folder_paths(self) -> list[str]:
        return all_folder_paths(self.notes(), self.folders)

    # ─────────────────────────────────────────────────────────────────────
    # Writing
    # ─────────────────────────────────────────────────────────────────────

    def _submit(self, batch: WriteBatch) -> None:
        if batch.is_empty:
            return
        self.store.write_files(batch.files, batch.commit_message)

    def new_note_id(self, name: str, folder: str | None = None) -> str:
        """Note id for user input, falling back to a random id.

        Raises:
            SlipboxError: If the resulting id is invalid or already taken.
        """
        existing = self.store.files()
        slug = to_slug(name)
        if slug:
            note_id = join_note_id(folder or "", slug)
        else:
            for _ in range(NOTE_ID_MAX_ATTEMPTS):
                note_id = join_note_id(folder or "", generate_note_id())
                if note_path(note_id) not in existing:
                    break

        if not is_valid_note_id(note_id):
            raise SlipboxError.invalid_identifier(note_id)
        if note_path(note_id) in existing:
            raise SlipboxError.duplicate_target(note_id)
        return note_id

    def create_note(self, name: str, *, folder: str | None = None, tags: list[str] | None = None) -> Note:
        """Create a note from free-form input; the input becomes its title.

        The note starts with just its frontmatter block. It is not stamped
        with updated_at until it is first saved.
        """
        title = name.strip()
        note_id = self.new_note_id(title, folder)
        content = build_frontmatter(title or note_id, tags)
        self._submit(WriteBatch(files={note_path(note_id): content}, commit_message=f"Create note {note_id}"))
        self.folders.reconcile(note_id)
        return parse_note(note_id, content)

    def save_note(self, note_id: str, content: str, *, commit_message: str | None = None) -> Note:
        """Write a note, stamping updated_at.

        Raises:
            SlipboxError: If note_id is not a valid id.
        """
        if not is_valid_note_id(note_id):
            raise SlipboxError.invalid_identifier(note_id)

        try:
            content = update_frontmatter_value(content, {"updated_at": datetime.now(UTC)})
        except ParseError as e:
            log.warning("Saving %s without timestamp: %s", note_id, e.message)

        self._submit(
            WriteBatch(
                files={note_path(note_id): content},
                commit_message=commit_message or f"Update note {note_id}",
            )
        )
        self.folders.reconcile(note_id)

        note = parse_note(note_id, content)
        gist_id = note.frontmatter.gist_id
        if gist_id and self.mirror is not None:
            try:
                self.mirror.update(gist_id, note)
            except MirrorError as e:
                log.warning("Could not update gist %s for %s: %s", gist_id, note_id, e.message)
        return note

    def delete_note(self, note_id: str) -> None:
        """Delete a note; its gist goes too when one is mirrored.

        Raises:
            SlipboxError: If the note does not exist.
        """
        note = self.get(note_id)
        self._submit(WriteBatch(files={note_path(note_id): None}, commit_message=f"Delete note {note_id}"))

        gist_id = note.frontmatter.gist_id
        if gist_id and self.mirror is not None:
            try:
                self.mirror.delete(gist_id)
            except MirrorError as e:
                log.warning("Could not delete gist %s for %s: %s", gist_id, note_id, e.message)

    def publish_note(self, note_id: str) -> Note:
        """Mirror a note to a new gist and record its gist_id.

        A note that already has a gist_id is pushed to that gist instead and
        left unchanged.

        Raises:
            ConfigurationError: If no mirror is configured.
            SlipboxError: If the note does not exist or the gist API fails.
            ParseError: If the note's frontmatter cannot be parsed.
        """
        if self.mirror is None:
            raise ConfigurationError("Publishing needs a GitHub token. Set SLIPBOX_GITHUB_TOKEN.")

        note = self.get(note_id)
        gist_id = note.frontmatter.gist_id
        if gist_id:
            self.mirror.update(gist_id, note)
            return note

        # Fail before the gist exists if the id could not be recorded
        split_frontmatter(note.content, source=note_id)
        gist_id = self.mirror.create(note)
        log.info("Published %s as gist %s", note_id, gist_id)

        content = update_frontmatter_value(note.content, {"gist_id": gist_id})
        self._submit(WriteBatch(files={note_path(note_id): content}, commit_message=f"Publish note {note_id}"))
        return parse_note(note_id, content)

    def rename_note(self, old_id: str, new_id: str, content: str | None = None) -> RenameResult:
        """Rename a note, rewriting links everywhere.

        When content is None the note's current content is used. The folder
        ledger is only reconciled once the store has accepted the batch.
        """
        files = self.store.files()
        if content is None:
            content = files.get(note_path(old_id))
            if content is None:
                raise SlipboxError.note_not_found(old_id)

        result = rename_note(old_id, new_id, content, files)
        if result.success and result.batch is not None:
            self._submit(result.batch)
            self.folders.reconcile(new_id)
        return result

    def move_notes(self, note_ids: list[str], target_folder: str) -> MoveResult:
        """Move notes into a folder. Unmovable notes are returned as skipped."""
        result = move_notes(note_ids, target_folder, self.store.files())
        if result.batch is not None:
            self._submit(result.batch)
            for new_id in result.moved_ids:
                self.folders.reconcile(new_id)
        return result

    def create_folder(self, name: str, current_folder: str | None = None) -> str:
        """Declare a virtual folder. Nothing is written until a note lands in it."""
        folder_path = folder_path_from_input(name, current_folder)
        self.folders.declare(folder_path)
        return folder_path
