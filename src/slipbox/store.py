"""Stores that hold note files and apply write batches.

A store hands out snapshots (storage key -> content) and applies a batch of
mutations as one unit. `None` in a batch deletes the file.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Protocol

from .config import NOTE_EXTENSION
from .errors import SlipboxError
from .models import WriteBatch

log = logging.getLogger(__name__)


class NoteStore(Protocol):
    """Persistence collaborator used by the notebook."""

    def files(self) -> dict[str, str]:
        """Snapshot of storage key -> content."""
        ...

    def write_files(self, files: dict[str, str | None], commit_message: str | None = None) -> None:
        """Apply all mutations or none of them."""
        ...


class MemoryStore:
    """Dict-backed store. Keeps every applied batch for inspection."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self._files: dict[str, str] = dict(files or {})
        self.batches: list[WriteBatch] = []

    def files(self) -> dict[str, str]:
        return dict(self._files)

    def write_files(self, files: dict[str, str | None], commit_message: str | None = None) -> None:
        for key, content in files.items():
            if content is None:
                self._files.pop(key, None)
            else:
                self._files[key] = content
        self.batches.append(WriteBatch(files=dict(files), commit_message=commit_message))


class DirectoryStore:
    """Notes as .md files under a root directory, optionally committed to git.

    Writes are staged to temporary files next to their destination first;
    only when every file is staged are they swapped in and deletions applied.
    """

    def __init__(self, root: Path, *, commit: bool = True) -> None:
        self.root = root
        self.commit = commit

    def files(self) -> dict[str, str]:
        if not self.root.is_dir():
            return {}

        snapshot: dict[str, str] = {}
        for md_file in sorted(self.root.rglob(f"*{NOTE_EXTENSION}")):
            rel = md_file.relative_to(self.root)
            if any(part.startswith(".") for part in rel.parts):
                continue
            try:
                snapshot[rel.as_posix()] = md_file.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                log.warning("Skipping unreadable note %s: %s", rel, e)
        return snapshot

    def _resolve(self, key: str) -> Path:
        """Map a storage key to a path, refusing anything outside the root."""
        if not key.endswith(NOTE_EXTENSION) or key.startswith("/") or ".." in key.split("/"):
            raise SlipboxError.write_failed(f"invalid storage key {key!r}", [key])
        path = (self.root / key).resolve()
        try:
            path.relative_to(self.root.resolve())
        except ValueError:
            raise SlipboxError.write_failed(f"path escapes notes root: {key}", [key])
        return path

    def write_files(self, files: dict[str, str | None], commit_message: str | None = None) -> None:
        if not files:
            return

        targets = {key: self._resolve(key) for key in files}
        staged: list[tuple[Path, Path]] = []  # (temp file, destination)

        try:
            for key, content in files.items():
                if content is None:
                    continue
                destination = targets[key]
                destination.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=destination.parent, prefix=f".{destination.name}.", suffix=".tmp"
                )
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(content)
                staged.append((Path(tmp_name), destination))
        except OSError as e:
            for tmp_path, _ in staged:
                tmp_path.unlink(missing_ok=True)
            raise SlipboxError.write_failed(str(e), list(files)) from e

        for tmp_path, destination in staged:
            os.replace(tmp_path, destination)

        for key, content in files.items():
            if content is None:
                path = targets[key]
                path.unlink(missing_ok=True)
                self._prune_empty_dirs(path.parent)

        log.debug("Applied %d change(s) under %s", len(files), self.root)

        if self.commit:
            self._git_commit(commit_message or "Update notes")

    def _prune_empty_dirs(self, directory: Path) -> None:
        root = self.root.resolve()
        while directory != root and root in directory.parents:
            try:
                directory.rmdir()
            except OSError:
                # Not empty (or already gone)
                return
            directory = directory.parent

    def _git_commit(self, message: str) -> None:
        if not (self.root / ".git").exists():
            log.debug("%s is not a git work tree; skipping commit", self.root)
            return

        try:
            subprocess.run(
                ["git", "-C", str(self.root), "add", "-A"],
                capture_output=True,
                text=True,
                timeout=30,
                check=True,
            )
            result = subprocess.run(
                ["git", "-C", str(self.root), "commit", "-m", message],
                capture_output=True,
                text=True,
                timeout=30,
            )
        except (subprocess.TimeoutExpired, subprocess.CalledProcessError, OSError) as e:
            log.warning("Could not commit notes: %s", e)
            return

        if result.returncode != 0 and "nothing to commit" not in result.stdout:
            log.warning("git commit failed: %s", result.stderr.strip() or result.stdout.strip())
