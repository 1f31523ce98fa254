"""Shared test fixtures for the slipbox test suite.

Design:
- tmp_root: isolated notes directory, SLIPBOX_ROOT pointed at it
- runner / cli_invoke: CliRunner with proper isolation
- Snapshots are plain dicts of storage key -> content; engines never touch disk
"""

import logging
from pathlib import Path
from typing import Generator

import pytest
from click.testing import CliRunner

from slipbox._logging import PACKAGE_LOGGER
from slipbox.cli import cli


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo configure_logging() so caplog sees records in every test."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with isolated environment."""
    return CliRunner()


@pytest.fixture
def tmp_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Create an isolated notes root and point SLIPBOX_ROOT at it.

    Git commits and the gist mirror are disabled.
    """
    root = tmp_path / "notes"
    root.mkdir()
    monkeypatch.setenv("SLIPBOX_ROOT", str(root))
    monkeypatch.setenv("SLIPBOX_NO_COMMIT", "1")
    monkeypatch.delenv("SLIPBOX_GITHUB_TOKEN", raising=False)
    yield root


@pytest.fixture
def cli_invoke(runner: CliRunner, tmp_root: Path):
    """Helper for invoking the CLI against tmp_root.

    Usage:
        def test_ls(cli_invoke):
            result = cli_invoke(["ls"])
            assert result.exit_code == 0
    """

    def _invoke(args: list[str], input: str | None = None, catch_exceptions: bool = False):
        return runner.invoke(
            cli,
            args,
            input=input,
            catch_exceptions=catch_exceptions,
            env={"SLIPBOX_ROOT": str(tmp_root), "SLIPBOX_NO_COMMIT": "1"},
        )

    return _invoke


@pytest.fixture
def draft_files() -> dict[str, str]:
    """Snapshot with a draft referenced from two other notes."""
    return {
        "notes/draft.md": "---\ntitle: Draft\n---\n\nSee [[notes/draft]] for the latest.\n",
        "index.md": "# Index\n\n- [[notes/draft|My Draft]]\n- [[notes/other]]\n",
        "notes/other.md": "Related: [[notes/draft]] and [[notes/drafts]]\n",
        "unrelated.md": "Nothing to see here.\n",
    }


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions (for test code, not fixtures)
# ─────────────────────────────────────────────────────────────────────────────


def make_note_content(title: str, body: str = "", tags: list[str] | None = None) -> str:
    """Helper to build note content with frontmatter.

    Usage in tests:
        from conftest import make_note_content
        content = make_note_content("Title", "Body", ["tag1"])
    """
    tags_str = f"[{', '.join(tags)}]" if tags else "[]"
    return f"""---
title: {title}
tags: {tags_str}
---

{body}
"""


def create_note(root: Path, note_id: str, title: str, body: str = "", tags: list[str] | None = None) -> Path:
    """Helper to write a note file under a notes root."""
    path = root / f"{note_id}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(make_note_content(title, body, tags), encoding="utf-8")
    return path
