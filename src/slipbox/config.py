"""Configuration management for slipbox.

This module contains all configurable constants for the notes store.
Magic numbers are documented here rather than scattered throughout the codebase.
"""

import os
from pathlib import Path

import yaml


class ConfigurationError(Exception):
    """Raised when required configuration is missing."""

    pass


# Marker file that identifies a notes root when walking up from the cwd.
# May contain YAML with a `root:` key pointing at the notes directory.
MARKER_FILENAME = ".slipbox"


def get_notes_root() -> Path:
    """Get the notes root directory.

    Discovery order:
    1. SLIPBOX_ROOT environment variable (explicit override)
    2. Walk up from cwd looking for a .slipbox marker
    3. Error with helpful message

    Raises:
        ConfigurationError: If no notes root can be found.
    """
    root = os.environ.get("SLIPBOX_ROOT")
    if root:
        return Path(root)

    discovered = _discover_marker()
    if discovered:
        return discovered

    raise ConfigurationError(
        "No notes root found. Options:\n"
        f"  1. Create a {MARKER_FILENAME} file at the top of your notes directory\n"
        "  2. Set SLIPBOX_ROOT to an existing notes directory"
    )


def _discover_marker(start_dir: Path | None = None, max_depth: int | None = None) -> Path | None:
    """Walk up from start_dir looking for a .slipbox marker.

    Args:
        start_dir: Directory to start from (defaults to cwd)
        max_depth: Maximum directories to traverse up

    Returns:
        The notes root if found, None otherwise.
    """
    current = Path(start_dir or os.getcwd()).resolve()

    for _ in range(max_depth or MAX_CONFIG_SEARCH_DEPTH):
        marker = current / MARKER_FILENAME
        if marker.is_file():
            try:
                data = yaml.safe_load(marker.read_text(encoding="utf-8")) or {}
            except (OSError, yaml.YAMLError):
                data = {}
            if isinstance(data, dict) and data.get("root"):
                candidate = (current / str(data["root"])).resolve()
                if candidate.is_dir():
                    return candidate
            return current

        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    return None


def get_github_token() -> str | None:
    """Token used for the gist mirror. None disables mirroring."""
    return os.environ.get("SLIPBOX_GITHUB_TOKEN") or None


def commits_enabled() -> bool:
    """Whether DirectoryStore should commit each batch to git."""
    return os.environ.get("SLIPBOX_NO_COMMIT", "").lower() not in ("1", "true", "yes")


# =============================================================================
# Note Identifiers
# =============================================================================

# Storage key suffix. A note with id "a/b" lives at "a/b.md".
NOTE_EXTENSION = ".md"

# Random bytes in generated note ids. 6 bytes = 12 hex characters,
# plenty for a personal collection while staying short enough to type.
NOTE_ID_RANDOM_BYTES = 6

# Attempts at drawing a random id that is not already taken before giving up.
NOTE_ID_MAX_ATTEMPTS = 10


# =============================================================================
# Virtual Folders
# =============================================================================

# File (relative to the notes root) where the CLI keeps declared folders
# that have no note in them yet.
LEDGER_FILENAME = ".slipbox-folders.json"


# =============================================================================
# Discovery
# =============================================================================

# Maximum directory traversal depth when searching for the marker file.
# Prevents infinite loops on circular symlinks or unusual filesystems.
MAX_CONFIG_SEARCH_DEPTH = 50


# =============================================================================
# Search
# =============================================================================

# Number of tags shown by `sb tags` / `sb search` before "+N more"
DEFAULT_TAG_CLOUD_LIMIT = 4


# =============================================================================
# Gist Mirror
# =============================================================================

GIST_API_URL = "https://api.github.com"

# Mirror calls are best effort; keep them short so a slow API never
# holds up the command that triggered them.
MIRROR_TIMEOUT_SECONDS = 10.0
