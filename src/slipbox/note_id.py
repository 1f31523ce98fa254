"""Note identifiers: slugs, validation and path helpers.

A note id is one or more `/`-joined segments of lowercase ASCII letters and
digits with single internal dashes ("projects/road-trip"). The id doubles as
the storage key: the note lives at "<id>.md".
"""

import re
import secrets

from .config import NOTE_EXTENSION, NOTE_ID_RANDOM_BYTES

_SEGMENT = r"[a-z0-9]+(?:-[a-z0-9]+)*"
NOTE_ID_PATTERN = re.compile(rf"{_SEGMENT}(?:/{_SEGMENT})*")


def slugify_segment(text: str) -> str:
    """Convert one path segment to a slug (lowercase, hyphens, alphanumeric only)."""
    slug = text.strip().lower()
    slug = re.sub(r"[\s_]+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def to_slug(text: str) -> str:
    """Build a path-aware slug from user input.

    "Projects / Road Trip" -> "projects/road-trip". Pieces that slugify to
    nothing are dropped, so "a//b" becomes "a/b" and "/" becomes "".
    """
    segments = (slugify_segment(piece) for piece in text.split("/"))
    return "/".join(segment for segment in segments if segment)


def is_valid_note_id(note_id: str) -> bool:
    """Check that note_id is a non-empty sequence of valid slug segments."""
    if not isinstance(note_id, str) or not note_id:
        return False
    return NOTE_ID_PATTERN.fullmatch(note_id) is not None


def generate_note_id() -> str:
    """Random id used when user input slugifies to nothing."""
    return secrets.token_hex(NOTE_ID_RANDOM_BYTES)


def folder_prefixes(note_id: str) -> list[str]:
    """All folder path prefixes of a note id ("a/b/c" -> ["a", "a/b"])."""
    parts = note_id.split("/")
    return ["/".join(parts[:i]) for i in range(1, len(parts))]


def basename(note_id: str) -> str:
    """Last segment of a note id."""
    return note_id.rsplit("/", 1)[-1]


def parent_folder(note_id: str) -> str:
    """Folder containing the note ("" for root-level notes)."""
    return note_id.rsplit("/", 1)[0] if "/" in note_id else ""


def join_note_id(folder: str, name: str) -> str:
    """Place name inside folder ("" means root)."""
    return f"{folder}/{name}" if folder else name


def note_path(note_id: str) -> str:
    """Storage key for a note id."""
    return f"{note_id}{NOTE_EXTENSION}"


def note_id_from_path(path: str) -> str | None:
    """Inverse of note_path. Returns None for non-note keys."""
    normalized = path.replace("\\", "/").lstrip("/")
    if not normalized.endswith(NOTE_EXTENSION):
        return None
    return normalized[: -len(NOTE_EXTENSION)]
