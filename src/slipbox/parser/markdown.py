"""Markdown parsing with YAML frontmatter support."""

import logging
from typing import Any

import yaml
from frontmatter import YAMLHandler
from pydantic import ValidationError

from ..models import Note, NoteFrontmatter
from ..note_id import note_id_from_path
from .links import extract_links

log = logging.getLogger(__name__)

_handler = YAMLHandler()


class ParseError(Exception):
    """Raised when a note's frontmatter cannot be parsed."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        self.message = message
        super().__init__(f"{source}: {message}")


def split_frontmatter(content: str, source: str = "<note>") -> tuple[dict[str, Any], str]:
    """Split raw note content into its frontmatter mapping and the rest.

    The returned body is the exact text after the closing delimiter line,
    so `---\\n<yaml>---` + body reassembles the original layout.

    Args:
        content: Raw note content.
        source: Name used in error messages.

    Returns:
        Tuple of (frontmatter dict, body). Content without a frontmatter
        block yields an empty dict and the unchanged content.

    Raises:
        ParseError: If the block is unterminated, not valid YAML, or not a mapping.
    """
    if not _handler.detect(content):
        return {}, content

    boundaries = _handler.FM_BOUNDARY.finditer(content)
    opening = next(boundaries)
    closing = next(boundaries, None)
    if closing is None:
        raise ParseError(source, "Unterminated frontmatter block")

    raw = content[opening.end() : closing.start()]
    # The boundary pattern may swallow a newline after the dashes
    body = content[closing.start() + len(closing.group(0).rstrip()) :]

    try:
        data = _handler.load(raw)
    except yaml.YAMLError as e:
        raise ParseError(source, f"Failed to parse frontmatter: {e}") from e

    if data is None:
        return {}, body
    if not isinstance(data, dict):
        raise ParseError(source, "Frontmatter must be a mapping")
    return data, body


def has_frontmatter(content: str) -> bool:
    """Whether content starts with a frontmatter delimiter line."""
    return bool(_handler.detect(content))


def parse_note(note_id: str, content: str) -> Note:
    """Parse raw content into a Note.

    Parsing is lenient: a note with broken frontmatter is still a note, it
    just has no metadata. The problem is logged so it can be fixed.
    """
    try:
        data, body = split_frontmatter(content, source=note_id)
    except ParseError as e:
        log.warning("Ignoring frontmatter of %s: %s", note_id, e.message)
        data, body = {}, content

    try:
        metadata = NoteFrontmatter.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(x) for x in err["loc"]) for err in e.errors())
        log.warning("Invalid frontmatter fields in %s: %s", note_id, fields)
        metadata = NoteFrontmatter()

    return Note(
        id=note_id,
        content=content,
        frontmatter=metadata,
        body=body.lstrip("\n"),
        links=extract_links(body),
    )


def parse_notes(files: dict[str, str]) -> dict[str, Note]:
    """Parse a snapshot of storage key -> content into note id -> Note."""
    notes: dict[str, Note] = {}
    for key, content in files.items():
        note_id = note_id_from_path(key)
        if note_id is None:
            continue
        notes[note_id] = parse_note(note_id, content)
    return notes
