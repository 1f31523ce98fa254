"""Markdown parsing with frontmatter and link extraction."""

from .links import backlinks_for, extract_links, update_wikilinks
from .markdown import ParseError, has_frontmatter, parse_note, parse_notes, split_frontmatter

__all__ = [
    "parse_note",
    "parse_notes",
    "split_frontmatter",
    "has_frontmatter",
    "ParseError",
    "extract_links",
    "update_wikilinks",
    "backlinks_for",
]
