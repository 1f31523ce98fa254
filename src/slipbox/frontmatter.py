"""Frontmatter building utilities for notes.

Notes keep their metadata inside the content string. These helpers produce
the initial block for a new note and update single values in place,
leaving the body byte-for-byte intact.
"""

import json
from typing import Any

import yaml

from .parser.markdown import has_frontmatter, split_frontmatter


def _yaml_quote_if_needed(value: str) -> str:
    """Quote a string value if it contains YAML special characters.

    Uses PyYAML to determine if quoting is needed by testing if the value
    roundtrips correctly through YAML parsing. Characters like `: `, `#`,
    and leading `*`, `&`, `%`, `@`, etc. require quoting.
    """
    test_yaml = f"key: {value}"
    try:
        parsed = yaml.safe_load(test_yaml)
        if isinstance(parsed, dict) and parsed.get("key") == value:
            return value
    except yaml.YAMLError:
        pass
    dumped = yaml.safe_dump({"key": value}, default_flow_style=False).strip()
    # Returns 'key: VALUE' or "key: 'VALUE'" - extract the value part
    return dumped[5:]


def _format_yaml_list(items: list[str]) -> str:
    """Format a list as YAML list items with indentation."""
    return "\n".join(f"  - {_yaml_quote_if_needed(item)}" for item in items)


def build_frontmatter(title: str, tags: list[str] | None = None, *, is_private: bool = False) -> str:
    """Build the frontmatter block for a brand new note.

    The title is the user's original input, JSON-quoted so that any text is
    valid YAML.

    Args:
        title: Note title.
        tags: Initial tags (e.g. the tag filters active when the note was created).
        is_private: Initial privacy flag.

    Returns:
        Complete frontmatter string including --- delimiters and a blank line.
    """
    parts = ["---"]
    parts.append(f"title: {json.dumps(title, ensure_ascii=False)}")
    parts.append(f"isPrivate: {'true' if is_private else 'false'}")
    if tags:
        parts.append("tags:")
        parts.append(_format_yaml_list(tags))
    parts.append("---\n\n")
    return "\n".join(parts)


def update_frontmatter_value(content: str, properties: dict[str, Any]) -> str:
    """Set (or, with a None value, remove) frontmatter keys.

    Existing keys keep their order, new keys are appended. A note without
    frontmatter gets a fresh block in front of its content.

    Raises:
        ParseError: If the existing frontmatter cannot be parsed.
    """
    had_frontmatter = has_frontmatter(content)
    data, body = split_frontmatter(content)

    for key, value in properties.items():
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value

    if not data:
        return f"---\n---{body}" if had_frontmatter else content

    dumped = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
    if had_frontmatter:
        return f"---\n{dumped}---{body}"
    return f"---\n{dumped}---\n\n{content}"
