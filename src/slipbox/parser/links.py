"""Wikilink extraction and rewriting."""

import re

# Pattern for [[link]] syntax - captures content between double brackets
# Handles [[note-id]], [[folder/note-id]] and [[note-id|Alias]] formats
LINK_PATTERN = re.compile(r"\[\[([^\]]+)\]\]")


def extract_links(content: str) -> list[str]:
    """Extract wikilink targets from markdown content.

    Args:
        content: Markdown content to extract links from.

    Returns:
        List of unique link targets in encounter order (alias and heading
        anchor stripped, without .md extension).
    """
    seen: set[str] = set()
    links: list[str] = []

    for raw in LINK_PATTERN.findall(content):
        normalized = _normalize_link(raw)
        if normalized and normalized not in seen:
            seen.add(normalized)
            links.append(normalized)

    return links


def _normalize_link(link: str) -> str:
    """Normalize a link target.

    - Drops the display alias and heading anchor
    - Strips whitespace
    - Removes .md extension
    - Normalizes path separators

    Args:
        link: Raw text between the brackets.

    Returns:
        Normalized link target.
    """
    link = link.split("|", 1)[0]
    link = link.split("#", 1)[0]
    link = link.strip()

    if link.endswith(".md"):
        link = link[:-3]

    link = link.replace("\\", "/")

    return link.strip("/")


def _split_target(raw: str) -> tuple[str, str, str, str]:
    """Split link text into (prefix, target, suffix, rest).

    prefix and suffix hold what _normalize_link strips around the target
    (whitespace, outer slashes, .md). rest starts at the anchor or alias.
    """
    end = len(raw)
    for marker in ("|", "#"):
        index = raw.find(marker)
        if index != -1:
            end = min(end, index)
    head, rest = raw[:end], raw[end:]

    start = len(head) - len(head.lstrip())
    start += len(head[start:]) - len(head[start:].lstrip("/\\"))

    stop = len(head.rstrip())
    if head[:stop].endswith(".md"):
        stop -= 3
    stop = len(head[:stop].rstrip("/\\"))
    stop = max(stop, start)

    return head[:start], head[start:stop], head[stop:], rest


def update_wikilinks(content: str, old_id: str, new_id: str) -> str:
    """Point every wikilink that targets old_id at new_id.

    A link targets old_id when it reads as old_id after normalization, so
    [[/a/b]], [[a/b/]] and [[a\\b.md]] all count. Only the target itself
    is replaced; whitespace, outer slashes, .md, anchors and aliases are
    kept. When no link changes, the very same string object is returned so
    callers can detect a no-op with `is`.

    Args:
        content: Raw note content.
        old_id: Note id being replaced.
        new_id: Replacement note id.

    Returns:
        Content with links rewritten.
    """
    if not old_id or old_id == new_id:
        return content

    changed = False

    def replace(match: re.Match[str]) -> str:
        nonlocal changed
        raw = match.group(1)
        if _normalize_link(raw) != old_id:
            return match.group(0)
        prefix, _, suffix, rest = _split_target(raw)
        changed = True
        return f"[[{prefix}{new_id}{suffix}{rest}]]"

    updated = LINK_PATTERN.sub(replace, content)
    return updated if changed else content


def backlinks_for(index: dict[str, list[str]], note_id: str) -> list[str]:
    """Notes referencing note_id according to a precomputed backlink index.

    Works for ids with no backing note too (dangling links still show up).
    """
    return list(index.get(note_id, ()))
