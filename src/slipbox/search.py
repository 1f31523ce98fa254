"""Search query parsing, note filtering and the tag cloud.

Query grammar: whitespace separated tokens. A token shaped like
`key:value[,value...]` is a qualifier; a leading `-` negates it. Anything
else is free text.

    tag:recipes -tag:draft,archived link:projects/road-trip pasta
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from .models import Note, Query, QueryFilter, TagFrequency

QUALIFIER_PATTERN = re.compile(r"^(-?)(\w[\w-]*):(.+)$")


def parse_query(text: str) -> Query:
    """Split a search string into qualifier filters and free-text terms.

    Qualifiers with the same key stay separate filters. A qualifier whose
    values are all empty ("tag:,") is treated as free text.
    """
    filters: list[QueryFilter] = []
    terms: list[str] = []

    for token in text.split():
        match = QUALIFIER_PATTERN.match(token)
        if match:
            values = [value for value in match.group(3).split(",") if value]
            if values:
                filters.append(
                    QueryFilter(key=match.group(2), values=values, exclude=match.group(1) == "-")
                )
                continue
        terms.append(token)

    return Query(filters=filters, terms=terms)


def format_filter(query_filter: QueryFilter) -> str:
    """Render a filter back to its qualifier token."""
    prefix = "-" if query_filter.exclude else ""
    return f"{prefix}{query_filter.key}:{','.join(query_filter.values)}"


def add_qualifier(text: str, key: str, value: str, *, exclude: bool = False) -> str:
    """Append a qualifier to a search string (clicking a tag in the cloud)."""
    qualifier = format_filter(QueryFilter(key=key, values=[value], exclude=exclude))
    text = text.strip()
    return f"{text} {qualifier}" if text else qualifier


def remove_filter(text: str, query_filter: QueryFilter) -> str:
    """Remove the first token matching query_filter from a search string."""
    target = format_filter(query_filter)
    tokens = text.split()
    if target in tokens:
        tokens.remove(target)
    return " ".join(tokens)


def tags_from_query(text: str) -> list[str]:
    """Tags named by non-excluded tag filters, in order of appearance."""
    tags: list[str] = []
    for query_filter in parse_query(text).filters:
        if query_filter.key != "tag" or query_filter.exclude:
            continue
        for tag in query_filter.values:
            if tag not in tags:
                tags.append(tag)
    return tags


def highlight_paths(query: Query) -> list[str]:
    """Link paths to highlight for the active, non-excluded filters."""
    paths: list[str] = []
    for query_filter in query.filters:
        if query_filter.exclude:
            continue
        if query_filter.key == "tag":
            paths.extend(f"/tags/{value}" for value in query_filter.values)
        elif query_filter.key in ("link", "date"):
            paths.extend(f"/{value}" for value in query_filter.values)
    return paths


def _matches_value(note: Note, key: str, value: str) -> bool:
    if key == "tag":
        return any(tag == value or tag.startswith(value + "/") for tag in note.tags)
    if key == "link":
        return value in note.links
    if key == "date":
        # Daily notes are named by date, so a date is either the note itself
        # or a link to that day's note
        return note.id == value or value in note.links
    return False


def _matches_filter(note: Note, query_filter: QueryFilter) -> bool:
    matched = any(_matches_value(note, query_filter.key, value) for value in query_filter.values)
    return not matched if query_filter.exclude else matched


def _matches_terms(note: Note, terms: list[str]) -> bool:
    if not terms:
        return True
    haystack = f"{note.id}\n{note.title}\n{note.body}".lower()
    return all(term.lower() in haystack for term in terms)


def filter_notes(notes: Iterable[Note], query: Query) -> list[Note]:
    """Notes matching every filter and every free-text term."""
    return [
        note
        for note in notes
        if _matches_terms(note, query.terms)
        and all(_matches_filter(note, query_filter) for query_filter in query.filters)
    ]


def search_notes(notes: Iterable[Note], text: str) -> list[Note]:
    return filter_notes(notes, parse_query(text))


def tag_frequencies(notes: Sequence[Note]) -> list[TagFrequency]:
    """Tag cloud for a result set.

    Counts the notes carrying each tag, then drops:
    - tags carried by every note (they do not narrow anything down)
    - a tag whose descendants (tags starting with it) all share its count,
      since picking the descendant gives the same result

    The rest is sorted by descending count; equal counts keep the order in
    which the tags were first seen.
    """
    counts: dict[str, int] = {}
    for note in notes:
        for tag in dict.fromkeys(note.tags):
            counts[tag] = counts.get(tag, 0) + 1

    total = len(notes)
    entries = list(counts.items())

    def is_redundant_parent(tag: str, count: int) -> bool:
        descendants = [other_count for other, other_count in entries if other != tag and other.startswith(tag)]
        return bool(descendants) and all(other_count == count for other_count in descendants)

    kept = [
        TagFrequency(tag=tag, count=count)
        for tag, count in entries
        if count < total and not is_redundant_parent(tag, count)
    ]
    kept.sort(key=lambda entry: -entry.count)
    return kept
