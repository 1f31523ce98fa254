"""Tests for slipbox.note_id: slugs, validation and path helpers."""

import pytest

from slipbox.note_id import (
    basename,
    folder_prefixes,
    generate_note_id,
    is_valid_note_id,
    join_note_id,
    note_id_from_path,
    note_path,
    parent_folder,
    slugify_segment,
    to_slug,
)


class TestSlugifySegment:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Hello World", "hello-world"),
            ("  padded  ", "padded"),
            ("multiple   spaces", "multiple-spaces"),
            ("dash--runs", "dash-runs"),
            ("-leading and trailing-", "leading-and-trailing"),
            ("snake_case_name", "snake-case-name"),
            ("Tabs\tand\nnewlines", "tabs-and-newlines"),
            ("Rock & Roll!", "rock-roll"),
            ("C++ tips", "c-tips"),
            ("2024 Review", "2024-review"),
        ],
    )
    def test_slugifies(self, text, expected):
        assert slugify_segment(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", "---", "!!!", "日本語"])
    def test_can_be_empty(self, text):
        """Input with nothing usable yields the empty string rather than failing."""
        assert slugify_segment(text) == ""


class TestToSlug:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Projects / Foo", "projects/foo"),
            ("a//b", "a/b"),
            ("/leading/slash/", "leading/slash"),
            ("Travel / Road Trip Ideas", "travel/road-trip-ideas"),
            ("single", "single"),
            ("a / !!! / b", "a/b"),
        ],
    )
    def test_path_aware(self, text, expected):
        assert to_slug(text) == expected

    @pytest.mark.parametrize("text", ["", "/", "///", " / / ", "?/?"])
    def test_separators_only_yield_empty(self, text):
        assert to_slug(text) == ""

    @pytest.mark.parametrize(
        "text",
        [
            "Hello, World",
            "Projects / Q3 Planning (draft)",
            "über café",
            "a_b-c d",
            "--x--/--y--",
            "Ends with dash -",
            "Émoji 🚀 launch",
        ],
    )
    def test_non_empty_slug_is_valid_id(self, text):
        slug = to_slug(text)
        assert slug
        assert is_valid_note_id(slug)


class TestIsValidNoteId:
    @pytest.mark.parametrize("note_id", ["a", "abc", "a-b", "a/b", "2024-01-15", "x/y-z/0"])
    def test_valid(self, note_id):
        assert is_valid_note_id(note_id)

    @pytest.mark.parametrize(
        "note_id",
        [
            "",
            "A",
            "a b",
            "-a",
            "a-",
            "a--b",
            "a//b",
            "/a",
            "a/",
            "a/-b",
            "a.md",
            "a_b",
            "café",
        ],
    )
    def test_invalid(self, note_id):
        assert not is_valid_note_id(note_id)

    def test_non_string_is_invalid(self):
        assert not is_valid_note_id(None)  # type: ignore[arg-type]


class TestGenerateNoteId:
    def test_generated_ids_are_valid(self):
        for _ in range(50):
            assert is_valid_note_id(generate_note_id())

    def test_generated_ids_differ(self):
        assert len({generate_note_id() for _ in range(50)}) == 50


class TestPathHelpers:
    def test_folder_prefixes(self):
        assert folder_prefixes("a/b/c") == ["a", "a/b"]
        assert folder_prefixes("a") == []

    def test_basename_and_parent(self):
        assert basename("a/b/c") == "c"
        assert basename("c") == "c"
        assert parent_folder("a/b/c") == "a/b"
        assert parent_folder("c") == ""

    def test_join(self):
        assert join_note_id("", "x") == "x"
        assert join_note_id("a/b", "x") == "a/b/x"

    def test_note_path_roundtrip(self):
        assert note_path("a/b") == "a/b.md"
        assert note_id_from_path("a/b.md") == "a/b"
        assert note_id_from_path("a\\b.md") == "a/b"

    def test_note_id_from_non_note_path(self):
        assert note_id_from_path("image.png") is None
