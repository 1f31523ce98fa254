"""Tests for wikilink extraction and rewriting."""

import pytest

from slipbox.parser.links import backlinks_for, extract_links, update_wikilinks


# ─────────────────────────────────────────────────────────────────────────────
# extract_links
# ─────────────────────────────────────────────────────────────────────────────


class TestExtractLinks:
    def test_basic(self):
        assert extract_links("See [[a]] and [[b/c]].") == ["a", "b/c"]

    def test_alias_and_anchor_stripped(self):
        content = "[[notes/draft|My Draft]] [[guide#setup]] [[x#h|Alias]]"
        assert extract_links(content) == ["notes/draft", "guide", "x"]

    def test_md_extension_and_whitespace(self):
        assert extract_links("[[ folder/note.md ]]") == ["folder/note"]

    def test_unique_in_encounter_order(self):
        assert extract_links("[[b]] [[a]] [[b|again]] [[a]]") == ["b", "a"]

    def test_embeds_count_as_links(self):
        assert extract_links("![[diagram]]") == ["diagram"]

    def test_no_links(self):
        assert extract_links("plain [text](url) and [single]") == []


# ─────────────────────────────────────────────────────────────────────────────
# update_wikilinks
# ─────────────────────────────────────────────────────────────────────────────


class TestUpdateWikilinks:
    def test_plain_link(self):
        assert update_wikilinks("See [[a/b]].", "a/b", "c/d") == "See [[c/d]]."

    def test_alias_preserved(self):
        content = "- [[notes/draft|My Draft]]"
        assert update_wikilinks(content, "notes/draft", "notes/final") == "- [[notes/final|My Draft]]"

    def test_anchor_and_extension_preserved(self):
        content = "[[guide#setup]] [[guide.md]] [[guide.md#x|Setup]]"
        assert (
            update_wikilinks(content, "guide", "manual")
            == "[[manual#setup]] [[manual.md]] [[manual.md#x|Setup]]"
        )

    def test_inner_whitespace_preserved(self):
        assert update_wikilinks("[[ a ]]", "a", "b") == "[[ b ]]"

    def test_embed(self):
        assert update_wikilinks("![[img-note]]", "img-note", "pics/img-note") == "![[pics/img-note]]"

    def test_all_occurrences(self):
        content = "[[a]] then [[a|A]] then [[a]]"
        assert update_wikilinks(content, "a", "z") == "[[z]] then [[z|A]] then [[z]]"

    @pytest.mark.parametrize(
        "content",
        [
            "[[a/bc]]",
            "[[a/b/c]]",
            "[[xa/b]]",
            "[[a/b-c]]",
            "a/b without brackets",
            "[a/b](a/b)",
        ],
    )
    def test_only_whole_targets_match(self, content):
        assert update_wikilinks(content, "a/b", "z") is content

    def test_shorter_id_does_not_touch_longer(self):
        content = "[[a/b]] [[a/bc]]"
        assert update_wikilinks(content, "a/bc", "q") == "[[a/b]] [[q]]"
        assert update_wikilinks(content, "a/b", "q") == "[[q]] [[a/bc]]"

    def test_no_match_returns_same_object(self):
        content = "Nothing links to it [[other]]"
        assert update_wikilinks(content, "missing", "new") is content

    def test_same_id_returns_same_object(self):
        content = "[[a]]"
        assert update_wikilinks(content, "a", "a") is content

    def test_idempotent_after_rewrite(self):
        rewritten = update_wikilinks("[[a]] and [[a|x]]", "a", "b")
        assert update_wikilinks(rewritten, "a", "b") is rewritten

    def test_round_trip_restores_content(self):
        original = "Start [[a]] mid [[a|Alias]] [[ab]] end"
        forward = update_wikilinks(original, "a", "b")
        assert update_wikilinks(forward, "b", "a") == original

    def test_dots_compare_literally(self):
        assert update_wikilinks("[[a.b]] [[axb]]", "a.b", "c") == "[[c]] [[axb]]"

    @pytest.mark.parametrize(
        "content,expected",
        [
            ("see [[/notes/draft]]", "see [[/notes/final]]"),
            ("see [[notes/draft/]]", "see [[notes/final/]]"),
            ("see [[notes\\draft]]", "see [[notes/final]]"),
            ("[[ /notes/draft.md #intro | Draft ]]", "[[ /notes/final.md #intro | Draft ]]"),
            ("[[notes/draft/|Draft]] [[\\notes\\draft#top]]", "[[notes/final/|Draft]] [[\\notes/final#top]]"),
        ],
    )
    def test_separator_variants_rewritten(self, content, expected):
        rewritten = update_wikilinks(content, "notes/draft", "notes/final")
        assert rewritten == expected
        assert extract_links(rewritten) == ["notes/final"]


class TestBacklinksFor:
    def test_lookup(self):
        index = {"a": ["b", "c"]}
        assert backlinks_for(index, "a") == ["b", "c"]

    def test_dangling_id(self):
        assert backlinks_for({"a": ["b"]}, "nope") == []

    def test_returns_copy(self):
        index = {"a": ["b"]}
        backlinks_for(index, "a").append("x")
        assert index["a"] == ["b"]
