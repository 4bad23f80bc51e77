"""Tests for fence-aware section splitting and rendering."""
from __future__ import annotations

from helpers.bundles import make_metadata

from tessera.core.composition.sections import (
    FenceTracker,
    close_open_fence,
    match_heading,
    render_document,
    split_blocks,
    split_sections,
)


class TestSplitSections:
    def test_preamble_and_sections(self) -> None:
        doc = split_sections("# Title\nIntro\n\n## One\nA\n\n## Two\nB\n")

        assert doc.preamble == "# Title\nIntro"
        assert doc.titles == ["One", "Two"]
        assert [s.body for s in doc.sections] == ["A", "B"]

    def test_deeper_headings_stay_in_body(self) -> None:
        doc = split_sections("## One\n### Detail\ntext\n#### More\n")

        assert doc.titles == ["One"]
        assert doc.sections[0].body == "### Detail\ntext\n#### More"

    def test_heading_inside_backtick_fence_is_not_a_boundary(self) -> None:
        text = "## Usage\n```md\n## Not a section\n```\nafter\n"

        doc = split_sections(text)

        assert doc.titles == ["Usage"]
        assert "## Not a section" in doc.sections[0].body

    def test_heading_inside_tilde_fence_is_not_a_boundary(self) -> None:
        doc = split_sections("## A\n~~~\n## fake\n~~~\n## B\nx\n")

        assert doc.titles == ["A", "B"]

    def test_shorter_fence_does_not_close_longer_fence(self) -> None:
        text = "## A\n````\n```\n## still code\n```\n````\n## B\n"

        assert split_sections(text).titles == ["A", "B"]

    def test_unterminated_fence_runs_to_end(self) -> None:
        doc = split_sections("## A\n```\n## inside\n")

        assert doc.titles == ["A"]

    def test_policy_applied_from_metadata(self) -> None:
        meta = make_metadata("a", exclusive=["Rules"])

        doc = split_sections("## Rules\nx\n## Other\ny\n", metadata=meta)

        assert [s.mergeable for s in doc.sections] == [False, True]

    def test_document_without_sections(self) -> None:
        doc = split_sections("Just text\n")

        assert doc.preamble == "Just text"
        assert doc.sections == ()

    def test_empty_section_body_kept(self) -> None:
        doc = split_sections("## Empty\n## Full\nx\n")

        assert doc.titles == ["Empty", "Full"]
        assert doc.sections[0].body == ""

    def test_closing_hashes_are_stripped_from_title(self) -> None:
        assert split_sections("## Setup ##\nx\n").titles == ["Setup"]


class TestHeadingsAndFences:
    def test_match_heading_levels(self) -> None:
        assert match_heading("## Title") == (2, "Title")
        assert match_heading("# Top") == (1, "Top")
        assert match_heading("##NoSpace") is None
        assert match_heading("##") is None
        assert match_heading("    ## indented code") is None

    def test_fence_tracker_reports_delimiters_as_fenced(self) -> None:
        tracker = FenceTracker()

        assert [tracker.feed(line) for line in ["a", "```py", "x", "```", "b"]] == [
            False, True, True, True, False,
        ]
        assert tracker.open is False

    def test_close_open_fence_appends_delimiter(self) -> None:
        assert close_open_fence("```\ncode") == "```\ncode\n```"
        assert close_open_fence("```\ncode\n```") == "```\ncode\n```"


class TestSplitBlocks:
    def test_splits_on_marker_outside_fences(self) -> None:
        marker = "<!-- m -->"
        body = f"one\n\n{marker}\n\ntwo\n```\n{marker}\n```"

        blocks = split_blocks(body, marker)

        assert blocks[0] == "one"
        assert blocks[1].startswith("two")
        assert len(blocks) == 2


class TestRenderDocument:
    def test_round_trip_of_normalized_document(self) -> None:
        text = "# Title\n\n## One\n\nA\n\n## Two\n\nB\n"
        doc = split_sections(text)

        assert render_document(doc.preamble, doc.sections) == text

    def test_empty_section_renders_heading_only(self) -> None:
        doc = split_sections("## Empty\n")

        assert render_document("", doc.sections) == "## Empty\n"
