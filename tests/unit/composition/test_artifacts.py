"""Tests for positional last-writer-wins artifact merging."""
from __future__ import annotations

import pytest

from tessera.core.bundles import Agent, Hook
from tessera.core.composition import merge_agents, merge_artifacts, merge_commands, merge_hooks
from tessera.core.errors import MergeError


def _agent(name: str, source: str, description: str = "") -> Agent:
    return Agent(name=name, description=description, content=f"{source} body", source=source)


class TestMergeArtifacts:
    def test_last_group_wins(self) -> None:
        merged = merge_artifacts([
            [_agent("reviewer", "a", "old")],
            [_agent("reviewer", "b", "new")],
        ])

        assert len(merged) == 1
        assert merged[0].description == "new"
        assert merged[0].source == "b"

    def test_override_replaces_whole_record(self) -> None:
        first = Agent(name="x", description="d", content="c", source="a", tools=("Read",))
        second = Agent(name="x", description="", content="other", source="b")

        (merged,) = merge_artifacts([[first], [second]])

        assert merged is second
        assert merged.tools == ()

    def test_first_occurrence_fixes_position(self) -> None:
        merged = merge_artifacts([
            [_agent("one", "a"), _agent("two", "a")],
            [_agent("three", "b"), _agent("one", "b")],
        ])

        assert [a.name for a in merged] == ["one", "two", "three"]
        assert merged[0].source == "b"

    def test_names_are_exact(self) -> None:
        merged = merge_artifacts([[_agent("Reviewer", "a")], [_agent("reviewer", "b")]])

        assert [a.name for a in merged] == ["Reviewer", "reviewer"]

    def test_mappings_supported(self) -> None:
        merged = merge_artifacts([[{"name": "x", "v": 1}], [{"name": "x", "v": 2}]])

        assert merged == ({"name": "x", "v": 2},)

    def test_empty_input(self) -> None:
        assert merge_artifacts([]) == ()
        assert merge_artifacts([[], []]) == ()

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_nameless_artifact_rejected(self, name) -> None:
        with pytest.raises(MergeError, match="without a name"):
            merge_artifacts([[{"name": name}]])

    def test_category_aliases_share_the_rule(self) -> None:
        hooks = [
            [Hook(name="pre.sh", kind="script", content="old", source="a")],
            [Hook(name="pre.sh", kind="script", content="new", source="b")],
        ]

        assert merge_hooks(hooks)[0].content == "new"
        assert merge_agents is merge_artifacts
        assert merge_commands is merge_artifacts
