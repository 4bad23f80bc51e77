"""Tests for settings composition."""
from __future__ import annotations

from tessera.core.composition import merge_settings


class TestMergeSettings:
    def test_scalars_overridden_by_later_values(self) -> None:
        assert merge_settings([{"model": "a"}, {"model": "b"}]) == {"model": "b"}

    def test_nested_objects_merge(self) -> None:
        merged = merge_settings([{"env": {"A": "1"}}, {"env": {"B": "2"}}])

        assert merged == {"env": {"A": "1", "B": "2"}}

    def test_permission_lists_unioned_without_duplicates(self) -> None:
        merged = merge_settings([
            {"permissions": {"allow": ["Read", "Write"], "deny": ["Bash(rm:*)"]}},
            {"permissions": {"allow": ["Write", "Bash(npm:*)"]}},
        ])

        assert merged["permissions"]["allow"] == ["Read", "Write", "Bash(npm:*)"]
        assert merged["permissions"]["deny"] == ["Bash(rm:*)"]

    def test_hook_entries_deduplicated_by_value(self) -> None:
        entry = {"matcher": "Edit", "hooks": [{"type": "command", "command": "fmt.sh"}]}

        merged = merge_settings([
            {"hooks": {"PostToolUse": [entry]}},
            {"hooks": {"PostToolUse": [dict(entry)]}},
        ])

        assert merged["hooks"]["PostToolUse"] == [entry]

    def test_legacy_root_permissions_moved_under_permissions(self) -> None:
        merged = merge_settings([
            {"permissions": {"allow": ["Read"]}},
            {"allow": ["Bash"], "deny": ["WebFetch"]},
        ])

        assert merged == {"permissions": {"allow": ["Read", "Bash"], "deny": ["WebFetch"]}}

    def test_none_and_empty_entries_skipped(self) -> None:
        assert merge_settings([None, {}, {"a": 1}, None]) == {"a": 1}
        assert merge_settings([]) == {}

    def test_inputs_not_mutated(self) -> None:
        first = {"permissions": {"allow": ["Read"]}}
        second = {"permissions": {"allow": ["Write"]}}

        merge_settings([first, second])

        assert first == {"permissions": {"allow": ["Read"]}}
        assert second == {"permissions": {"allow": ["Write"]}}

    def test_status_line_replaced_whole_by_later_settings(self) -> None:
        merged = merge_settings([
            {"statusLine": {"type": "command", "command": "a.sh", "padding": 1}},
            {"statusLine": {"type": "command", "command": "b.sh"}},
            {"model": "x"},
        ])

        assert merged["statusLine"] == {"type": "command", "command": "b.sh"}
