"""Tests for deep merge helpers."""
from __future__ import annotations

import pytest

from tessera.core.utils.merge import deep_merge, union_lists


class TestDeepMerge:
    def test_nested_dicts_merge(self) -> None:
        assert deep_merge({"a": {"x": 1}}, {"a": {"y": 2}}) == {"a": {"x": 1, "y": 2}}

    def test_lists_replaced_by_default(self) -> None:
        assert deep_merge({"l": [1, 2]}, {"l": [3]}) == {"l": [3]}

    def test_lists_unioned_on_request(self) -> None:
        assert deep_merge({"l": [1, 2]}, {"l": [2, 3]}, lists="union") == {"l": [1, 2, 3]}

    def test_type_change_overrides(self) -> None:
        assert deep_merge({"a": {"x": 1}}, {"a": "flat"}) == {"a": "flat"}

    def test_inputs_untouched(self) -> None:
        base = {"a": {"l": [1]}}
        override = {"a": {"l": [2]}}

        merged = deep_merge(base, override, lists="union")
        merged["a"]["l"].append(99)

        assert base == {"a": {"l": [1]}}
        assert override == {"a": {"l": [2]}}

    def test_unknown_strategy(self) -> None:
        with pytest.raises(ValueError, match="Unknown list strategy"):
            deep_merge({}, {}, lists="append")


def test_union_lists_dedupes_unhashable_items() -> None:
    entry = {"matcher": "Edit"}

    assert union_lists([entry], [{"matcher": "Edit"}, "x"]) == [entry, "x"]
