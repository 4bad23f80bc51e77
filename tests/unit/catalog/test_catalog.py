"""Tests for catalog loading, lookups and compatibility checks."""
from __future__ import annotations

from pathlib import Path

import pytest
from helpers.bundles import write_bundle

from tessera.core.catalog import Catalog, Category, order_by_priority
from tessera.core.config import ConfigManager
from tessera.core.errors import CatalogError


class TestInitialize:
    def test_loads_bundles_from_category_folders(self, catalog_root: Path) -> None:
        write_bundle(catalog_root, "nextjs", category="frameworks")
        write_bundle(catalog_root, "vitest", category="testing")

        catalog = Catalog(catalog_root)

        assert catalog.initialize() == []
        assert len(catalog) == 2
        assert catalog.get("nextjs").category is Category.FRAMEWORK
        assert catalog.get("vitest").path == (catalog_root / "testing" / "vitest").resolve()

    def test_missing_root_raises(self, tmp_path: Path) -> None:
        with pytest.raises(CatalogError, match="Catalog root not found"):
            Catalog(tmp_path / "nope").initialize()

    def test_root_defaults_to_config(self, isolated_env: Path) -> None:
        catalog = Catalog()

        assert catalog.root.resolve() == (isolated_env / "configurations").resolve()

    def test_invalid_entries_skipped_and_recorded(self, catalog_root: Path) -> None:
        write_bundle(catalog_root, "good")
        write_bundle(catalog_root, "noname", descriptor={"name": ""})
        write_bundle(catalog_root, "badcat", descriptor={"category": "nonsense"})
        write_bundle(catalog_root, "badpath", descriptor={"path": "missing"})

        catalog = Catalog(catalog_root)
        errors = catalog.initialize()

        assert "good" in catalog
        assert len(catalog) == 1
        assert len(errors) == 3
        assert {e.bundle_id for e in errors} == {"noname", "badcat", "badpath"}

    def test_unparseable_descriptor_recorded(self, catalog_root: Path) -> None:
        bundle_dir = write_bundle(catalog_root, "broken")
        (bundle_dir / "bundle.yaml").write_text("id: [unclosed\n", encoding="utf-8")

        catalog = Catalog(catalog_root)
        errors = catalog.initialize()

        assert len(catalog) == 0
        assert "Unreadable bundle descriptor" in str(errors[0])

    def test_duplicate_id_keeps_first_in_scan_order(self, catalog_root: Path) -> None:
        write_bundle(catalog_root, "first", category="api", descriptor={"id": "dup"})
        write_bundle(catalog_root, "second", category="ui", descriptor={"id": "dup"})

        catalog = Catalog(catalog_root)
        errors = catalog.initialize()

        assert catalog.get("dup").category is Category.API
        assert "Duplicate bundle id" in str(errors[0])

    def test_hidden_and_descriptorless_dirs_ignored(self, catalog_root: Path) -> None:
        write_bundle(catalog_root, "visible")
        (catalog_root / "_drafts" / "x").mkdir(parents=True)
        (catalog_root / "tooling" / "no-descriptor").mkdir()

        assert Catalog(catalog_root).initialize() == []

    def test_initialize_is_idempotent(self, catalog_root: Path) -> None:
        write_bundle(catalog_root, "a")
        catalog = Catalog(catalog_root)
        catalog.initialize()
        write_bundle(catalog_root, "b")

        catalog.initialize()

        assert len(catalog) == 1

    def test_descriptor_names_from_config(self, catalog_root: Path) -> None:
        bundle_dir = write_bundle(catalog_root, "a")
        (bundle_dir / "bundle.yaml").rename(bundle_dir / "meta.yaml")
        config = ConfigManager(overrides={"catalog": {"descriptor_names": ["meta.yaml"]}})

        assert "a" in Catalog(catalog_root, config=config)


class TestLookups:
    def test_get_unknown_returns_none(self, catalog_root: Path) -> None:
        assert Catalog(catalog_root).get("ghost") is None

    def test_require_unknown_names_id(self, catalog_root: Path) -> None:
        with pytest.raises(CatalogError, match="ghost"):
            Catalog(catalog_root).require("ghost")

    def test_get_all_sorted_by_priority_then_id(self, catalog_root: Path) -> None:
        write_bundle(catalog_root, "b", descriptor={"priority": 1})
        write_bundle(catalog_root, "a", descriptor={"priority": 1})
        write_bundle(catalog_root, "top", descriptor={"priority": 50})

        assert [m.id for m in Catalog(catalog_root).get_all()] == ["top", "a", "b"]

    def test_get_by_category_accepts_enum_string_and_alias(self, catalog_root: Path) -> None:
        write_bundle(catalog_root, "pg", category="databases")
        write_bundle(catalog_root, "other")
        catalog = Catalog(catalog_root)

        assert [m.id for m in catalog.get_by_category(Category.DATABASE)] == ["pg"]
        assert [m.id for m in catalog.get_by_category("database")] == ["pg"]
        assert [m.id for m in catalog.get_by_category("databases")] == ["pg"]

    def test_get_by_unknown_category_raises(self, catalog_root: Path) -> None:
        with pytest.raises(ValueError, match="Unknown category"):
            Catalog(catalog_root).get_by_category("spaceships")


class TestCompatibility:
    def test_mutual_conflict_reported_once(self, catalog_root: Path) -> None:
        write_bundle(catalog_root, "a", descriptor={"conflicts": ["b"]})
        write_bundle(catalog_root, "b", descriptor={"conflicts": ["a"]})

        report = Catalog(catalog_root).validate_compatibility(["a", "b"])

        assert report.compatible is False
        assert report.conflicts == (("a", "b"),)

    def test_conflict_with_unselected_bundle_ignored(self, catalog_root: Path) -> None:
        write_bundle(catalog_root, "a", descriptor={"conflicts": ["b"]})
        write_bundle(catalog_root, "b")

        assert Catalog(catalog_root).validate_compatibility(["a"]).compatible

    def test_missing_dependency_is_advisory(self, catalog_root: Path) -> None:
        write_bundle(catalog_root, "ui", descriptor={"dependencies": ["react"]})
        write_bundle(catalog_root, "react")

        report = Catalog(catalog_root).validate_compatibility(["ui"])

        assert report.compatible
        assert report.missing_dependencies == (("ui", "react"),)
        assert report.messages() == ["ui requires react"]

    def test_unknown_references_reported(self, catalog_root: Path) -> None:
        write_bundle(catalog_root, "a", descriptor={"conflicts": ["ghost"], "dependencies": ["phantom"]})

        report = Catalog(catalog_root).validate_compatibility(["a"])

        assert report.unknown_references == (("a", "ghost"), ("a", "phantom"))
        assert report.compatible


def test_order_by_priority_is_stable() -> None:
    items = [("x", 1), ("y", 5), ("z", 1)]

    assert order_by_priority(items, key=lambda i: i[1]) == [("y", 5), ("x", 1), ("z", 1)]
