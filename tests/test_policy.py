"""Tests for pharmafind.policy.SearchPolicy."""

from pathlib import Path

import pytest

from pharmafind import InvalidInput, SearchPolicy

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "search_policy.yaml"


class TestSearchPolicy:
    def test_defaults(self):
        policy = SearchPolicy()
        assert policy.default_radius_km == 10.0
        assert policy.max_radius_km == 100.0
        assert policy.low_stock_threshold == 20
        assert policy.expiring_soon_days == 30
        assert policy.display_precision == 1

    def test_shipped_config_matches_defaults(self):
        assert SearchPolicy.from_yaml(CONFIG_PATH) == SearchPolicy()

    def test_partial_yaml_keeps_defaults(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("default_radius_km: 5\nlow_stock_threshold: 10\n")
        policy = SearchPolicy.from_yaml(path)
        assert policy.default_radius_km == 5
        assert policy.low_stock_threshold == 10
        assert policy.max_radius_km == 100.0

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("")
        assert SearchPolicy.from_yaml(path) == SearchPolicy()

    def test_non_mapping_yaml_raises(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(InvalidInput):
            SearchPolicy.from_yaml(path)

    def test_unknown_key_raises(self):
        with pytest.raises(InvalidInput) as exc:
            SearchPolicy.from_mapping({"default_radius_km": 5, "sort_by": "price"})
        assert exc.value.field == "sort_by"

    def test_default_above_max_raises(self):
        with pytest.raises(InvalidInput):
            SearchPolicy(default_radius_km=50, max_radius_km=20)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"default_radius_km": -1},
            {"low_stock_threshold": 0},
            {"expiring_soon_days": -3},
        ],
    )
    def test_invalid_values_raise(self, overrides):
        with pytest.raises(InvalidInput):
            SearchPolicy(**overrides)
