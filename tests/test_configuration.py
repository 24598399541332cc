"""Tests for layout configuration parsing."""

import pytest

from ilotplan.layout import LayoutConfiguration
from ilotplan.layout.types import DEFAULT_DISTRIBUTION


class TestDefaults:
    """Tests for the default configuration."""

    def test_values(self):
        config = LayoutConfiguration()
        assert config.distribution == DEFAULT_DISTRIBUTION == (10.0, 25.0, 30.0, 35.0)
        assert config.corridor_width == 1.5
        assert config.min_clearance == 0.5
        assert config.auto_generate_corridors is True
        assert config.space_optimization is True
        assert config.avoid_overlaps is True
        assert config.respect_constraints is True
        assert config.seed is None

    def test_size_categories(self):
        categories = LayoutConfiguration().size_categories()
        assert [c.key for c in categories] == ["size0to1", "size1to3", "size3to5", "size5to10"]
        assert [c.label for c in categories] == ["6-12", "12-25", "25-40", "40-80"]
        assert [c.target_percentage for c in categories] == [10.0, 25.0, 30.0, 35.0]
        assert categories[0].average_area == pytest.approx(9.0)


class TestFromDict:
    """Tests for LayoutConfiguration.from_dict."""

    def test_empty_dict_is_default(self):
        assert LayoutConfiguration.from_dict({}) == LayoutConfiguration()

    def test_camel_case_keys(self):
        config = LayoutConfiguration.from_dict({
            "ilotDistribution": {"size0to1": 40, "size1to3": 30, "size3to5": 20, "size5to10": 10},
            "corridorWidth": 2.0,
            "minClearance": 1.0,
            "autoGenerateCorridors": False,
            "spaceOptimization": False,
            "avoidOverlaps": False,
            "respectConstraints": False,
        })
        assert config.distribution == (40.0, 30.0, 20.0, 10.0)
        assert config.corridor_width == 2.0
        assert config.min_clearance == 1.0
        assert config.auto_generate_corridors is False
        assert config.space_optimization is False
        assert config.avoid_overlaps is False
        assert config.respect_constraints is False

    def test_snake_case_keys(self):
        config = LayoutConfiguration.from_dict({"corridor_width": 3, "min_clearance": 0, "seed": "12"})
        assert config.corridor_width == 3.0
        assert config.min_clearance == 0.0
        assert config.seed == 12

    def test_missing_distribution_keys_take_defaults(self):
        config = LayoutConfiguration.from_dict({"ilotDistribution": {"size3to5": 100}})
        assert config.distribution == (10.0, 25.0, 100.0, 35.0)

    def test_explicit_zero_share_is_kept(self):
        config = LayoutConfiguration.from_dict({
            "ilotDistribution": {"size0to1": 0, "size1to3": None, "size3to5": 50},
        })
        assert config.distribution == (0.0, 25.0, 50.0, 35.0)

    def test_missing_keys_with_custom_bands(self):
        config = LayoutConfiguration.from_dict({
            "sizeBands": [[1, 2, "small"], [2, 4, "medium"], [4, 8, "large"]],
            "ilotDistribution": {"size0to1": 20},
        })
        assert config.distribution == pytest.approx((20.0, 100.0 / 3, 100.0 / 3))

    def test_list_distribution(self):
        config = LayoutConfiguration.from_dict({"distribution": [25, 25, 25, 25]})
        assert config.distribution == (25.0, 25.0, 25.0, 25.0)

    def test_list_distribution_wrong_length(self):
        with pytest.raises(ValueError):
            LayoutConfiguration.from_dict({"distribution": [50, 50]})

    def test_zero_failure_limit_is_kept(self):
        assert LayoutConfiguration.from_dict({"maxConsecutiveFailures": 0}).max_consecutive_failures == 0
        assert LayoutConfiguration.from_dict({"maxConsecutiveFailures": -3}).max_consecutive_failures == 0

    def test_failure_limit_unset_by_default(self):
        assert LayoutConfiguration.from_dict({}).max_consecutive_failures is None
        assert LayoutConfiguration().max_consecutive_failures is None

    def test_flag_strings(self):
        config = LayoutConfiguration.from_dict({
            "autoGenerateCorridors": "false",
            "spaceOptimization": "False",
            "avoidOverlaps": "true",
            "respectConstraints": "0",
        })
        assert config.auto_generate_corridors is False
        assert config.space_optimization is False
        assert config.avoid_overlaps is True
        assert config.respect_constraints is False

    def test_numeric_flags(self):
        config = LayoutConfiguration.from_dict({"spaceOptimization": 0, "avoidOverlaps": 1})
        assert config.space_optimization is False
        assert config.avoid_overlaps is True

    def test_unrecognized_flag_string(self):
        with pytest.raises(ValueError, match="spaceOptimization"):
            LayoutConfiguration.from_dict({"spaceOptimization": "sometimes"})

    def test_custom_size_bands(self):
        config = LayoutConfiguration.from_dict({
            "sizeBands": [[1, 2, "small"], [2, 4, "large"]],
            "distribution": [50, 50],
        })
        assert [c.label for c in config.size_categories()] == ["small", "large"]


class TestValidation:
    """Tests for invalid configurations."""

    def test_non_positive_corridor_width(self):
        with pytest.raises(ValueError):
            LayoutConfiguration(corridor_width=0)

    def test_negative_clearance(self):
        with pytest.raises(ValueError):
            LayoutConfiguration(min_clearance=-1)

    def test_negative_failure_limit(self):
        with pytest.raises(ValueError):
            LayoutConfiguration(max_consecutive_failures=-1)

    def test_distribution_length_mismatch(self):
        with pytest.raises(ValueError):
            LayoutConfiguration(distribution=(100.0,))


class TestToDict:
    """Tests for LayoutConfiguration.to_dict."""

    def test_store_keys(self):
        data = LayoutConfiguration().to_dict()
        assert data["ilotDistribution"] == {
            "size0to1": 10.0,
            "size1to3": 25.0,
            "size3to5": 30.0,
            "size5to10": 35.0,
        }
        assert data["corridorWidth"] == 1.5
        assert data["minClearance"] == 0.5

    def test_from_dict_accepts_to_dict(self):
        config = LayoutConfiguration(distribution=(5, 15, 30, 50), seed=3, corridor_width=2.5)
        assert LayoutConfiguration.from_dict(config.to_dict()) == config
