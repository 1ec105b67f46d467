"""
Unit tests for streaming statistics.
"""

import pytest

from memcapture.models.statistics import StatAccumulator, round_half_away


@pytest.mark.unit
class TestRoundHalfAway:
    """Test cases for rounding used throughout the report."""

    @pytest.mark.parametrize(
        "value, expected",
        [(0.5, 1), (1.5, 2), (2.5, 3), (2.4, 2), (-0.5, -1), (-2.5, -3), (0.0, 0)],
    )
    def test_halves_round_away_from_zero(self, value, expected):
        assert round_half_away(value) == expected


@pytest.mark.unit
class TestStatAccumulator:
    """Test cases for StatAccumulator."""

    def test_empty_accumulator(self):
        """An accumulator without data reports zeros."""
        acc = StatAccumulator("PSS")

        assert acc.count == 0
        assert acc.min is None
        assert acc.max is None
        assert acc.average == 0.0
        assert acc.to_dict() == {"min": 0, "max": 0, "average": 0}

    def test_running_statistics(self):
        acc = StatAccumulator("PSS")
        for value in (10, 30, 20):
            acc.add_data_point(value)

        assert acc.count == 3
        assert acc.min == 10
        assert acc.max == 30
        assert acc.average == pytest.approx(20.0)

    def test_first_point_sets_min_and_max(self):
        """A first value larger than zero still becomes the minimum."""
        acc = StatAccumulator("Free_Pages")
        acc.add_data_point(500)

        assert acc.min == 500
        assert acc.max == 500

    def test_negative_values(self):
        """Negative values are valid (e.g. CMA borrowed by the kernel)."""
        acc = StatAccumulator("Value_KB")
        acc.add_data_point(-100)
        acc.add_data_point(50)

        assert acc.min == -100
        assert acc.max == 50
        assert acc.average == pytest.approx(-25.0)

    def test_rounded_view(self):
        acc = StatAccumulator("Fragmentation_%")
        acc.add_data_point(41.5)
        acc.add_data_point(83.4)

        assert acc.to_dict() == {"min": 42, "max": 83, "average": 62}

    @pytest.mark.parametrize(
        "values",
        [[5], [1, 2, 3, 4], [0.1, 0.2, 0.7], [-3, 9, 2, 2, 7], [10**12, 1, 10**6]],
    )
    def test_average_lies_between_min_and_max(self, values):
        acc = StatAccumulator("Value_KB")
        for value in values:
            acc.add_data_point(value)

        assert acc.min <= acc.average <= acc.max
        assert acc.average == acc.total / acc.count
