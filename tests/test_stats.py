"""Tests for perfmetrics.stats: summary statistics over samples."""

from __future__ import annotations

import math
import statistics
import unittest

from perfmetrics.stats import (
    SummaryStats,
    maximum,
    mean,
    minimum,
    std_deviation,
    summarize,
)


class TestMean(unittest.TestCase):
    """Tests for mean()."""

    def test_mean_basic(self) -> None:
        self.assertAlmostEqual(mean([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]), 5.0)

    def test_mean_single_value(self) -> None:
        self.assertEqual(mean([42.0]), 42.0)

    def test_mean_empty_is_none(self) -> None:
        self.assertIsNone(mean([]))

    def test_mean_matches_arithmetic_average(self) -> None:
        values = [0.1, 0.2, 0.3, 10.5, -3.25]
        self.assertAlmostEqual(mean(values), sum(values) / len(values), places=12)


class TestStdDeviation(unittest.TestCase):
    """Tests for std_deviation()."""

    def test_population_not_sample(self) -> None:
        """Known example: population stdev is exactly 2, sample stdev is not."""
        values = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]
        self.assertAlmostEqual(std_deviation(values), 2.0, places=12)
        self.assertNotAlmostEqual(std_deviation(values), statistics.stdev(values), places=3)

    def test_matches_pstdev(self) -> None:
        values = [1.5, 2.25, 9.0, 0.0, 3.75]
        self.assertAlmostEqual(std_deviation(values), statistics.pstdev(values), places=12)

    def test_constant_samples(self) -> None:
        self.assertEqual(std_deviation([5.0, 5.0, 5.0]), 0.0)

    def test_single_value(self) -> None:
        self.assertEqual(std_deviation([3.0]), 0.0)

    def test_empty_is_none(self) -> None:
        self.assertIsNone(std_deviation([]))

    def test_uses_mean_of_same_samples(self) -> None:
        values = [1.0, 2.0, 3.0, 4.0]
        m = mean(values)
        assert m is not None
        expected = math.sqrt(sum((m - v) ** 2 for v in values) / len(values))
        self.assertAlmostEqual(std_deviation(values), expected, places=12)


class TestMaxMin(unittest.TestCase):
    """Tests for maximum() and minimum()."""

    def test_basic(self) -> None:
        values = [3.0, -1.0, 7.5, 2.0]
        self.assertEqual(maximum(values), 7.5)
        self.assertEqual(minimum(values), -1.0)

    def test_bounds_every_element(self) -> None:
        values = [0.3, 12.0, -4.0, 5.5, 5.5, 0.0]
        hi = maximum(values)
        lo = minimum(values)
        assert hi is not None and lo is not None
        for v in values:
            self.assertGreaterEqual(hi, v)
            self.assertLessEqual(lo, v)

    def test_empty_is_none(self) -> None:
        self.assertIsNone(maximum([]))
        self.assertIsNone(minimum([]))

    def test_nan_is_ignored(self) -> None:
        """Like IEEE fmax/fmin, a NaN operand loses to a number."""
        values = [float("nan"), 1.0, float("nan"), 3.0]
        self.assertEqual(maximum(values), 3.0)
        self.assertEqual(minimum(values), 1.0)

    def test_nan_last(self) -> None:
        self.assertEqual(maximum([2.0, float("nan")]), 2.0)
        self.assertEqual(minimum([2.0, float("nan")]), 2.0)

    def test_all_nan(self) -> None:
        self.assertTrue(math.isnan(maximum([float("nan"), float("nan")])))
        self.assertTrue(math.isnan(minimum([float("nan")])))

    def test_infinities(self) -> None:
        values = [float("-inf"), 0.0, float("inf")]
        self.assertEqual(maximum(values), float("inf"))
        self.assertEqual(minimum(values), float("-inf"))


class TestSummarize(unittest.TestCase):
    """Tests for summarize()."""

    def test_summarize_constant(self) -> None:
        self.assertEqual(
            summarize([5.0, 5.0, 5.0]),
            SummaryStats(n=3, mean=5.0, std_dev=0.0, max=5.0, min=5.0),
        )

    def test_summarize_varied(self) -> None:
        s = summarize([1.0, 2.0, 3.0])
        self.assertEqual(s.n, 3)
        self.assertAlmostEqual(s.mean, 2.0)
        self.assertAlmostEqual(s.std_dev, math.sqrt(2.0 / 3.0))
        self.assertEqual(s.max, 3.0)
        self.assertEqual(s.min, 1.0)

    def test_summarize_empty_raises(self) -> None:
        with self.assertRaises(ValueError):
            summarize([])

    def test_deterministic(self) -> None:
        values = [0.1, 0.7, 0.2, 0.9]
        self.assertEqual(summarize(values), summarize(list(values)))


if __name__ == "__main__":
    unittest.main()
