"""Tests for perfmetrics.report: the JSON metrics report."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from perfmetrics.report import MetricsReport, PerformanceTestResult, load_report, save_report
from perfmetrics.stats import summarize


def _report() -> MetricsReport:
    report = MetricsReport(
        git_human_readable="v30.0-12-gabcdef",
        git_revision="abcdef0123456789",
        date="Sat Oct 17 12:00:00 UTC 2026",
    )
    report.add(PerformanceTestResult("performance_boot_time", 0.5, 0.01, 0.52, 0.48))
    report.add(PerformanceTestResult("performance_boot_time_pmem", 0.4, 0.02, 0.43, 0.38))
    return report


class TestPerformanceTestResult(unittest.TestCase):
    """Tests for PerformanceTestResult."""

    def test_from_stats(self) -> None:
        result = PerformanceTestResult.from_stats("t", summarize([1.0, 2.0, 3.0]))
        self.assertEqual(result.name, "t")
        self.assertAlmostEqual(result.mean, 2.0)
        self.assertEqual(result.max, 3.0)
        self.assertEqual(result.min, 1.0)

    def test_to_dict_keys(self) -> None:
        data = PerformanceTestResult("t", 1.0, 0.0, 1.0, 1.0).to_dict()
        self.assertEqual(list(data), ["name", "mean", "std_dev", "max", "min"])

    def test_from_dict_coerces_ints(self) -> None:
        result = PerformanceTestResult.from_dict(
            {"name": "t", "mean": 1, "std_dev": 0, "max": 2, "min": 0}
        )
        self.assertIsInstance(result.mean, float)
        self.assertEqual(result.max, 2.0)

    def test_from_dict_missing_field(self) -> None:
        with self.assertRaises(KeyError):
            PerformanceTestResult.from_dict({"name": "t", "mean": 1.0})


class TestMetricsReport(unittest.TestCase):
    """Tests for MetricsReport."""

    def test_empty_defaults(self) -> None:
        report = MetricsReport()
        self.assertEqual(report.results, [])
        self.assertEqual(
            report.to_dict(),
            {"git_human_readable": "", "git_revision": "", "date": "", "results": []},
        )

    def test_add_preserves_order(self) -> None:
        self.assertEqual(
            _report().names(),
            ["performance_boot_time", "performance_boot_time_pmem"],
        )

    def test_to_json_layout(self) -> None:
        text = _report().to_json()
        data = json.loads(text)
        self.assertEqual(
            list(data), ["git_human_readable", "git_revision", "date", "results"]
        )
        self.assertEqual(data["results"][0]["name"], "performance_boot_time")
        self.assertEqual(data["results"][1]["min"], 0.38)
        # Pretty-printed with two-space indentation.
        self.assertIn('\n  "git_revision": "abcdef0123456789"', text)

    def test_json_roundtrip(self) -> None:
        report = _report()
        self.assertEqual(MetricsReport.from_json(report.to_json()), report)

    def test_from_json_not_object(self) -> None:
        with self.assertRaises(ValueError):
            MetricsReport.from_json("[1, 2, 3]")

    def test_from_json_invalid(self) -> None:
        with self.assertRaises(ValueError):
            MetricsReport.from_json("{not json")

    def test_from_dict_missing_provenance(self) -> None:
        report = MetricsReport.from_dict({"results": []})
        self.assertEqual(report.git_revision, "")
        self.assertEqual(report.date, "")


class TestReportIO(unittest.TestCase):
    """Tests for save_report() and load_report()."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_save_and_load(self) -> None:
        path = self.tmpdir / "nested" / "report.json"
        save_report(path, _report())
        self.assertTrue(path.exists())
        self.assertTrue(path.read_text(encoding="utf-8").endswith("}\n"))
        self.assertEqual(load_report(path), _report())

    def test_load_missing(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_report(self.tmpdir / "missing.json")

    def test_load_not_object(self) -> None:
        path = self.tmpdir / "bad.json"
        path.write_text('"text"', encoding="utf-8")
        with self.assertRaises(ValueError):
            load_report(path)


if __name__ == "__main__":
    unittest.main()
