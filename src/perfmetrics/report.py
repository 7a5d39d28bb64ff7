"""Metrics report data structures and serialization.

Hierarchy::

    MetricsReport (one per invocation)
      → git_human_readable, git_revision, date
      → results: list[PerformanceTestResult]

The report is serialized as pretty-printed JSON::

    {
      "git_human_readable": "v30.0-12-gabcdef",
      "git_revision": "abcdef...",
      "date": "Sat Oct 17 12:00:00 UTC 2026",
      "results": [
        {"name": "...", "mean": 1.0, "std_dev": 0.0, "max": 1.0, "min": 1.0}
      ]
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from perfmetrics.stats import SummaryStats

log = logging.getLogger("perfmetrics")


# ---------------------------------------------------------------------------
# Per-test result
# ---------------------------------------------------------------------------


@dataclass
class PerformanceTestResult:
    """Summary statistics of one successfully completed test."""

    name: str
    mean: float
    std_dev: float
    max: float
    min: float

    @classmethod
    def from_stats(cls, name: str, stats: SummaryStats) -> PerformanceTestResult:
        """Build a result from the reduced samples of test *name*."""
        return cls(
            name=name,
            mean=stats.mean,
            std_dev=stats.std_dev,
            max=stats.max,
            min=stats.min,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "name": self.name,
            "mean": self.mean,
            "std_dev": self.std_dev,
            "max": self.max,
            "min": self.min,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PerformanceTestResult:
        """Deserialize from a dict."""
        return cls(
            name=data["name"],
            mean=float(data["mean"]),
            std_dev=float(data["std_dev"]),
            max=float(data["max"]),
            min=float(data["min"]),
        )


# ---------------------------------------------------------------------------
# Run-level report
# ---------------------------------------------------------------------------


@dataclass
class MetricsReport:
    """Provenance and results of one benchmark sweep."""

    git_human_readable: str = ""
    git_revision: str = ""
    date: str = ""
    results: list[PerformanceTestResult] = field(default_factory=list)

    def add(self, result: PerformanceTestResult) -> None:
        """Append a result, preserving execution order."""
        self.results.append(result)

    def names(self) -> list[str]:
        """Names of the recorded tests, in order."""
        return [r.name for r in self.results]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "git_human_readable": self.git_human_readable,
            "git_revision": self.git_revision,
            "date": self.date,
            "results": [r.to_dict() for r in self.results],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MetricsReport:
        """Deserialize from a dict."""
        return cls(
            git_human_readable=data.get("git_human_readable", ""),
            git_revision=data.get("git_revision", ""),
            date=data.get("date", ""),
            results=[PerformanceTestResult.from_dict(r) for r in data.get("results", [])],
        )

    def to_json(self, indent: int = 2) -> str:
        """Serialize to pretty-printed JSON."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, text: str) -> MetricsReport:
        """Deserialize from JSON text."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"Report must be a JSON object, got {type(data).__name__}")
        return cls.from_dict(data)


# ---------------------------------------------------------------------------
# I/O functions
# ---------------------------------------------------------------------------


def save_report(path: Path, report: MetricsReport) -> None:
    """Write *report* as JSON to *path*, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(report.to_json() + "\n", encoding="utf-8")
    log.info("Wrote %d test results to %s", len(report.results), path)


def load_report(path: Path) -> MetricsReport:
    """Load a report previously written by :func:`save_report`.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file is not a JSON object.
    """
    if not path.exists():
        raise FileNotFoundError(f"Report not found: {path}")
    return MetricsReport.from_json(path.read_text(encoding="utf-8"))
