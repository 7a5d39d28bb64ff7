"""Benchmark sweep driver.

Orchestrates:
1. Report creation with provenance (revision and host date)
2. Optional setup hook
3. Sequential, timeout-supervised execution of the filtered tests
4. Fail-fast abort on the first timeout or failure
5. Optional cleanup hook, run even after an abort

Results are recorded in test iteration order.  Results collected before
an abort are kept, and the report is returned either way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from perfmetrics import host
from perfmetrics.config import RunConfig
from perfmetrics.executor import PerformanceTestError, run_test_with_timeout
from perfmetrics.registry import Registry
from perfmetrics.report import MetricsReport

log = logging.getLogger("perfmetrics")


# ---------------------------------------------------------------------------
# Progress callback
# ---------------------------------------------------------------------------


@dataclass
class RunProgress:
    """Progress info passed to the callback."""

    phase: str  # "running", "recorded", "aborted"
    test: str
    index: int  # 1-based
    total: int
    detail: str = ""


# Type alias for the progress callback.
ProgressCallback = Any  # Callable[[RunProgress], None] | None


@dataclass
class RunOutcome:
    """The report of a sweep and how it ended."""

    report: MetricsReport
    error: PerformanceTestError | None = None

    @property
    def aborted(self) -> bool:
        """True if a test failure stopped the sweep early."""
        return self.error is not None


# ---------------------------------------------------------------------------
# PerfRunner
# ---------------------------------------------------------------------------


class PerfRunner:
    """Runs the tests of a registry and assembles the metrics report.

    Usage::

        registry = build_registry(config.probe_callables())
        outcome = PerfRunner(registry, config).run()
        print(outcome.report.to_json())
    """

    def __init__(
        self,
        registry: Registry,
        config: RunConfig,
        *,
        date_provider: Callable[[], str] | None = None,
        setup: Callable[[], None] | None = None,
        cleanup: Callable[[], None] | None = None,
        progress_callback: ProgressCallback = None,
    ) -> None:
        self.registry = registry
        self.config = config
        self.date_provider = date_provider
        self.setup = setup
        self.cleanup = cleanup
        self.progress: Any = progress_callback or self._default_progress

    def new_report(self) -> MetricsReport:
        """Create an empty report stamped with provenance."""
        return MetricsReport(
            git_human_readable=self.config.git_human_readable or host.git_human_readable(),
            git_revision=self.config.git_revision or host.git_revision(),
            date=(self.date_provider or host.date)(),
        )

    def run(self) -> RunOutcome:
        """Execute the sweep.

        Returns:
            RunOutcome with the report and the error that aborted the
            sweep, if any.
        """
        report = self.new_report()
        outcome = RunOutcome(report=report)

        selected = list(self.registry.iter(self.config.test_filter))
        total = len(selected)
        if self.config.test_filter:
            log.info(
                "Running %d of %d tests matching '%s'",
                total,
                len(self.registry),
                self.config.test_filter,
            )
        else:
            log.info("Running %d tests", total)

        if self.setup is not None:
            self.setup()
        try:
            for index, test in enumerate(selected, start=1):
                self.progress(RunProgress("running", test.name, index, total))
                try:
                    result = run_test_with_timeout(
                        test, allowance=self.config.timeout_allowance
                    )
                except PerformanceTestError as exc:
                    log.error(
                        "Aborting test due to error: '%s' in '%s' (deadline %ds)",
                        exc.kind,
                        test.name,
                        test.calc_timeout(self.config.timeout_allowance),
                    )
                    outcome.error = exc
                    self.progress(RunProgress("aborted", test.name, index, total, str(exc)))
                    break
                report.add(result)
                self.progress(RunProgress("recorded", test.name, index, total))
        finally:
            if self.cleanup is not None:
                self.cleanup()

        log.info(
            "Recorded %d of %d tests%s",
            len(report.results),
            total,
            " (aborted)" if outcome.aborted else "",
        )
        return outcome

    @staticmethod
    def _default_progress(progress: RunProgress) -> None:
        """Default progress callback: log at DEBUG."""
        line = f"  [{progress.index}/{progress.total}] {progress.test:60s} {progress.phase}"
        if progress.detail:
            line += f" ({progress.detail})"
        log.debug(line)
