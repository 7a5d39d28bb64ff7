"""Timeout-supervised execution of a single performance test.

Each test runs in its own daemon thread so that an exception escaping
the probe is converted into a :class:`PerformanceTestFailed` instead of
taking down the driver.  The caller waits for the outcome for at most
the test's deadline, ``(test_time + allowance) * test_iterations``
seconds, and gets a :class:`PerformanceTestTimeout` if it expires.

A timed-out thread is not killed.  Its cancel event is set so it stops
before the next iteration, but a probe stuck inside one call keeps
running until it returns, and any child processes it started are left
alone.  Probes that need to be killable should run out of process (see
:class:`perfmetrics.probes.CommandProbe`).
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Union

from perfmetrics.model import DEFAULT_TIMEOUT_ALLOWANCE, IterationCancelled, PerformanceTest
from perfmetrics.report import PerformanceTestResult

log = logging.getLogger("perfmetrics")


# ---------------------------------------------------------------------------
# Failure taxonomy
# ---------------------------------------------------------------------------


class PerformanceTestError(Exception):
    """A test did not produce a result.  Aborts the remaining run."""

    kind = "TestError"

    def __init__(self, test_name: str, message: str) -> None:
        super().__init__(message)
        self.test_name = test_name


class PerformanceTestTimeout(PerformanceTestError):
    """No outcome arrived before the test's deadline."""

    kind = "TestTimeout"

    def __init__(self, test_name: str, timeout: float) -> None:
        super().__init__(test_name, f"Test '{test_name}' time-out after {timeout:g} seconds")
        self.timeout = timeout


class PerformanceTestFailed(PerformanceTestError):
    """The probe terminated abnormally."""

    kind = "TestFailed"

    def __init__(self, test_name: str, cause: BaseException) -> None:
        super().__init__(
            test_name,
            f"Test '{test_name}' failed: {type(cause).__name__}: {cause}",
        )
        self.cause = cause


_Outcome = Union[PerformanceTestResult, PerformanceTestFailed]


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def run_test_with_timeout(
    test: PerformanceTest,
    *,
    allowance: int = DEFAULT_TIMEOUT_ALLOWANCE,
    timeout: float | None = None,
) -> PerformanceTestResult:
    """Run *test* in a worker thread and wait for its result.

    Args:
        test: The test to run.
        allowance: Per-iteration setup/cleanup seconds used to compute
            the deadline.
        timeout: Explicit deadline in seconds, overriding the computed
            one.

    Returns:
        The test's summary result.

    Raises:
        PerformanceTestTimeout: If the deadline elapsed first.
        PerformanceTestFailed: If the probe raised.
    """
    deadline = timeout if timeout is not None else test.calc_timeout(allowance)
    outcomes: queue.Queue[_Outcome] = queue.Queue(maxsize=1)
    cancel = threading.Event()

    def _worker() -> None:
        log.info("Test '%s' running .. (%s)", test.name, test.control)
        try:
            result = test.run(cancel=cancel)
        except IterationCancelled:
            log.debug("Test '%s' stopped after its deadline", test.name)
            return
        except BaseException as exc:  # noqa: BLE001
            # Anything escaping the probe, SystemExit included, is a failure.
            log.debug("Test '%s' raised", test.name, exc_info=True)
            outcomes.put(PerformanceTestFailed(test.name, exc))
            return
        if cancel.is_set():
            log.debug("Discarding late result of test '%s'", test.name)
            return
        log.info(
            "Test '%s' .. ok: mean = %s, std_dev = %s",
            result.name,
            result.mean,
            result.std_dev,
        )
        outcomes.put(result)

    worker = threading.Thread(target=_worker, name=f"perfmetrics-{test.name}", daemon=True)
    worker.start()

    try:
        outcome = outcomes.get(timeout=deadline)
    except queue.Empty:
        cancel.set()
        error = PerformanceTestTimeout(test.name, deadline)
        log.error("[Error] %s", error)
        raise error from None

    if isinstance(outcome, PerformanceTestFailed):
        log.error("[Error] %s", outcome)
        raise outcome
    return outcome
