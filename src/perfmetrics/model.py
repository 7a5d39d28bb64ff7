"""Performance test descriptors and their control parameters.

A :class:`PerformanceTest` pairs a unique name with a probe (a callable
taking a :class:`PerformanceTestControl` and returning one sample) and
the control that governs how often and how long the probe runs.
Descriptors compare and hash by name only.
"""

from __future__ import annotations

import dataclasses
import enum
import threading
from dataclasses import dataclass, field, fields
from typing import Any, Callable

from perfmetrics.report import PerformanceTestResult
from perfmetrics.stats import summarize

# Extra seconds per iteration granted for setup/cleanup outside the
# measured operation.
DEFAULT_TIMEOUT_ALLOWANCE = 20

DEFAULT_TEST_TIME = 10
DEFAULT_TEST_ITERATIONS = 30


class FioOps(enum.Enum):
    """I/O pattern driven by the block-I/O probes."""

    READ = "read"
    RANDOM_READ = "randread"
    WRITE = "write"
    RANDOM_WRITE = "randwrite"

    def __str__(self) -> str:
        return self.value


class IterationCancelled(Exception):
    """Raised inside a test run when its supervisor gave up waiting."""


# ---------------------------------------------------------------------------
# PerformanceTestControl
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PerformanceTestControl:
    """Configuration for one probe.

    ``test_time`` and ``test_iterations`` are always present; the
    remaining fields are probe-specific and ``None`` when unused.
    """

    test_time: int = DEFAULT_TEST_TIME  # seconds per iteration
    test_iterations: int = DEFAULT_TEST_ITERATIONS
    queue_num: int | None = None  # queue pairs for net probes
    queue_size: int | None = None
    net_rx: bool | None = None  # True = receive, False = transmit
    fio_ops: FioOps | None = None

    def __post_init__(self) -> None:
        for name in ("test_time", "test_iterations"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        for name in ("queue_num", "queue_size"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if self.net_rx is not None and not isinstance(self.net_rx, bool):
            raise ValueError(f"net_rx must be true or false, got {self.net_rx!r}")
        if self.test_iterations < 1:
            raise ValueError(f"test_iterations must be >= 1, got {self.test_iterations}")
        if self.test_time < 0:
            raise ValueError(f"test_time cannot be negative, got {self.test_time}")
        if isinstance(self.fio_ops, str):
            # Accept the fio spelling, e.g. from a YAML profile.
            object.__setattr__(self, "fio_ops", FioOps(self.fio_ops))
        elif self.fio_ops is not None and not isinstance(self.fio_ops, FioOps):
            raise ValueError(f"fio_ops must be one of the fio patterns, got {self.fio_ops!r}")

    def __str__(self) -> str:
        output = f"test_time = {self.test_time}s, test_iterations = {self.test_iterations}"
        if self.queue_num is not None:
            output += f", queue_num = {self.queue_num}"
        if self.queue_size is not None:
            output += f", queue_size = {self.queue_size}"
        if self.net_rx is not None:
            output += f", net_rx = {str(self.net_rx).lower()}"
        if self.fio_ops is not None:
            output += f", fio_ops = {self.fio_ops}"
        return output

    def replace(self, **changes: Any) -> PerformanceTestControl:
        """Return a copy with *changes* applied.

        Raises:
            ValueError: If a key is not a control field or a value is invalid.
        """
        unknown = sorted(set(changes) - control_field_names())
        if unknown:
            raise ValueError(f"Unknown control field(s): {', '.join(unknown)}")
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict (sparse: omits unset options)."""
        d: dict[str, Any] = {
            "test_time": self.test_time,
            "test_iterations": self.test_iterations,
        }
        if self.queue_num is not None:
            d["queue_num"] = self.queue_num
        if self.queue_size is not None:
            d["queue_size"] = self.queue_size
        if self.net_rx is not None:
            d["net_rx"] = self.net_rx
        if self.fio_ops is not None:
            d["fio_ops"] = self.fio_ops.value
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PerformanceTestControl:
        """Deserialize from a dict, rejecting unknown keys."""
        return cls().replace(**data)


def control_field_names() -> set[str]:
    """Names of all :class:`PerformanceTestControl` fields."""
    return {f.name for f in fields(PerformanceTestControl)}


def calc_timeout(
    control: PerformanceTestControl,
    allowance: int = DEFAULT_TIMEOUT_ALLOWANCE,
) -> int:
    """Deadline in seconds for a test running under *control*.

    Each iteration gets its ``test_time`` plus *allowance* seconds to
    cover setup and cleanup.
    """
    return (control.test_time + allowance) * control.test_iterations


# ---------------------------------------------------------------------------
# PerformanceTest
# ---------------------------------------------------------------------------


Probe = Callable[[PerformanceTestControl], float]


@dataclass(frozen=True, eq=False)
class PerformanceTest:
    """A named probe with its control parameters.

    Identity is the name: two descriptors with the same name are equal
    even if their probe or control differ.
    """

    name: str
    probe: Probe
    control: PerformanceTestControl = field(default_factory=PerformanceTestControl)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PerformanceTest):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def collect_samples(self, cancel: threading.Event | None = None) -> list[float]:
        """Call the probe ``test_iterations`` times and return the samples.

        Raises:
            IterationCancelled: If *cancel* is set before an iteration starts.
        """
        samples: list[float] = []
        for _ in range(self.control.test_iterations):
            if cancel is not None and cancel.is_set():
                raise IterationCancelled(self.name)
            samples.append(float(self.probe(self.control)))
        return samples

    def run(self, cancel: threading.Event | None = None) -> PerformanceTestResult:
        """Collect all samples and reduce them to a result."""
        samples = self.collect_samples(cancel)
        return PerformanceTestResult.from_stats(self.name, summarize(samples))

    def calc_timeout(self, allowance: int = DEFAULT_TIMEOUT_ALLOWANCE) -> int:
        """Deadline in seconds for the whole test."""
        return calc_timeout(self.control, allowance)
