"""Summary statistics for performance test samples.

Reduces the samples collected over a test's iterations to mean,
population standard deviation, maximum and minimum.  Pure Python,
no external dependencies.

The max/min reductions follow IEEE 754 ``fmax``/``fmin`` semantics:
when one operand is NaN the other one is returned, so NaN only comes
out of a reduction whose samples are all NaN.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import reduce
from typing import Sequence


# ---------------------------------------------------------------------------
# Reductions
# ---------------------------------------------------------------------------


def mean(samples: Sequence[float]) -> float | None:
    """Arithmetic mean of *samples*, or ``None`` if there are none."""
    if not samples:
        return None
    return math.fsum(samples) / len(samples)


def std_deviation(samples: Sequence[float]) -> float | None:
    """Population standard deviation of *samples* (divides by N).

    Computed around :func:`mean` of the same samples.  Returns
    ``None`` if there are no samples.
    """
    m = mean(samples)
    if m is None:
        return None
    variance = math.fsum((m - value) ** 2 for value in samples) / len(samples)
    return math.sqrt(variance)


def _fmax(a: float, b: float) -> float:
    if math.isnan(a):
        return b
    if math.isnan(b):
        return a
    return a if a >= b else b


def _fmin(a: float, b: float) -> float:
    if math.isnan(a):
        return b
    if math.isnan(b):
        return a
    return a if a <= b else b


def maximum(samples: Sequence[float]) -> float | None:
    """Largest sample, ignoring NaN unless every sample is NaN."""
    if not samples:
        return None
    return reduce(_fmax, samples)


def minimum(samples: Sequence[float]) -> float | None:
    """Smallest sample, ignoring NaN unless every sample is NaN."""
    if not samples:
        return None
    return reduce(_fmin, samples)


# ---------------------------------------------------------------------------
# Combined summary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SummaryStats:
    """Mean, standard deviation and range of a sample."""

    n: int
    mean: float
    std_dev: float
    max: float
    min: float


def summarize(samples: Sequence[float]) -> SummaryStats:
    """Reduce a non-empty sample to :class:`SummaryStats`.

    Raises:
        ValueError: If *samples* is empty.
    """
    if not samples:
        raise ValueError("Cannot summarize an empty sample")

    m = mean(samples)
    sd = std_deviation(samples)
    hi = maximum(samples)
    lo = minimum(samples)
    # Non-empty input guarantees every reduction produced a value.
    assert m is not None and sd is not None and hi is not None and lo is not None
    return SummaryStats(n=len(samples), mean=m, std_dev=sd, max=hi, min=lo)
