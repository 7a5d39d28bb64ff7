"""Terminal display formatting for metrics reports and the test catalog.

Produces aligned plain-text tables.  No external dependencies.
"""

from __future__ import annotations

import math
from typing import Mapping

from perfmetrics.catalog import CatalogEntry
from perfmetrics.model import DEFAULT_TIMEOUT_ALLOWANCE, calc_timeout
from perfmetrics.report import MetricsReport


def _format_number(value: float, precision: int = 3) -> str:
    """Format a sample value, switching to exponent form for large values."""
    if math.isnan(value):
        return "N/A"
    if abs(value) >= 1e6:
        return f"{value:.{precision}e}"
    return f"{value:.{precision}f}"


def format_report(report: MetricsReport) -> str:
    """Format a report as a provenance header and a results table."""
    lines = [
        f"Revision: {report.git_human_readable or '?'} ({report.git_revision or '?'})",
        f"Date:     {report.date or '?'}",
        "",
    ]

    if not report.results:
        lines.append("No results.")
        return "\n".join(lines)

    headers = ("Test", "Mean", "Std dev", "Min", "Max")
    rows = [
        (
            r.name,
            _format_number(r.mean),
            _format_number(r.std_dev),
            _format_number(r.min),
            _format_number(r.max),
        )
        for r in report.results
    ]
    widths = [max(len(h), *(len(row[i]) for row in rows)) for i, h in enumerate(headers)]

    def _row(cells: tuple[str, ...]) -> str:
        first = cells[0].ljust(widths[0])
        rest = [c.rjust(w) for c, w in zip(cells[1:], widths[1:])]
        return "  ".join([first, *rest])

    lines.append(_row(headers))
    lines.append("  ".join("─" * w for w in widths))
    lines.extend(_row(row) for row in rows)
    lines.append("")
    lines.append(f"{len(report.results)} tests")
    return "\n".join(lines)


def format_catalog(
    entries: tuple[CatalogEntry, ...] | list[CatalogEntry],
    *,
    bound: Mapping[str, object] | None = None,
    allowance: int = DEFAULT_TIMEOUT_ALLOWANCE,
) -> str:
    """Format catalog entries with their control and deadline.

    Entries whose probe kind is missing from *bound* are marked
    ``[unbound]``.  When *bound* is ``None`` no marking is done.
    """
    if not entries:
        return "No tests."

    name_width = max(len(e.name) for e in entries)
    lines: list[str] = []
    for entry in entries:
        deadline = calc_timeout(entry.control, allowance)
        line = (
            f"{entry.name:{name_width}s}  {entry.kind:15s} "
            f"timeout {deadline:>5d}s  ({entry.control})"
        )
        if bound is not None and entry.kind not in bound:
            line += "  [unbound]"
        lines.append(line)
    return "\n".join(lines)
