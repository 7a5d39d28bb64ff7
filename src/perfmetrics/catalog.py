"""The built-in catalog of performance tests.

Each catalog entry names a test, the kind of probe that measures it and
the control it runs under.  Probe implementations live outside the
harness; :func:`build_registry` binds each probe kind to a callable and
registers the entries whose kind is bound.

Probe kinds:

- ``boot_time`` / ``boot_time_pmem``: seconds to boot a guest.
- ``net_latency``: virtio-net round-trip latency.
- ``net_throughput``: virtio-net bits per second; ``queue_num`` is the
  number of queue pairs, ``net_rx`` the direction.
- ``block_io``: virtio-blk bytes per second under ``fio_ops``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from perfmetrics.model import FioOps, PerformanceTest, PerformanceTestControl, Probe
from perfmetrics.registry import Registry

log = logging.getLogger("perfmetrics")

PROBE_KINDS = (
    "boot_time",
    "boot_time_pmem",
    "net_latency",
    "net_throughput",
    "block_io",
)


@dataclass(frozen=True)
class CatalogEntry:
    """A catalog test before its probe kind is bound."""

    name: str
    kind: str
    control: PerformanceTestControl

    def bind(self, probe: Probe, overrides: Mapping[str, Any] | None = None) -> PerformanceTest:
        """Create the test descriptor, applying control *overrides*."""
        control = self.control.replace(**overrides) if overrides else self.control
        return PerformanceTest(name=self.name, probe=probe, control=control)


def _net_throughput(name: str, queue_num: int, queue_size: int, rx: bool) -> CatalogEntry:
    return CatalogEntry(
        name,
        "net_throughput",
        PerformanceTestControl(queue_num=queue_num, queue_size=queue_size, net_rx=rx),
    )


def _block_io(name: str, queue_num: int, fio_ops: FioOps) -> CatalogEntry:
    return CatalogEntry(
        name,
        "block_io",
        PerformanceTestControl(queue_num=queue_num, queue_size=1024, fio_ops=fio_ops),
    )


CATALOG: tuple[CatalogEntry, ...] = (
    CatalogEntry(
        "performance_boot_time",
        "boot_time",
        PerformanceTestControl(test_time=2, test_iterations=10),
    ),
    CatalogEntry(
        "performance_boot_time_pmem",
        "boot_time_pmem",
        PerformanceTestControl(test_time=2, test_iterations=10),
    ),
    CatalogEntry("performance_virtio_net_latency", "net_latency", PerformanceTestControl()),
    _net_throughput("performance_virtio_net_throughput_bps_single_queue_rx", 1, 256, True),
    _net_throughput("performance_virtio_net_throughput_bps_single_queue_tx", 1, 256, False),
    _net_throughput("performance_virtio_net_throughput_bps_multi_queue_rx", 2, 1024, True),
    _net_throughput("performance_virtio_net_throughput_bps_multi_queue_tx", 2, 1024, False),
    _block_io("performance_block_io_bps_read", 1, FioOps.READ),
    _block_io("performance_block_io_bps_write", 1, FioOps.WRITE),
    _block_io("performance_block_io_bps_random_read", 1, FioOps.RANDOM_READ),
    _block_io("performance_block_io_bps_random_write", 1, FioOps.RANDOM_WRITE),
    _block_io("performance_block_io_bps_multi_queue_read", 2, FioOps.READ),
    _block_io("performance_block_io_bps_multi_queue_write", 2, FioOps.WRITE),
    _block_io("performance_block_io_bps_multi_queue_random_read", 2, FioOps.RANDOM_READ),
    _block_io("performance_block_io_bps_multi_queue_random_write", 2, FioOps.RANDOM_WRITE),
)


def catalog_names() -> list[str]:
    """Names of all catalog tests, in catalog order."""
    return [entry.name for entry in CATALOG]


def build_registry(
    probes: Mapping[str, Probe],
    *,
    overrides: Mapping[str, Mapping[str, Any]] | None = None,
    catalog: tuple[CatalogEntry, ...] = CATALOG,
) -> Registry:
    """Register every catalog entry whose probe kind is bound in *probes*.

    Args:
        probes: Probe callables keyed by probe kind.
        overrides: Control field overrides keyed by test name.
        catalog: Entries to register, in order.

    Raises:
        DuplicateTestError: If two entries share a name.
        ValueError: If an override names an unknown control field.
    """
    overrides = overrides or {}
    registry = Registry()
    for entry in catalog:
        probe = probes.get(entry.kind)
        if probe is None:
            log.debug("No probe bound for '%s', skipping %s", entry.kind, entry.name)
            continue
        registry.register(entry.bind(probe, overrides.get(entry.name)))
    return registry
