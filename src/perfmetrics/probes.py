"""Probes that take their measurement in an external command.

A :class:`CommandProbe` runs one command per iteration, passing the
test control through ``PERF_*`` environment variables, and reads the
sample from the last non-empty line of the command's stdout.  Running
the measurement out of process means a crashing or hanging probe is
killed with its whole process group instead of leaking into the
harness.
"""

from __future__ import annotations

import os
import signal
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from perfmetrics.logging import get_logger
from perfmetrics.model import DEFAULT_TIMEOUT_ALLOWANCE, PerformanceTestControl

log = get_logger("probes")


class ProbeError(RuntimeError):
    """A probe command failed to produce a sample."""


def control_env(control: PerformanceTestControl) -> dict[str, str]:
    """Environment variables describing *control* (set fields only)."""
    env = {
        "PERF_TEST_TIME": str(control.test_time),
        "PERF_TEST_ITERATIONS": str(control.test_iterations),
    }
    if control.queue_num is not None:
        env["PERF_QUEUE_NUM"] = str(control.queue_num)
    if control.queue_size is not None:
        env["PERF_QUEUE_SIZE"] = str(control.queue_size)
    if control.net_rx is not None:
        env["PERF_NET_RX"] = "1" if control.net_rx else "0"
    if control.fio_ops is not None:
        env["PERF_FIO_OPS"] = control.fio_ops.value
    return env


def parse_sample(stdout: str) -> float:
    """Parse the sample from the last non-empty line of *stdout*.

    Raises:
        ProbeError: If there is no output or the line is not a number.
    """
    lines = [line.strip() for line in stdout.splitlines() if line.strip()]
    if not lines:
        raise ProbeError("Probe produced no output")
    try:
        return float(lines[-1])
    except ValueError:
        raise ProbeError(f"Probe output is not a number: {lines[-1]!r}") from None


@dataclass
class CommandProbe:
    """Run *command* once per iteration and return its numeric output."""

    command: list[str]
    cwd: Path | None = None
    env: dict[str, str] = field(default_factory=dict)
    timeout_allowance: int = DEFAULT_TIMEOUT_ALLOWANCE

    def __call__(self, control: PerformanceTestControl) -> float:
        run_env = dict(os.environ)
        run_env.update(self.env)
        run_env.update(control_env(control))
        timeout = control.test_time + self.timeout_allowance

        log.debug("Running probe: %s (timeout %ds)", " ".join(self.command), timeout)
        proc = subprocess.Popen(
            self.command,
            cwd=str(self.cwd) if self.cwd else None,
            env=run_env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            start_new_session=True,
        )
        try:
            stdout, stderr = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill_process_group(proc.pid)
            try:
                proc.communicate(timeout=5)
            except subprocess.TimeoutExpired:
                proc.kill()
                proc.communicate()
            raise ProbeError(
                f"Probe '{self.command[0]}' timed out after {timeout} seconds"
            ) from None

        if proc.returncode != 0:
            tail = stderr.strip().splitlines()[-1:] if stderr else []
            raise ProbeError(
                f"Probe '{self.command[0]}' exited with {proc.returncode}"
                + (f": {tail[0]}" if tail else "")
            )
        return parse_sample(stdout)


def _kill_process_group(pid: int) -> None:
    """Attempt to kill the entire process group on timeout."""
    try:
        os.killpg(os.getpgid(pid), signal.SIGKILL)
    except (ProcessLookupError, PermissionError, OSError):
        pass
