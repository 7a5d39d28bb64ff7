"""Host-side commands used to stamp a report with provenance.

The report date comes from the host ``date`` command, used verbatim.
The source revision comes from the ``GIT_HUMAN_READABLE`` and
``GIT_REVISION`` environment variables when the build sets them, and
from ``git`` in the current directory otherwise.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from perfmetrics.logging import get_logger

log = get_logger("host")

GIT_HUMAN_READABLE_ENV = "GIT_HUMAN_READABLE"
GIT_REVISION_ENV = "GIT_REVISION"


def exec_host_command_output(
    command: list[str],
    *,
    cwd: Path | None = None,
    timeout: int = 10,
) -> str | None:
    """Run *command* on the host and return its trimmed stdout.

    Output is decoded as UTF-8, replacing undecodable bytes.  Returns
    ``None`` if the command cannot be run, times out or exits non-zero.
    """
    try:
        proc = subprocess.run(
            command,
            capture_output=True,
            cwd=str(cwd) if cwd else None,
            timeout=timeout,
            check=False,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as exc:
        log.warning("Could not run %s: %s", command[0], exc)
        return None
    if proc.returncode != 0:
        log.debug(
            "%s exited %d: %s",
            " ".join(command),
            proc.returncode,
            proc.stderr.decode("utf-8", errors="replace").strip(),
        )
        return None
    return proc.stdout.decode("utf-8", errors="replace").strip()


def date() -> str:
    """Current date as printed by the host ``date`` command."""
    return exec_host_command_output(["date"]) or ""


def git_human_readable(cwd: Path | None = None) -> str:
    """Human-readable source revision, e.g. ``v30.0-12-gabcdef-dirty``."""
    from_env = os.environ.get(GIT_HUMAN_READABLE_ENV)
    if from_env:
        return from_env
    return (
        exec_host_command_output(["git", "describe", "--dirty", "--always", "--tags"], cwd=cwd)
        or ""
    )


def git_revision(cwd: Path | None = None) -> str:
    """Full commit hash of the source revision."""
    from_env = os.environ.get(GIT_REVISION_ENV)
    if from_env:
        return from_env
    return exec_host_command_output(["git", "rev-parse", "HEAD"], cwd=cwd) or ""
