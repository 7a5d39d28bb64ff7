"""Run configuration and YAML profile loading.

Handles:
- Loading run profiles from YAML files.
- Merging CLI options and environment variables with profile values
  (CLI > environment > profile > defaults).
- Binding probe kinds to external commands.
- Validating the final configuration before any test runs.
"""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from perfmetrics.catalog import CATALOG, PROBE_KINDS
from perfmetrics.model import DEFAULT_TIMEOUT_ALLOWANCE, Probe, control_field_names
from perfmetrics.probes import CommandProbe

log = logging.getLogger("perfmetrics")


# ---------------------------------------------------------------------------
# RunConfig
# ---------------------------------------------------------------------------


@dataclass
class RunConfig:
    """Resolved configuration for one benchmark sweep."""

    # Selection
    test_filter: str = ""  # substring match on test names, "" = all

    # Provenance (looked up on the host when empty)
    git_human_readable: str = ""
    git_revision: str = ""

    # Execution
    timeout_allowance: int = DEFAULT_TIMEOUT_ALLOWANCE  # seconds per iteration
    overrides: dict[str, dict[str, Any]] = field(default_factory=dict)
    probes: dict[str, list[str]] = field(default_factory=dict)  # kind -> argv
    probe_cwd: Path | None = None

    # Output
    output: Path | None = None
    fail_on_abort: bool = False

    def probe_callables(self) -> dict[str, Probe]:
        """Build a :class:`CommandProbe` for every bound probe kind."""
        return {
            kind: CommandProbe(
                command=list(argv),
                cwd=self.probe_cwd,
                timeout_allowance=self.timeout_allowance,
            )
            for kind, argv in self.probes.items()
        }


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: RunConfig) -> list[ValidationError]:
    """Validate a run configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []
    known_tests = {entry.name: entry for entry in CATALOG}
    valid_fields = control_field_names()

    if config.timeout_allowance < 0:
        errors.append(
            ValidationError(
                field="timeout_allowance",
                message=f"Timeout allowance cannot be negative (got {config.timeout_allowance}).",
            )
        )

    for kind, argv in config.probes.items():
        if kind not in PROBE_KINDS:
            errors.append(
                ValidationError(
                    field=f"probes.{kind}",
                    message=(
                        f"Unknown probe kind '{kind}'. "
                        f"Valid kinds: {', '.join(PROBE_KINDS)}"
                    ),
                    severity="warning",
                )
            )
        if not isinstance(argv, list) or not argv or not all(isinstance(a, str) for a in argv):
            errors.append(
                ValidationError(
                    field=f"probes.{kind}",
                    message="Probe command must be a non-empty list of strings.",
                )
            )

    for name, fields_ in config.overrides.items():
        entry = known_tests.get(name)
        if entry is None:
            errors.append(
                ValidationError(
                    field=f"overrides.{name}",
                    message=f"No catalog test named '{name}'.",
                    severity="warning",
                )
            )
            continue
        unknown = sorted(set(fields_) - valid_fields)
        if unknown:
            errors.append(
                ValidationError(
                    field=f"overrides.{name}",
                    message=f"Unknown control field(s): {', '.join(unknown)}",
                )
            )
            continue
        try:
            entry.control.replace(**fields_)
        except (TypeError, ValueError) as exc:
            errors.append(
                ValidationError(
                    field=f"overrides.{name}",
                    message=f"Invalid control override: {exc}",
                )
            )

    return errors


def check_config(config: RunConfig) -> None:
    """Log validation warnings and raise on errors.

    Raises:
        ValueError: If the configuration has errors.
    """
    problems = validate_config(config)
    for w in (p for p in problems if p.severity == "warning"):
        log.warning("Config warning: %s: %s", w.field, w.message)
    fatal = [p for p in problems if p.severity == "error"]
    if fatal:
        messages = [f"  {e.field}: {e.message}" for e in fatal]
        raise ValueError("Invalid run configuration:\n" + "\n".join(messages))


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a run profile from a YAML file.

    Profile format::

        test_filter: "boot_time"
        timeout_allowance: 20
        probe_cwd: "/opt/probes"
        probes:
          boot_time: ["./boot_time.sh"]
          net_throughput: ["./iperf.sh", "--json"]
        overrides:
          performance_boot_time:
            test_iterations: 5

    A probe command given as a string is split with shell quoting rules,
    the same way as ``--probe``.

    Returns:
        The parsed YAML as a dict.
    """
    import yaml

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    try:
        data = yaml.safe_load(profile_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Cannot parse profile {profile_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")
    return data


def config_from_profile(
    profile_data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> RunConfig:
    """Build a RunConfig from a parsed profile and CLI values.

    CLI values that are ``None`` fall back to the profile.  The CLI
    layer is responsible for folding environment variables into
    *cli_overrides* (click's ``envvar``), which gives environment
    values precedence over the profile.
    """
    cli = cli_overrides or {}

    probes_data = profile_data.get("probes") or {}
    if not isinstance(probes_data, dict):
        raise ValueError("Profile 'probes' must be a mapping of probe_kind -> command")
    probes: dict[str, list[str]] = {}
    for kind, command in probes_data.items():
        probes[str(kind)] = shlex.split(command) if isinstance(command, str) else command

    overrides_data = profile_data.get("overrides") or {}
    if not isinstance(overrides_data, dict):
        raise ValueError("Profile 'overrides' must be a mapping of test_name -> fields")
    overrides: dict[str, dict[str, Any]] = {}
    for name, fields_ in overrides_data.items():
        if not isinstance(fields_, dict):
            raise ValueError(
                f"Override for '{name}' must be a mapping, got {type(fields_).__name__}"
            )
        overrides[str(name)] = dict(fields_)

    def pick(key: str, default: Any) -> Any:
        if cli.get(key) is not None:
            return cli[key]
        value = profile_data.get(key)
        return default if value is None else value

    probe_cwd = pick("probe_cwd", None)
    output = pick("output", None)
    fail_on_abort = pick("fail_on_abort", False)
    if not isinstance(fail_on_abort, bool):
        raise ValueError(f"'fail_on_abort' must be true or false, got {fail_on_abort!r}")

    return RunConfig(
        test_filter=str(pick("test_filter", "")),
        git_human_readable=str(pick("git_human_readable", "")),
        git_revision=str(pick("git_revision", "")),
        timeout_allowance=int(pick("timeout_allowance", DEFAULT_TIMEOUT_ALLOWANCE)),
        overrides=overrides,
        probes=probes,
        probe_cwd=Path(probe_cwd) if probe_cwd else None,
        output=Path(output) if output else None,
        fail_on_abort=fail_on_abort,
    )


# ---------------------------------------------------------------------------
# Inline probe bindings
# ---------------------------------------------------------------------------


def parse_probe_spec(spec: str) -> tuple[str, list[str]]:
    """Parse an inline probe binding from the CLI.

    Format: ``"kind=command arg ..."``; the command is split with
    shell quoting rules.

    Examples::

        "boot_time=./probes/boot_time.sh"
        "block_io=fio-probe --size '4 GiB'"

    Returns:
        Tuple of (probe kind, argv).
    """
    if "=" not in spec:
        raise ValueError(f"Invalid probe spec: '{spec}'. Expected format: 'kind=command ...'")
    kind, command = spec.split("=", 1)
    kind = kind.strip()
    if not kind:
        raise ValueError("Probe kind cannot be empty.")
    argv = shlex.split(command)
    if not argv:
        raise ValueError(f"Probe '{kind}' has an empty command.")
    return kind, argv
