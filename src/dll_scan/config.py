"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from dll_scan.errors import ConfigError, ErrorPolicy

DEFAULT_TARGET = "HDWA.AFS.Client.dll"
DEFAULT_CONFIG_FILENAME = "dll_scan.toml"


@dataclass(slots=True, frozen=True)
class ScanConfig:
    """Traversal settings."""

    target: str
    on_error: ErrorPolicy
    follow_symlinks: bool
    temp_dir: Path | None


@dataclass(slots=True, frozen=True)
class OutputConfig:
    """Reporting settings."""

    verbose: bool
    audit_log: Path | None


@dataclass(slots=True, frozen=True)
class AppConfig:
    """Fully merged runtime configuration."""

    scan: ScanConfig
    output: OutputConfig
    config_path: Path | None = None

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "config_path": str(self.config_path) if self.config_path is not None else None,
            "scan": {
                "target": self.scan.target,
                "on_error": self.scan.on_error.value,
                "follow_symlinks": self.scan.follow_symlinks,
                "temp_dir": str(self.scan.temp_dir) if self.scan.temp_dir is not None else None,
            },
            "output": {
                "verbose": self.output.verbose,
                "audit_log": (
                    str(self.output.audit_log) if self.output.audit_log is not None else None
                ),
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional command-line overrides applied at highest precedence."""

    target: str | None = None
    on_error: ErrorPolicy | None = None
    verbose: bool | None = None
    audit_log: Path | None = None


def default_config() -> AppConfig:
    """Build the built-in defaults."""
    return AppConfig(
        scan=ScanConfig(
            target=DEFAULT_TARGET,
            on_error=ErrorPolicy.ABORT,
            follow_symlinks=True,
            temp_dir=None,
        ),
        output=OutputConfig(verbose=False, audit_log=None),
    )


def load_config_file(path: Path) -> dict[str, object]:
    """Load a TOML config file; a missing file yields an empty payload."""
    if not path.exists():
        return {}
    try:
        with path.open("rb") as handle:
            payload = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path.name} is not valid TOML: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc.strerror or exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"{path.name} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{key}' must be a table.")
    return value


def _optional_string(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Config field '{name}' must be a non-empty string.")
    return value


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigError(f"Config field '{name}' must be a boolean.")
    return value


def _optional_path(value: object, name: str, default: Path | None, base: Path) -> Path | None:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Config field '{name}' must be a non-empty path string.")
    candidate = Path(value).expanduser()
    if not candidate.is_absolute():
        candidate = base / candidate
    return candidate


def parse_error_policy(value: object, name: str = "scan.on_error") -> ErrorPolicy:
    """Convert a policy name into :class:`ErrorPolicy`."""
    if isinstance(value, ErrorPolicy):
        return value
    if isinstance(value, str):
        try:
            return ErrorPolicy(value.strip().lower())
        except ValueError:
            pass
    choices = ", ".join(policy.value for policy in ErrorPolicy)
    raise ConfigError(f"Config field '{name}' must be one of: {choices}.")


def merge_config(
    base: AppConfig,
    payload: dict[str, object],
    overrides: CliOverrides,
    config_dir: Path | None = None,
) -> AppConfig:
    """Merge defaults, config file, then CLI overrides."""
    scan_payload = _get_table(payload, "scan")
    output_payload = _get_table(payload, "output")
    relative_base = config_dir or Path.cwd()

    on_error = base.scan.on_error
    if "on_error" in scan_payload:
        on_error = parse_error_policy(scan_payload["on_error"], "scan.on_error")

    merged = AppConfig(
        scan=ScanConfig(
            target=_optional_string(scan_payload.get("target"), "scan.target", base.scan.target),
            on_error=on_error,
            follow_symlinks=_optional_bool(
                scan_payload.get("follow_symlinks"),
                "scan.follow_symlinks",
                base.scan.follow_symlinks,
            ),
            temp_dir=_optional_path(
                scan_payload.get("temp_dir"), "scan.temp_dir", base.scan.temp_dir, relative_base
            ),
        ),
        output=OutputConfig(
            verbose=_optional_bool(
                output_payload.get("verbose"), "output.verbose", base.output.verbose
            ),
            audit_log=_optional_path(
                output_payload.get("audit_log"),
                "output.audit_log",
                base.output.audit_log,
                relative_base,
            ),
        ),
        config_path=base.config_path,
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: AppConfig, overrides: CliOverrides) -> AppConfig:
    """Apply command-line overrides at highest precedence."""
    target = _optional_string(overrides.target, "overrides.target", config.scan.target)
    audit_log = overrides.audit_log.resolve() if overrides.audit_log else config.output.audit_log
    return AppConfig(
        scan=ScanConfig(
            target=target,
            on_error=overrides.on_error or config.scan.on_error,
            follow_symlinks=config.scan.follow_symlinks,
            temp_dir=config.scan.temp_dir,
        ),
        output=OutputConfig(
            verbose=overrides.verbose if overrides.verbose is not None else config.output.verbose,
            audit_log=audit_log,
        ),
        config_path=config.config_path,
    )


def load_effective_config(
    config_path: Path | None = None, overrides: CliOverrides | None = None
) -> AppConfig:
    """Load effective config using merge order defaults -> config file -> overrides.

    Without an explicit ``config_path``, ``dll_scan.toml`` in the current
    directory is used when present. An explicit path must exist.
    """
    if config_path is not None and not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")
    path = (config_path or Path.cwd() / DEFAULT_CONFIG_FILENAME).resolve()
    payload = load_config_file(path)
    base = default_config()
    if payload:
        base = AppConfig(scan=base.scan, output=base.output, config_path=path)
    return merge_config(base, payload, overrides or CliOverrides(), config_dir=path.parent)
