"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from mayberun.errors import ConfigError
from mayberun.index.store import DEFAULT_CACHE_FILENAME
from mayberun.logging import DEFAULT_AUDIT_FILENAME

CONFIG_FILENAME = "mayberun.toml"
INPUT_ENV_VAR = "IN"
OUTPUT_ENV_VAR = "OUT"


@dataclass(slots=True, frozen=True)
class WatchConfig:
    """Input and output glob patterns; None means not watched."""

    input_glob: str | None
    output_glob: str | None


@dataclass(slots=True, frozen=True)
class AuditConfig:
    """Run log settings."""

    enabled: bool
    filename: str


@dataclass(slots=True, frozen=True)
class MayberunConfig:
    """Fully merged configuration."""

    root: Path
    cache_filename: str
    audit: AuditConfig
    watch: WatchConfig

    @property
    def cache_path(self) -> Path:
        return self.root / self.cache_filename

    @property
    def audit_path(self) -> Path:
        return self.root / self.audit.filename

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "root": str(self.root),
            "cache_filename": self.cache_filename,
            "audit": {
                "enabled": self.audit.enabled,
                "filename": self.audit.filename,
            },
            "watch": {
                "input": self.watch.input_glob,
                "output": self.watch.output_glob,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional command-line overrides applied at highest precedence."""

    input_glob: str | None = None
    output_glob: str | None = None
    audit_enabled: bool | None = None


def default_config(root: Path) -> MayberunConfig:
    """Build default config for a given working root."""
    return MayberunConfig(
        root=root.resolve(),
        cache_filename=DEFAULT_CACHE_FILENAME,
        audit=AuditConfig(enabled=True, filename=DEFAULT_AUDIT_FILENAME),
        watch=WatchConfig(input_glob=None, output_glob=None),
    )


def load_config_file(root: Path) -> dict[str, object]:
    """Load optional mayberun.toml from the root."""
    config_path = root / CONFIG_FILENAME
    if not config_path.exists():
        return {}
    try:
        with config_path.open("rb") as handle:
            payload = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"{CONFIG_FILENAME} is not valid TOML: {exc}", path=config_path) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read {CONFIG_FILENAME}: {exc.strerror or exc}", path=config_path
        ) from exc
    return payload


def _get_table(payload: Mapping[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{key}' must be a table.")
    return value


def _optional_filename(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Config field '{name}' must be a non-empty string.")
    if "/" in value or "\\" in value or value in (".", ".."):
        raise ConfigError(f"Config field '{name}' must be a plain file name.")
    return value


def _optional_pattern(value: object, name: str, default: str | None) -> str | None:
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


def merge_config(
    base: MayberunConfig,
    file_payload: Mapping[str, object],
    environ: Mapping[str, str],
    overrides: CliOverrides,
) -> MayberunConfig:
    """Merge defaults, config file, environment, then CLI overrides."""
    cache_payload = _get_table(file_payload, "cache")
    audit_payload = _get_table(file_payload, "audit")
    watch_payload = _get_table(file_payload, "watch")

    cache_filename = _optional_filename(
        cache_payload.get("filename"), "cache.filename", base.cache_filename
    )
    audit = AuditConfig(
        enabled=_optional_bool(audit_payload.get("enabled"), "audit.enabled", base.audit.enabled),
        filename=_optional_filename(
            audit_payload.get("filename"), "audit.filename", base.audit.filename
        ),
    )
    if audit.filename == cache_filename:
        raise ConfigError("Config fields 'audit.filename' and 'cache.filename' must differ.")

    input_glob = _optional_pattern(watch_payload.get("input"), "watch.input", base.watch.input_glob)
    output_glob = _optional_pattern(
        watch_payload.get("output"), "watch.output", base.watch.output_glob
    )
    input_glob = environ.get(INPUT_ENV_VAR) or input_glob
    output_glob = environ.get(OUTPUT_ENV_VAR) or output_glob

    merged = MayberunConfig(
        root=base.root,
        cache_filename=cache_filename,
        audit=audit,
        watch=WatchConfig(input_glob=input_glob, output_glob=output_glob),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: MayberunConfig, overrides: CliOverrides) -> MayberunConfig:
    """Apply command-line overrides at highest precedence."""
    audit = config.audit
    if overrides.audit_enabled is not None:
        audit = AuditConfig(enabled=overrides.audit_enabled, filename=audit.filename)
    return MayberunConfig(
        root=config.root,
        cache_filename=config.cache_filename,
        audit=audit,
        watch=WatchConfig(
            input_glob=overrides.input_glob or config.watch.input_glob,
            output_glob=overrides.output_glob or config.watch.output_glob,
        ),
    )


def load_effective_config(
    root: Path,
    overrides: CliOverrides | None = None,
    environ: Mapping[str, str] | None = None,
) -> MayberunConfig:
    """Load config using merge order defaults -> file -> environment -> overrides."""
    resolved_root = root.resolve()
    if not resolved_root.is_dir():
        raise ConfigError(f"Root '{root}' is not a directory.", path=root)
    base = default_config(resolved_root)
    payload = load_config_file(resolved_root)
    return merge_config(
        base,
        payload,
        os.environ if environ is None else environ,
        overrides or CliOverrides(),
    )
