"""Configuration loading for polygen (.polygen.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".polygen.yml"
REPORT_FORMATS = ("json", "markdown")

ENV_MAX_WORKERS = "POLYGEN_MAX_WORKERS"
ENV_TARGET_TIMEOUT = "POLYGEN_TARGET_TIMEOUT"


@dataclass
class CompilerConfig:
    """Fan-out, retry and timeout settings for a compilation run."""

    targets: List[str] = field(default_factory=list)
    max_workers: Optional[int] = None
    max_retries: int = 2
    retry_backoff: float = 0.1
    target_timeout: Optional[float] = None
    run_timeout: Optional[float] = None
    cancel_grace: float = 2.0


@dataclass
class ValidationConfig:
    """Validation axis enablement and tolerances."""

    axes: List[str] = field(default_factory=list)
    performance_tolerance: float = 0.5


@dataclass
class OutputConfig:
    """Where generated bundles and reports are written."""

    directory: Optional[Path] = None
    report_path: Optional[Path] = None
    report_format: str = "json"


@dataclass
class PolygenConfig:
    """Represents the high-level settings defined in .polygen.yml."""

    root: Path
    compiler: CompilerConfig = field(default_factory=CompilerConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    templates_dir: Optional[Path] = None


def load_config(config_path: Path, *, environ: Mapping[str, str] | None = None) -> PolygenConfig:
    """Load configuration from disk and apply environment overrides."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    env = os.environ if environ is None else environ

    if not config_file.exists():
        config = PolygenConfig(root=root)
        _apply_environment(config, env)
        return config

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    compiler = CompilerConfig()
    compiler_data = _as_dict(data.get("compiler"))
    if compiler_data:
        compiler.targets = _as_str_list(compiler_data.get("targets"))
        compiler.max_workers = _as_int(compiler_data.get("max_workers"))
        retries = _as_int(compiler_data.get("max_retries"))
        if retries is not None:
            compiler.max_retries = retries
        backoff = _as_float(compiler_data.get("retry_backoff"))
        if backoff is not None:
            compiler.retry_backoff = backoff
        compiler.target_timeout = _as_float(compiler_data.get("target_timeout"))
        compiler.run_timeout = _as_float(compiler_data.get("run_timeout"))
        grace = _as_float(compiler_data.get("cancel_grace"))
        if grace is not None:
            compiler.cancel_grace = grace

    validation = ValidationConfig()
    validation_data = _as_dict(data.get("validation"))
    if validation_data:
        validation.axes = _as_str_list(validation_data.get("axes"))
        tolerance = _as_float(validation_data.get("performance_tolerance"))
        if tolerance is not None:
            validation.performance_tolerance = tolerance

    output = OutputConfig()
    output_data = _as_dict(data.get("output"))
    if output_data:
        directory = _as_str(output_data.get("directory"))
        output.directory = root / directory if directory else None
        report_path = _as_str(output_data.get("report"))
        output.report_path = root / report_path if report_path else None
        output.report_format = (_as_str(output_data.get("format")) or output.report_format).lower()

    templates_dir_str = _as_str(data.get("templates_dir"))
    config = PolygenConfig(
        root=root,
        compiler=compiler,
        validation=validation,
        output=output,
        templates_dir=root / templates_dir_str if templates_dir_str else None,
    )
    _apply_environment(config, env)
    _check(config)
    return config


def _apply_environment(config: PolygenConfig, env: Mapping[str, str]) -> None:
    raw_workers = env.get(ENV_MAX_WORKERS)
    if raw_workers:
        workers = _as_int(raw_workers)
        if workers is None:
            raise ConfigError(f"{ENV_MAX_WORKERS} must be an integer, got {raw_workers!r}")
        config.compiler.max_workers = workers
    raw_timeout = env.get(ENV_TARGET_TIMEOUT)
    if raw_timeout:
        timeout = _as_float(raw_timeout)
        if timeout is None:
            raise ConfigError(f"{ENV_TARGET_TIMEOUT} must be a number, got {raw_timeout!r}")
        config.compiler.target_timeout = timeout
    _check(config)


def _check(config: PolygenConfig) -> None:
    compiler = config.compiler
    if compiler.max_workers is not None and compiler.max_workers < 1:
        raise ConfigError("compiler.max_workers must be at least 1")
    if compiler.max_retries < 0:
        raise ConfigError("compiler.max_retries must not be negative")
    for name in ("target_timeout", "run_timeout"):
        value = getattr(compiler, name)
        if value is not None and value <= 0:
            raise ConfigError(f"compiler.{name} must be positive")
    if config.validation.performance_tolerance < 0:
        raise ConfigError("validation.performance_tolerance must not be negative")
    if config.output.report_format not in REPORT_FORMATS:
        raise ConfigError(
            f"output.format must be one of {', '.join(REPORT_FORMATS)}, got {config.output.report_format!r}"
        )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "CompilerConfig",
    "ConfigError",
    "OutputConfig",
    "PolygenConfig",
    "ValidationConfig",
    "load_config",
]
