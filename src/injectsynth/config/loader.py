"""
Configuration loader for injectsynth.

Handles loading configuration from YAML files and CLI overrides.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import BackendType, SynthConfig


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    pass


def load_config_from_yaml(config_path: Path) -> SynthConfig:
    """Load configuration from a YAML file."""
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if raw_config is None:
        raise ConfigurationError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ConfigurationError("Configuration file must contain a mapping")

    try:
        return SynthConfig(**raw_config)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed:\n{e}")


def load_config(config_path: Path | None = None, backend: str | None = None) -> SynthConfig:
    """Load configuration from YAML when a path is given, then apply CLI overrides."""
    config = load_config_from_yaml(config_path) if config_path else SynthConfig()

    if backend:
        try:
            config = config.model_copy(update={"backend": BackendType(backend.lower())})
        except ValueError:
            valid = [b.value for b in BackendType]
            raise ConfigurationError(f"Invalid backend '{backend}'. Valid backends: {valid}")

    return config


def generate_default_config(output_path: Path) -> None:
    """Generate a default configuration file."""
    defaults = SynthConfig()
    default_config: dict[str, Any] = {
        "marker_annotation": defaults.marker_annotation,
        "method_name": defaults.method_name,
        "method_visibility": defaults.method_visibility,
        "method_return_type": defaults.method_return_type,
        "field_visibility": defaults.field_visibility,
        "base_type": defaults.base_type,
        "indent_unit": defaults.indent_unit,
        "file_extensions": list(defaults.file_extensions),
        "backend": defaults.backend.value,
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)
