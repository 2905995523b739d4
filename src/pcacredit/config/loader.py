"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance.
A minimal config only needs a project name; every section has defaults
tuned for the Kaggle German credit file.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from pcacredit.config.settings import PipelineConfig


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return _process_config_values(data) if data else {}


def _normalise_sections(merged: dict[str, Any]) -> dict[str, Any]:
    """Map YAML shorthands onto PipelineConfig field names."""
    result = dict(merged)

    # output.root is the documented YAML key
    output = dict(result.get("output") or {})
    if "root" in output:
        output["output_root"] = output.pop("root")
    result["output"] = output

    # label_mapping keys are compared against stringified raw labels
    data = dict(result.get("data") or {})
    if data.get("label_mapping"):
        data["label_mapping"] = {str(k): str(v) for k, v in data["label_mapping"].items()}
    result["data"] = data

    # "all" is friendlier than null for keeping every component
    pca = dict(result.get("pca") or {})
    if pca.get("n_components") == "all":
        pca["n_components"] = None
    result["pca"] = pca

    return result


def load_config(
    config_path: Path,
    base_path: Path | None = None,
) -> PipelineConfig:
    """
    Load pipeline configuration from YAML file(s).

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional path to base configuration for inheritance.
            Defaults to base.yaml next to config_path when that exists.

    Returns:
        Fully validated PipelineConfig instance.

    Raises:
        FileNotFoundError: If config_path does not exist.
        ValueError: If the project name is missing or a value is invalid.
    """
    if not config_path.exists():
        msg = f"Config file not found: {config_path}"
        raise FileNotFoundError(msg)

    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        potential_base = config_path.parent / "base.yaml"
        base_data = (
            load_yaml(potential_base)
            if potential_base.exists() and potential_base != config_path
            else {}
        )

    main_data = load_yaml(config_path)
    merged = _deep_merge(base_data, main_data)

    if not merged.get("project"):
        msg = "Config must specify 'project' name"
        raise ValueError(msg)

    return PipelineConfig.model_validate(_normalise_sections(merged))
