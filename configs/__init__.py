"""Configuration module for ibmsim."""

from pathlib import Path
import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "default.yaml"


def load_config(config_path: str) -> dict:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def merge_configs(base_config: dict, override_config: dict) -> dict:
    """Merge two configuration dictionaries.

    Args:
        base_config: Base configuration
        override_config: Override configuration

    Returns:
        Merged configuration
    """
    merged = base_config.copy()
    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_run_config(config_path: str = None) -> dict:
    """Load a run configuration layered over the defaults.

    Args:
        config_path: Optional override file; None returns the defaults

    Returns:
        Configuration dictionary with ``simulation``, ``model`` and
        ``output`` sections
    """
    config = load_config(str(DEFAULT_CONFIG_PATH))
    if config_path is not None:
        config = merge_configs(config, load_config(config_path))

    for section in ('simulation', 'model', 'output'):
        if section not in config:
            raise KeyError(f"Missing configuration section: {section}")
    return config
