"""Configuration loading utilities for the prescription report.

Provides a centralized way to load and validate the parameters.yaml
configuration file used by the command-line entry point.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .enums import ReportOrder

SCRIPT_DIR = Path(__file__).resolve().parent
DEFAULT_CONFIG_PATH = SCRIPT_DIR.parent / "config" / "parameters.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load and parse the parameters.yaml configuration file.

    Automatically validates the configuration after loading.

    Parameters
    ----------
    config_path : Path, optional
        Path to the configuration file. If not provided, uses the default
        location (config/parameters.yaml in the project root).

    Returns
    -------
    Dict[str, Any]
        Parsed and validated YAML configuration as a nested dictionary.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    yaml.YAMLError
        If the configuration file is invalid YAML.
    ValueError
        If the configuration fails validation (see validate_config).
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError(
            f"Configuration root must be a mapping, got {type(config).__name__}"
        )

    validate_config(config)
    return config


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"{name} must be a mapping, got {type(section).__name__}")
    return section


def validate_config(config: Dict[str, Any]) -> None:
    """Validate report and logging settings.

    Raises
    ------
    ValueError
        If a setting has the wrong type or an unknown value.

    Notes
    -----
    - **report, logging:** mappings or null, optional
    - **report.order:** 'activity' or 'name' (case-insensitive), optional
    - **logging.level:** standard level name, optional
    - **logging.log_dir:** string path or null, optional
    """
    report_config = _section(config, "report")
    order = report_config.get("order")
    if order is not None:
        if not isinstance(order, str):
            raise ValueError(f"report.order must be a string, got {type(order).__name__}")
        try:
            ReportOrder.from_string(order)
        except ValueError as exc:
            raise ValueError(f"Invalid report.order: {exc}") from exc

    logging_config = _section(config, "logging")
    level = logging_config.get("level", "INFO")
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ValueError(
            f"logging.level must be one of {', '.join(LOG_LEVELS)}, got {level!r}"
        )

    log_dir = logging_config.get("log_dir")
    if log_dir is not None and not isinstance(log_dir, str):
        raise ValueError(
            f"logging.log_dir must be a string, got {type(log_dir).__name__}"
        )
