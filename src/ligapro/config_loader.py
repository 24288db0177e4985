"""Configuration loader and validator."""

from pathlib import Path
from typing import Any

import yaml

from ligapro.models import RankingMode, Tiebreaker

DEFAULT_DB_PATH = ".ligapro/ligapro.sqlite"


class ConfigError(Exception):
    """Configuration validation error."""

    pass


def load_config(path: str) -> dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML config file

    Returns:
        Dictionary with configuration values

    Raises:
        ConfigError: If file not found or invalid YAML
    """
    config_file = Path(path)

    if not config_file.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}")

    if config is None:
        raise ConfigError("Config file is empty")

    if not isinstance(config, dict):
        raise ConfigError("Config file must contain a mapping")

    return config


def _validate_defaults(defaults: Any) -> dict[str, Any]:
    if defaults is None:
        defaults = {}
    if not isinstance(defaults, dict):
        raise ConfigError("defaults must be a dictionary")

    validated = {}

    rounds = defaults.get("rounds", 1)
    if not isinstance(rounds, int) or rounds < 1:
        raise ConfigError("defaults.rounds must be a positive integer")
    validated["rounds"] = rounds

    for key, default in (("points_per_win", 3), ("points_per_loss", 0)):
        value = defaults.get(key, default)
        if not isinstance(value, int) or value < 0:
            raise ConfigError(f"defaults.{key} must be a non-negative integer")
        validated[key] = value

    tiebreaker = defaults.get("tiebreaker", Tiebreaker.HEAD_TO_HEAD.value)
    valid = [t.value for t in Tiebreaker]
    if tiebreaker not in valid:
        raise ConfigError(f"defaults.tiebreaker must be one of {valid}, got '{tiebreaker}'")
    validated["tiebreaker"] = tiebreaker

    return validated


def validate_config(config: dict[str, Any]) -> dict[str, Any]:
    """Validate configuration values.

    Args:
        config: Configuration dictionary

    Returns:
        Validated and normalized configuration

    Raises:
        ConfigError: If validation fails
    """
    validated = {}

    validated["db_path"] = config.get("db_path", DEFAULT_DB_PATH)
    if not isinstance(validated["db_path"], str) or not validated["db_path"]:
        raise ConfigError("db_path must be a non-empty string")

    # Ranking mode (optional, default 'points')
    mode = config.get("ranking_mode", RankingMode.POINTS.value)
    if mode not in (RankingMode.POINTS.value, RankingMode.ELO.value):
        raise ConfigError(f"ranking_mode must be 'points' or 'elo', got '{mode}'")
    validated["ranking_mode"] = mode

    # Random seed (optional, None = truly random draws)
    seed = config.get("random_seed")
    if seed is not None and not isinstance(seed, int):
        raise ConfigError("random_seed must be an integer")
    validated["random_seed"] = seed

    level = str(config.get("log_level", "INFO")).upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigError(f"log_level must be a standard logging level, got '{level}'")
    validated["log_level"] = level

    validated["log_file"] = config.get("log_file")

    validated["defaults"] = _validate_defaults(config.get("defaults"))

    return validated


def default_config() -> dict[str, Any]:
    """Return the validated configuration used when no file is given."""
    return validate_config({})


def load_and_validate_config(path: str) -> dict[str, Any]:
    """Load and validate configuration in one step.

    Args:
        path: Path to YAML config file

    Returns:
        Validated configuration dictionary

    Raises:
        ConfigError: If loading or validation fails
    """
    config = load_config(path)
    return validate_config(config)
