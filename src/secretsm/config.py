"""Configuration for secretsm."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from .secrets import ConfigError, RegionNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 100
# ListSecrets rejects MaxResults outside this range
MAX_RESULTS_LIMIT = 100


@dataclass
class Config:
    """Settings for a single invocation, passed explicitly to each command."""

    region: str
    debug: bool = False
    max_results: int = DEFAULT_MAX_RESULTS


def get_config_dir() -> Path:
    """Get config directory following XDG spec."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / "secretsm"


def get_config_file() -> Path:
    """Get config file path."""
    env_file = os.environ.get("SECRETSM_CONFIG")
    if env_file:
        return Path(env_file).expanduser()
    return get_config_dir() / "config.yaml"


def load_config_file(config_file: Path = None) -> dict:
    """Read the YAML config file; a missing file means no settings."""
    config_file = config_file or get_config_file()

    if not config_file.exists():
        return {}

    try:
        text = config_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read config file {config_file}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid config file {config_file}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_file} must contain a mapping")

    logger.debug("Loaded config file %s", config_file)
    return data


def resolve_region(flag_region: Optional[str], file_settings: dict) -> str:
    """
    Resolve the AWS region.

    Order: --region flag, AWS_REGION, AWS_DEFAULT_REGION, config file.
    """
    for region in (
        flag_region,
        os.environ.get("AWS_REGION"),
        os.environ.get("AWS_DEFAULT_REGION"),
        file_settings.get("region"),
    ):
        if region:
            return str(region)

    raise RegionNotFoundError("No region")


def resolve_max_results(flag_value: Optional[int], file_settings: dict) -> int:
    """Resolve the list page size: flag, then config file, then 100."""
    value = flag_value if flag_value is not None else file_settings.get("max_results")
    if value is None:
        return DEFAULT_MAX_RESULTS

    try:
        value = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"max_results must be an integer, got {value!r}") from e

    if not 1 <= value <= MAX_RESULTS_LIMIT:
        raise ConfigError(f"max_results must be between 1 and {MAX_RESULTS_LIMIT}, got {value}")
    return value


def load_config(
    region: Optional[str] = None,
    debug: bool = False,
    max_results: Optional[int] = None,
    config_file: Path = None,
) -> Config:
    """Build the Config for this invocation from flags, environment and config file."""
    file_settings = load_config_file(config_file)
    config = Config(
        region=resolve_region(region, file_settings),
        debug=debug,
        max_results=resolve_max_results(max_results, file_settings),
    )
    logger.debug("Using region %s", config.region)
    return config
