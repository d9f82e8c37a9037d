"""Global configuration for formstate.

Settings are read from ``$FORMSTATE_HOME/config.yaml`` (by default
``~/.config/formstate/config.yaml``) and overridden by environment
variables:

    FORMSTATE_BASE_URL       base URL prefixed to relative submit URLs
    FORMSTATE_TIMEOUT        request timeout in seconds
    FORMSTATE_REMEMBER_PATH  directory for remembered snapshots
    FORMSTATE_LOG_LEVEL      logging level name
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from rich.logging import RichHandler

ENV_OVERRIDES = {
    "FORMSTATE_BASE_URL": "base_url",
    "FORMSTATE_TIMEOUT": "timeout",
    "FORMSTATE_REMEMBER_PATH": "remember_path",
    "FORMSTATE_LOG_LEVEL": "log_level",
}


class ConfigError(Exception):
    """Raised when the configuration file or environment is invalid."""

    pass


class FormStateConfig(BaseModel):
    """Settings shared by the CLI and the default transport."""

    base_url: str = ""
    timeout: float = Field(default=30.0, gt=0)
    headers: dict[str, str] = Field(default_factory=dict)
    remember_path: str | None = None
    log_level: str = "WARNING"

    model_config = {"extra": "forbid"}

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


def get_formstate_home() -> Path:
    """Directory holding config.yaml and remembered snapshots."""
    env_home = os.environ.get("FORMSTATE_HOME")
    if env_home:
        return Path(env_home)
    return Path.home() / ".config" / "formstate"


def get_config_path() -> Path:
    return get_formstate_home() / "config.yaml"


def load_global_config(path: Path | None = None) -> FormStateConfig:
    """Load configuration from YAML, then apply environment overrides.

    Args:
        path: Config file to read. Defaults to get_config_path(). A missing
            file yields the defaults.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If the file is not valid YAML or a value is invalid.
    """
    config_path = path or get_config_path()
    values: dict = {}

    if config_path.exists():
        with open(config_path) as f:
            try:
                loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"Expected a mapping in {config_path}")
        values.update(loaded or {})

    for env_var, key in ENV_OVERRIDES.items():
        env_value = os.environ.get(env_var)
        if env_value:
            values[key] = env_value

    try:
        return FormStateConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def get_remember_path(config: FormStateConfig | None = None) -> Path:
    """Directory for remembered snapshots."""
    config = config or load_global_config()
    if config.remember_path:
        return Path(config.remember_path)
    return get_formstate_home() / "remembered"


def configure_logging(level: str = "WARNING") -> None:
    """Route formstate logs through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
