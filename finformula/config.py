"""
Runtime configuration.

Settings are read from an optional YAML file and FINFORMULA_* environment
variables (environment wins), then validated with pydantic.
"""

import os
from pathlib import Path
from typing import Mapping, Optional
import yaml
from pydantic import BaseModel, ValidationError, field_validator, model_validator
from finformula.errors import ConfigError

ENV_PREFIX = "FINFORMULA_"
CONFIG_PATH_ENV = "FINFORMULA_CONFIG"

PACING_POLICIES = ("random", "fixed", "none")


class Settings(BaseModel):
    """
    Validated library settings.

    Attributes:
        quote_url: Endpoint of the quote CSV service (s=ticker, f=field)
        worldbank_url: Base URL of the World Bank v2 API
        http_timeout: Request timeout in seconds
        pacing: Pacing policy before network calls ("random", "fixed", "none")
        pacing_min_seconds: Lower bound of one random pause
        pacing_max_seconds: Upper bound of one random pause
        pacing_rounds: Number of random pauses taken in sequence
        min_interval_seconds: Minimum spacing between calls for "fixed"
        worldbank_per_page: Page size requested from the World Bank API
        risk_free_ticker: Ticker quoting the 10-year treasury yield
        log_level: Logging level name for the CLI
    """
    quote_url: str = "https://download.finance.yahoo.com/d/quotes.csv"
    worldbank_url: str = "https://api.worldbank.org/v2"
    http_timeout: float = 30.0
    pacing: str = "random"
    pacing_min_seconds: float = 1.0
    pacing_max_seconds: float = 11.0
    pacing_rounds: int = 2
    min_interval_seconds: float = 1.0
    worldbank_per_page: int = 1000
    risk_free_ticker: str = "^TNX"
    log_level: str = "WARNING"

    @field_validator("pacing")
    @classmethod
    def validate_pacing(cls, v):
        v = v.strip().lower()
        if v not in PACING_POLICIES:
            raise ValueError(f"pacing must be one of {PACING_POLICIES}, got {v}")
        return v

    @field_validator("http_timeout", "min_interval_seconds")
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("pacing_min_seconds", "pacing_max_seconds")
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @field_validator("pacing_rounds", "worldbank_per_page")
    @classmethod
    def validate_count(cls, v):
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        v = v.strip().upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log level: {v}")
        return v

    @field_validator("quote_url", "worldbank_url")
    @classmethod
    def validate_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"invalid URL: {v}")
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_pacing_bounds(self):
        if self.pacing_min_seconds > self.pacing_max_seconds:
            raise ValueError("pacing_min_seconds must not exceed pacing_max_seconds")
        return self


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_settings(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None
) -> Settings:
    """
    Load settings from YAML and environment.

    Preconditions:
        - path (or $FINFORMULA_CONFIG) points to a YAML mapping, if given

    Postconditions:
        - Returns validated Settings
        - Environment overrides take precedence over file values

    Args:
        path: Optional YAML config file
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Settings object

    Raises:
        ConfigError: If the file is unreadable or a value fails validation
    """
    if environ is None:
        environ = os.environ

    values = {}
    config_path = path or environ.get(CONFIG_PATH_ENV)
    if config_path:
        values.update(_read_yaml(Path(config_path)))

    for name in Settings.model_fields:
        env_key = f"{ENV_PREFIX}{name.upper()}"
        if env_key in environ:
            values[name] = environ[env_key]

    unknown = sorted(set(values) - set(Settings.model_fields))
    if unknown:
        raise ConfigError(f"Unknown settings: {unknown}")

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
