"""Configuration management for options analytics.

Settings come from defaults, environment variables prefixed with SCOUT_
(e.g. SCOUT_RISK_FREE_RATE=0.045) and, optionally, a YAML file whose
values are applied on top.

Example YAML:
    risk_free_rate: 0.045
    min_score: 70
    seed: 42
    log_level: DEBUG
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DAILY_VOLATILITY_PROXY,
    DEFAULT_MAX_COST,
    DEFAULT_MIN_COST,
    DEFAULT_MIN_SCORE,
    DEFAULT_RESULT_LIMIT,
    DEFAULT_RISK_FREE_RATE,
    IV_MAX_ITERATIONS,
    IV_TOLERANCE,
    MIN_HISTORY_SAMPLES,
    SYNTHETIC_SPREAD_PCT,
    UNUSUAL_ACTIVITY_PROBABILITY,
)
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ScoutSettings(BaseSettings):
    """Engine configuration settings.

    Attributes:
        risk_free_rate: Annual risk-free rate for pricing
        min_history_samples: Minimum samples for IV rank/percentile
        daily_volatility_proxy: Daily move proxy for probability of profit
        iv_tolerance: Newton-Raphson price tolerance
        iv_max_iterations: Newton-Raphson iteration cap
        min_score: Scanner minimum score
        min_cost: Scanner minimum premium per contract (USD)
        max_cost: Scanner maximum premium per contract (USD)
        result_limit: Scanner maximum results
        spread_pct: Synthetic bid/ask spread fraction
        unusual_activity_probability: Synthetic volume spike probability
        seed: Seed for synthetic data and the technical proxy (None = random)
        log_level: Logging level name
    """

    risk_free_rate: float = DEFAULT_RISK_FREE_RATE
    min_history_samples: int = MIN_HISTORY_SAMPLES
    daily_volatility_proxy: float = DAILY_VOLATILITY_PROXY
    iv_tolerance: float = IV_TOLERANCE
    iv_max_iterations: int = IV_MAX_ITERATIONS
    min_score: float = DEFAULT_MIN_SCORE
    min_cost: float = DEFAULT_MIN_COST
    max_cost: float = DEFAULT_MAX_COST
    result_limit: int = DEFAULT_RESULT_LIMIT
    spread_pct: float = SYNTHETIC_SPREAD_PCT
    unusual_activity_probability: float = UNUSUAL_ACTIVITY_PROBABILITY
    seed: Optional[int] = None
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="SCOUT_", case_sensitive=False)

    @field_validator("risk_free_rate", "min_cost", "spread_pct")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError(f"must not be negative, got {value}")
        return value

    @field_validator(
        "iv_tolerance", "daily_volatility_proxy", "iv_max_iterations", "min_history_samples"
    )
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"must be positive, got {value}")
        return value

    @field_validator("result_limit")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"must be at least 1, got {value}")
        return value

    @field_validator("unusual_activity_probability")
    @classmethod
    def _probability(cls, value: float) -> float:
        if not 0 <= value <= 1:
            raise ValueError(f"must be between 0 and 1, got {value}")
        return value

    @field_validator("log_level")
    @classmethod
    def _log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"must be one of: {', '.join(VALID_LOG_LEVELS)}")
        return level

    @model_validator(mode="after")
    def _cost_bounds(self) -> "ScoutSettings":
        if self.max_cost < self.min_cost:
            raise ValueError(
                f"max_cost ({self.max_cost}) must be >= min_cost ({self.min_cost})"
            )
        return self


def load_settings(path: Optional[Union[str, Path]] = None, **overrides: Any) -> ScoutSettings:
    """Load settings from defaults, environment and an optional YAML file.

    Precedence order (highest to lowest):
    1. Keyword overrides
    2. YAML file values
    3. Environment variables (SCOUT_*)
    4. Default values

    Args:
        path: Optional YAML file path
        **overrides: Explicit setting values (e.g. from CLI options)

    Returns:
        Validated ScoutSettings

    Raises:
        ConfigurationError: If the file is missing, is not a YAML mapping,
            or any value fails validation

    Example:
        >>> settings = load_settings("scout.yaml", seed=7)
        >>> print(settings.risk_free_rate)
    """
    values: dict[str, Any] = {}

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        try:
            with open(config_path) as f:
                file_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e

        if file_config is None:
            file_config = {}
        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping, got {type(file_config).__name__}"
            )
        values.update(file_config)
        logger.debug(f"Loaded configuration from {config_path}")

    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ScoutSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
