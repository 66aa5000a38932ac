"""Configuration for the ORF fluency engine.

Provides a typed configuration model with environment-backed values, an
optional YAML file loader and an accessor that caches the environment
configuration for reuse.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Final

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from orf_fluency.constants import DEFAULT_PAUSE_GAP_SECONDS
from orf_pyutils.errors import ConfigurationError
from orf_pyutils.logging import LogLevel, get_logger

logger = get_logger(__name__)

ENV_PREFIX: Final[str] = "ORF_"


class FluencyConfig(BaseModel):
    """Pydantic configuration model for the fluency engine."""

    log_level: str = "INFO"
    debug: bool = False
    json_logs: bool = False

    range_workers: Annotated[int, Field(ge=1, le=64)] = 1
    analysis_workers: Annotated[int, Field(ge=1, le=8)] = 2
    pause_gap_seconds: Annotated[float, Field(gt=0)] = DEFAULT_PAUSE_GAP_SECONDS

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LogLevel.__members__:
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def effective_log_level(self) -> str:
        return LogLevel.DEBUG.value if self.debug else self.log_level

    @classmethod
    def from_env(cls) -> FluencyConfig:
        """Build the configuration from ``ORF_*`` variables, after loading ``.env``."""
        load_dotenv()
        return _validate(_env_overrides(), source="environment")


def _env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for name in FluencyConfig.model_fields:
        value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            overrides[name] = value
    return overrides


def _validate(values: dict[str, Any], *, source: str) -> FluencyConfig:
    try:
        return FluencyConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigurationError(reason=f"{source}: {e}") from e


def load_config(*, config_path: str | Path | None = None) -> FluencyConfig:
    """Load configuration from a YAML file, then apply ``ORF_*`` overrides.

    Args:
        config_path: Path to a YAML mapping of configuration fields.

    Returns:
        Validated configuration.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid.
    """
    if config_path is None:
        return FluencyConfig.from_env()

    config_file = Path(config_path)
    if not config_file.exists():
        raise ConfigurationError(reason=f"config file not found: {config_path}")

    try:
        with config_file.open("r") as file:
            raw_config = yaml.safe_load(file) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(reason=f"failed to parse YAML config: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigurationError(reason=f"{config_path} must contain a mapping")

    load_dotenv()
    config = _validate({**raw_config, **_env_overrides()}, source=str(config_path))
    logger.info(f"Config loaded from {config_path}")
    return config


@lru_cache(maxsize=1)
def get_fluency_config() -> FluencyConfig:
    """Load and cache the fluency configuration from environment."""
    return FluencyConfig.from_env()
