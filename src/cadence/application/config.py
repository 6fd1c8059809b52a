"""
Layered configuration for cadence.

Resolves scheduler settings from defaults, a TOML config file, `CADENCE_*`
environment variables and CLI overrides, optionally seeded from a YAML
parameter-set file, and builds a Scheduler from the result.
"""

from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
)

from cadence.domain.constants import (
    DEFAULT_ENABLE_FUZZ,
    DEFAULT_LEARNING_STEPS,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_RELEARNING_STEPS,
    DEFAULT_REQUEST_RETENTION,
)
from cadence.domain.errors import MalformedParameterSet
from cadence.domain.parameters import parse_step

from .scheduler import Scheduler

PARAMETER_FIELDS = (
    "weights",
    "request_retention",
    "maximum_interval",
    "enable_fuzz",
    "learning_steps",
    "relearning_steps",
)


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/cadence/config.toml",
        Path.home() / ".cadence.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for cadence.
    Supports loading from:
    1. Environment variables (CADENCE_*)
    2. Config file (~/.config/cadence/config.toml)
    3. Manual overrides (CLI)

    Values are not validated as a parameter set here; that happens when a
    Scheduler is built from them, so a bad setup fails in one place.
    """

    model_config = SettingsConfigDict(
        env_prefix="CADENCE_",
        extra="ignore",
    )

    # Parameter set
    parameters_file: Path | None = None
    weights: tuple[float, ...] | None = None
    request_retention: float = DEFAULT_REQUEST_RETENTION
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL
    enable_fuzz: bool = DEFAULT_ENABLE_FUZZ
    learning_steps: tuple[timedelta, ...] = DEFAULT_LEARNING_STEPS
    relearning_steps: tuple[timedelta, ...] = DEFAULT_RELEARNING_STEPS

    # Execution
    seed: int | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("learning_steps", "relearning_steps", mode="before")
    @classmethod
    def parse_steps(cls, v: Any) -> Any:
        if isinstance(v, list | tuple):
            return tuple(parse_step(step) for step in v)
        return v

    @field_validator("parameters_file", mode="before")
    @classmethod
    def resolve_parameters_file(cls, v: Any) -> Path | None:
        if v is None:
            return None
        return Path(v).expanduser().resolve()

    def parameter_values(self) -> dict[str, Any]:
        """
        Raw parameter-set fields: the YAML file first, explicit settings on top.
        """
        values: dict[str, Any] = {}
        if self.parameters_file is not None:
            values.update(load_parameters_file(self.parameters_file))

        for name in PARAMETER_FIELDS:
            if name in self.model_fields_set or name not in values:
                value = getattr(self, name)
                if value is not None:
                    values[name] = value
        return values


def load_parameters_file(path: Path) -> dict[str, Any]:
    """
    Read a parameter set from YAML.

    The file holds a mapping of parameter fields, optionally nested under a
    top-level `parameters` key.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise MalformedParameterSet(f"Cannot parse {path}: {e}") from e

    if isinstance(data, dict) and isinstance(data.get("parameters"), dict):
        data = data["parameters"]
    if not isinstance(data, dict):
        raise MalformedParameterSet(f"{path} does not contain a mapping of parameters")
    return data


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/cadence/config.toml (if exists)
    3. Environment variables (CADENCE_*)
    4. cli_overrides (passed from Typer)

    Raises:
        MalformedParameterSet: If any layer holds a value of the wrong type.
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    try:
        return AppConfig(**overrides)
    except (ValidationError, SettingsError) as e:
        raise MalformedParameterSet(f"Invalid configuration: {e}") from e


def build_scheduler(config: AppConfig) -> Scheduler:
    """
    Build a Scheduler from resolved configuration.

    Raises:
        MalformedParameterSet: If the configured parameter set is invalid.
    """
    return Scheduler(config.parameter_values(), seed=config.seed)
