from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from cadence.domain.constants import (
    CONFIG_DIR_NAME,
    EASY_GRADUATING_INTERVAL_DAYS,
    EASY_INTERVAL_MULTIPLIER,
    ENV_PREFIX,
    GRADUATING_INTERVAL_DAYS,
    HARD_INTERVAL_MULTIPLIER,
    INITIAL_EASINESS_FACTOR,
    LAPSE_EASINESS_PENALTY,
    LEARNING_STEPS_MINUTES,
    MIN_EASINESS_FACTOR,
    RELEARNING_STEPS_MINUTES,
    SECOND_REVIEW_INTERVAL_DAYS,
)


def config_file_candidates() -> list[Path]:
    return [
        Path.home() / CONFIG_DIR_NAME / "config.toml",
        Path.home() / ".cadence.toml",
    ]


class SchedulerConfig(BaseSettings):
    """
    Tunable scheduling parameters.
    Supports loading from:
    1. Manual overrides (CLI)
    2. Environment variables (CADENCE_*)
    3. Config file (~/.config/cadence/config.toml)
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra="ignore",
        frozen=True,
    )

    # Steps (minutes)
    learning_steps: tuple[int, ...] = LEARNING_STEPS_MINUTES
    relearning_steps: tuple[int, ...] = RELEARNING_STEPS_MINUTES

    # Easiness
    initial_easiness_factor: float = INITIAL_EASINESS_FACTOR
    min_easiness_factor: float = Field(default=MIN_EASINESS_FACTOR, ge=MIN_EASINESS_FACTOR)
    lapse_easiness_penalty: float = Field(default=LAPSE_EASINESS_PENALTY, ge=0)

    # Intervals (days)
    graduating_interval: int = Field(default=GRADUATING_INTERVAL_DAYS, ge=1)
    easy_graduating_interval: int = Field(default=EASY_GRADUATING_INTERVAL_DAYS, ge=1)
    second_review_interval: int = Field(default=SECOND_REVIEW_INTERVAL_DAYS, ge=1)
    hard_interval_multiplier: float = Field(default=HARD_INTERVAL_MULTIPLIER, gt=0)
    easy_interval_multiplier: float = Field(default=EASY_INTERVAL_MULTIPLIER, gt=0)

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
        toml_file = None
        for f in config_file_candidates():
            if f.exists():
                toml_file = f
                break

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("learning_steps", "relearning_steps")
    @classmethod
    def check_steps(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        if not v:
            raise ValueError("step schedule must contain at least one step")
        if any(step <= 0 for step in v):
            raise ValueError("every step must be a positive number of minutes")
        return v

    @model_validator(mode="after")
    def check_initial_easiness(self) -> "SchedulerConfig":
        if self.initial_easiness_factor < self.min_easiness_factor:
            raise ValueError("initial_easiness_factor must not be below min_easiness_factor")
        return self


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> SchedulerConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in SchedulerConfig
    2. ~/.config/cadence/config.toml (if exists)
    3. Environment variables (CADENCE_*)
    4. cli_overrides (passed from Typer); None values are ignored
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return SchedulerConfig(**overrides)
