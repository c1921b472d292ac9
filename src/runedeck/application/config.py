from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from runedeck.application.queue_builder import QueueConfig
from runedeck.application.scheduler import SchedulerConfig
from runedeck.domain import constants


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/runedeck/config.toml",
        Path.home() / ".runedeck.toml",
    ]


class AppConfig(BaseSettings):
    """
    Flat configuration for runedeck.
    Supports loading from:
    1. Config file (~/.config/runedeck/config.toml or ~/.runedeck.toml)
    2. Environment variables (RUNEDECK_*)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="RUNEDECK_",
        extra="ignore",
    )

    # Queue
    due_limit: int = Field(default=constants.DEFAULT_DUE_LIMIT, ge=0)
    new_per_day: int = Field(default=constants.DEFAULT_NEW_PER_DAY, ge=0)
    leech_threshold: int = Field(default=constants.DEFAULT_LEECH_THRESHOLD, ge=1)

    # Scheduler
    min_ease: float = Field(default=constants.DEFAULT_MIN_EASE, gt=0)
    hard_interval_days: int = Field(default=constants.DEFAULT_HARD_INTERVAL_DAYS, ge=1)
    good_interval_days: int = Field(default=constants.DEFAULT_GOOD_INTERVAL_DAYS, ge=1)
    easy_interval_days: int = Field(default=constants.DEFAULT_EASY_INTERVAL_DAYS, ge=1)
    easy_bonus: float = Field(default=constants.DEFAULT_EASY_BONUS, gt=0)

    # Storage
    deck_file: Path | None = None

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

        # Earlier sources take priority
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("deck_file", mode="before")
    @classmethod
    def resolve_deck_file(cls, v: Any) -> Path | None:
        if v:
            return Path(v).expanduser().resolve()
        return None

    @model_validator(mode="after")
    def check_ease_floor(self) -> "AppConfig":
        if self.min_ease > constants.INITIAL_EASE:
            raise ValueError(
                f"min_ease ({self.min_ease}) cannot exceed the initial ease "
                f"({constants.INITIAL_EASE})"
            )
        return self

    def scheduler_config(self) -> SchedulerConfig:
        return SchedulerConfig(
            min_ease=self.min_ease,
            hard_interval_days=self.hard_interval_days,
            good_interval_days=self.good_interval_days,
            easy_interval_days=self.easy_interval_days,
            easy_bonus=self.easy_bonus,
        )

    def queue_config(self) -> QueueConfig:
        return QueueConfig(
            due_limit=self.due_limit,
            new_per_day=self.new_per_day,
            leech_threshold=self.leech_threshold,
        )


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. Config TOML file (if exists)
    3. Environment variables (RUNEDECK_*)
    4. cli_overrides (passed from Typer); None values are dropped
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
