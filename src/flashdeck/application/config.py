from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from flashdeck.domain.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_BUSY_TIMEOUT,
    MAX_BATCH_SIZE,
    REFILL_LOW_WATER_MARK,
)

MEMORY_DB = ":memory:"


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/flashdeck/config.toml",
        Path.home() / ".flashdeck.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for flashdeck.
    Supports loading from:
    1. Environment variables (FLASHDECK_*)
    2. Config file (~/.config/flashdeck/config.toml or ~/.flashdeck.toml)
    3. Explicit overrides
    """

    model_config = SettingsConfigDict(
        env_prefix="FLASHDECK_",
        extra="ignore",
    )

    # Storage
    db_path: Path | str = Field(
        default_factory=lambda: Path.home() / ".local/share/flashdeck/flashcards.db"
    )
    busy_timeout: float = DEFAULT_BUSY_TIMEOUT

    # Review queue
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1, le=MAX_BATCH_SIZE)
    low_water_mark: int = Field(default=REFILL_LOW_WATER_MARK, ge=0)
    include_subdecks: bool = True

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_dir: Path | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Find the first existing file; later sources have lower priority.
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("db_path", mode="before")
    @classmethod
    def resolve_db_path(cls, v: Any) -> Path | str:
        if v is None or str(v) == MEMORY_DB:
            return MEMORY_DB
        return Path(v).expanduser().resolve()

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("log_dir", mode="before")
    @classmethod
    def resolve_log_dir(cls, v: Any) -> Path | None:
        if v:
            return Path(v).expanduser().resolve()
        return None

    @property
    def in_memory(self) -> bool:
        return str(self.db_path) == MEMORY_DB


def resolve_config(overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/flashdeck/config.toml (if exists)
    3. Environment variables (FLASHDECK_*)
    4. overrides (None values are ignored)
    """
    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
