from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from kioku.domain.constants import DEFAULT_QUEUE_LIMIT, DEFAULT_STORE_FILENAME


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/kioku/config.toml",
        Path.home() / ".kioku.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for kioku.
    Supports loading from:
    1. Environment variables (KIOKU_*)
    2. Config file (~/.config/kioku/config.toml or ~/.kioku.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="KIOKU_",
        extra="ignore",
    )

    # Storage
    backend: Literal["json", "memory"] = "json"
    store_path: Path = Field(
        default_factory=lambda: Path.home() / ".local/share/kioku" / DEFAULT_STORE_FILENAME,
        validate_default=True,
    )

    # Review session
    queue_limit: int = Field(default=DEFAULT_QUEUE_LIMIT, ge=1)

    # Logging
    verbose: int = 0

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

        # First existing file wins; sources earlier in the tuple take priority
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

    @field_validator("store_path", mode="before")
    @classmethod
    def resolve_store_path(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/kioku/config.toml (if exists)
    3. Environment variables (KIOKU_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
