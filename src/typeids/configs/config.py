"""Configuration management using pydantic-settings.

**Not a singleton** -- each call to ``get_settings()`` re-reads the
environment and the optional YAML file, so tests and long-running
processes see changes without a restart.

Priority order (highest first):

1. Init kwargs
2. Environment variables (``TYPEIDS_`` prefix, ``__`` nesting)
3. ``.env`` dotenv file in the working directory
4. YAML file named by ``TYPEIDS_CONFIG_FILE`` (when it exists)
5. Field defaults
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .system import GeneratorConfig, LoggingConfig, MetricsConfig

ENV_DELIMITER = "__"  # Nested environment variable delimiter
ENV_PREFIX = "TYPEIDS_"
CONFIG_FILE_ENV = "TYPEIDS_CONFIG_FILE"

DEFAULT_ENCODING = "utf-8"


def _config_file() -> Optional[Path]:
    # Resolved per call so a changed env var takes effect immediately.
    value = os.environ.get(CONFIG_FILE_ENV)
    return Path(value) if value else None


class TypeIDSettings(BaseSettings):
    """Library settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding=DEFAULT_ENCODING,
        env_nested_delimiter=ENV_DELIMITER,
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
    )

    generator: GeneratorConfig = Field(
        default_factory=GeneratorConfig,
        description="UUIDv7 generator settings",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging bootstrap settings",
    )

    metrics: MetricsConfig = Field(
        default_factory=MetricsConfig,
        description="Prometheus counter settings",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
        ]

        config_file = _config_file()
        if config_file is not None and config_file.is_file():
            sources.append(
                YamlConfigSettingsSource(
                    settings_cls,
                    yaml_file=config_file,
                    yaml_file_encoding=DEFAULT_ENCODING,
                )
            )

        sources.append(file_secret_settings)
        return tuple(sources)


def get_settings() -> TypeIDSettings:
    """Build the settings from the current environment."""
    return TypeIDSettings()
