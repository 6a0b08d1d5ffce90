import logging
import os
import string
import sys
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from typing_extensions import Self

DEFAULT_DATA_DIR = "~/.linkstore"


def data_dir() -> Path:
    """Directory holding the default SQLite database (LINKSTORE_DATA_DIR, else ~/.linkstore)."""
    return Path(os.environ.get("LINKSTORE_DATA_DIR") or DEFAULT_DATA_DIR).expanduser()


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by LINKSTORE_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load config from YAML file if specified."""
        config_file = os.environ.get("LINKSTORE_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class DatabaseConfig(BaseModel):
    """Database configuration (nested in Config, uses env_nested_delimiter).

    The url field uses empty string as sentinel to indicate "derive from data_dir()".
    """

    url: str = ""  # Empty string = derive from data dir; explicit value = use as-is
    echo: bool = False
    auto_migrate: bool = True
    # None follows the dialect (native UUID columns on PostgreSQL, text elsewhere).
    # Set explicitly when attaching to a schema created with the other representation.
    native_uuids: bool | None = None


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from LINKSTORE_LOG_FILE env var."""
        return os.environ.get("LINKSTORE_LOG_FILE")


class LinkingConfig(BaseModel):
    """Linking code generation and lifetime."""

    code_length: int = Field(default=4, ge=1, le=32)
    code_alphabet: str = Field(default=string.digits, min_length=2)
    code_ttl_seconds: int = Field(default=600, gt=0)  # 10 minutes

    @property
    def code_ttl(self) -> timedelta:
        return timedelta(seconds=self.code_ttl_seconds)


class Config(BaseSettings):
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    linking: LinkingConfig = LinkingConfig()

    model_config = {
        "env_prefix": "LINKSTORE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows LINKSTORE_DATABASE__URL override
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def derive_database_url(self) -> Self:
        """Derive a SQLite database URL under data_dir() if none was set."""
        if not self.database.url:
            self.database = DatabaseConfig(
                url=f"sqlite:///{data_dir() / 'linkstore.db'}",
                echo=self.database.echo,
                auto_migrate=self.database.auto_migrate,
                native_uuids=self.database.native_uuids,
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - LINKSTORE_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called once at startup by the embedding application.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(config.level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("alembic").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
