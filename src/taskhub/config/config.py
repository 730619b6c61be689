"""Define configuration for the project."""

import tomllib
from pathlib import Path
from typing import Literal

from pydantic import Field, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings", "settings"]


_app_config_path = Path(__file__).parent / "resources" / "app.toml"

with Path.open(_app_config_path, "rb") as f:
    _config = tomllib.load(f)
    _app_config = _config.get("app", {})
    _server_config = _app_config.get("server", {})
    _task_config = _app_config.get("task", {})
    _db_config = _app_config.get("db", {})
    _log_config = _app_config.get("logging", {})


class Settings(BaseSettings):
    """Application configuration settings."""

    # Environment configuration
    app_env: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Current application environment determining behavior.",
        validation_alias="ENV",
    )

    # Server configuration
    host_binding: str = Field(
        default=_server_config.get("host_binding", "127.0.0.1"),
        description="Host address the server binds to.",
    )

    port: int = Field(
        default=_server_config.get("port", 8000),
        description="Network port the server listens on.",
    )

    version: str = Field(
        default=_server_config.get("version", "0.1.0"),
        description="Version of the application.",
    )

    root_path: str = Field(
        default=_server_config.get("root_path", ""),
        description="Path prefix when the API runs behind a proxy.",
        validation_alias="ROOT_PATH",
    )

    allow_origin_in_dev: list[str] = Field(
        default=_server_config.get("allow_origin", ["http://localhost:3000"]),
        description="CORS allowed origins for cross-origin requests outside prod.",
    )

    # Task configuration
    default_page_size: int = Field(
        default=_task_config.get("default_page_size", 10),
        description="Number of tasks returned per page when no limit is given.",
    )

    max_page_size: int = Field(
        default=_task_config.get("max_page_size", 100),
        description="Upper bound for the page size of task listings.",
    )

    # Queue configuration
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL used by the dramatiq broker.",
        validation_alias="REDIS_URL",
    )

    queue_name: str = Field(
        default=_task_config.get("queue_name", "task-processing"),
        description="Queue receiving task status notifications.",
    )

    publish_timeout: float = Field(
        default=_task_config.get("publish_timeout", 5.0),
        gt=0,
        description="Seconds to wait for the broker to accept a notification.",
    )

    # Database configuration
    db_url: str = Field(
        default="sqlite+aiosqlite:///app.db",
        description="Database connection URL.",
        validation_alias="DATABASE_URL",
    )

    db_logging: bool = Field(
        default=_db_config.get("logging", False),
        description="Whether to enable SQL query logging.",
    )

    db_future: bool = Field(
        default=_db_config.get("future", True),
        description="Whether to use future SQLAlchemy features.",
    )

    db_timeout: int = Field(
        default=_db_config.get("timeout", 30),
        description="Timeout for database operations in seconds.",
    )

    db_pool_size: int = Field(
        default=_db_config.get("pool_size", 5),
        description="Size of the database connection pool.",
    )

    db_max_overflow: int = Field(
        default=_db_config.get("max_overflow", 10),
        description="Maximum number of connections to create beyond the pool size.",
    )

    db_pool_timeout: int = Field(
        default=_db_config.get("pool_timeout", 30),
        description="Timeout for acquiring a connection from the pool.",
    )

    db_pool_recycle: int = Field(
        default=_db_config.get("pool_recycle", 300),
        description="Time in seconds to recycle a connection.",
    )

    db_pool_pre_ping: bool = Field(
        default=_db_config.get("pool_pre_ping", True),
        description="Whether to check if a connection is alive before using it.",
    )

    clear_db_on_restart: bool = Field(
        default=False,
        validation_alias="CLEAR_DB_ON_RESTART",
        description="Whether to clear the database on application restart.",
    )

    seed_db_on_start: bool = Field(
        default=False,
        validation_alias="SEED_DB_ON_START",
        description="Whether to insert example tasks on application start.",
    )

    # Log configuration
    log_dir: str = Field(
        default=_log_config.get("log_dir", "log"),
        description="Directory for storing log files.",
    )

    log_file: str = Field(
        default=_log_config.get("log_file", "app.log"),
        description="Name of the log file.",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (e.g., DEBUG, INFO, WARNING, ERROR).",
    )

    rotation: str = Field(
        default=_log_config.get("rotation", "10 MB"),
        description="Log rotation strategy (time or size-based).",
    )

    loki_url: str = Field(
        default=_log_config.get("loki_url", "http://alloy:9999/loki/api/v1/push"),
        description="Loki push endpoint used for production log shipping.",
        validation_alias="LOKI_URL",
    )

    @computed_field
    @property
    def log_path(self) -> Path:
        """Path where application logs are stored."""
        return Path(self.log_dir) / self.log_file

    @computed_field
    @property
    def reload(self) -> bool:
        """Whether to enable auto-reload on code changes."""
        return bool(_server_config.get("reload")) and self.app_env == "development"

    @model_validator(mode="after")
    def validate_log_level(self) -> "Settings":
        """Adjust log level based on environment."""
        if self.app_env == "production" and self.log_level == "DEBUG":
            self.log_level = "INFO"
        return self

    @model_validator(mode="after")
    def validate_page_sizes(self) -> "Settings":
        """Keep the default page size within the allowed maximum."""
        self.default_page_size = min(self.default_page_size, self.max_page_size)
        return self

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )


# Create a single instance of Settings to use throughout the application
settings = Settings()
