"""Configuration module for the taskhub service.

Collects the pieces every other module needs at import time:

- settings: application configuration from environment variables and app.toml
- engine / get_session: async SQLAlchemy engine and per-request sessions
- config_logger: loguru setup for development, testing and production
- ErrorCode / ErrorNames: error vocabulary used by the exception hierarchy
- seed_db: example data for local development
"""

from taskhub.config.config import settings
from taskhub.config.db import engine, get_session
from taskhub.config.errors import ErrorCode, ErrorNames
from taskhub.config.logger import config_logger
from taskhub.config.seed import seed_db

__all__ = [
    "ErrorCode",
    "ErrorNames",
    "config_logger",
    "engine",
    "get_session",
    "seed_db",
    "settings",
]
