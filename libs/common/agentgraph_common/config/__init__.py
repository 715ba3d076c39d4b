"""Configuration management for the agent graph platform.

Settings are split per concern and loaded from the environment (and an
optional ``.env`` file) through pydantic-settings.
"""

from .app import AppSettings, get_app_settings
from .base import BaseAppSettings
from .credentials import CredentialStoreSettings, get_credential_store_settings
from .database import (
    Database,
    DatabaseSettings,
    get_database,
    get_db,
    get_db_settings,
    set_database,
)
from .settings import Settings, get_settings

__all__ = [
    "AppSettings",
    "BaseAppSettings",
    "CredentialStoreSettings",
    "Database",
    "DatabaseSettings",
    "Settings",
    "get_app_settings",
    "get_credential_store_settings",
    "get_database",
    "get_db",
    "get_db_settings",
    "get_settings",
    "set_database",
]
