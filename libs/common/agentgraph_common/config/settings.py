"""Main application settings container."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

from .app import AppSettings
from .credentials import CredentialStoreSettings
from .database import DatabaseSettings


class Settings(BaseSettings):
    """Main application settings container."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    app: AppSettings = Field(default_factory=AppSettings)
    credentials: CredentialStoreSettings = Field(default_factory=CredentialStoreSettings)

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    """Get the application settings container."""
    return Settings()
