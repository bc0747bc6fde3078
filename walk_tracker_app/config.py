"""Application configuration loaded from environment variables."""
import os
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Directory holding the SQLite file
    data_path: str = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")

    @property
    def db_path(self) -> str:
        return os.path.join(self.data_path, "tracker.db")

    # Raise instead of silently dropping reads/writes when storage is gone
    strict_storage: bool = False

    log_level: str = "INFO"

    # Prefilled in the Log Walk form
    default_equipment: str = "Bodycraft Spacewalker Treadmill"

    model_config = SettingsConfigDict(env_prefix="WALK_TRACKER_")


@lru_cache
def get_settings() -> Settings:
    return Settings()
