# problemlog/core/config.py
"""
Centralized application settings.
Values come from the environment (and the .env file loaded in main.py).
"""
import os
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "data")
DEFAULT_DATABASE_FILE = os.path.normpath(os.path.join(DATA_DIR, "db", "problemlog.sqlite"))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "development"
    secret_key: str = "changeme"
    database_url: Optional[str] = None
    allowed_origins: str = "http://localhost:8000"
    access_token_lifetime_seconds: int = 28800  # 8 hours (standard work day)
    upload_dir: str = "uploads"
    log_level: str = "INFO"

    # First Super Admin (optional auto-bootstrap)
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None
    admin_name: str = "Administrator"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def origins(self) -> List[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def resolved_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        os.makedirs(os.path.dirname(DEFAULT_DATABASE_FILE), exist_ok=True)
        return f"sqlite+aiosqlite:///{DEFAULT_DATABASE_FILE}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
