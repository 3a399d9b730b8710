# src/backend/config.py
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",            # auto-load .env (optional; process env wins)
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Storage
    DATA_FILE: str = "data/employees.json"   # full record collection (JSON array)
    UPLOAD_DIR: str = "uploads"              # uploaded photo files
    UPLOAD_URL: str = "/uploads"             # public prefix stored in record.photo

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # Browser UI may be served from a different origin in dev
    CORS_ORIGINS: List[str] = ["*"]


settings = Settings()
