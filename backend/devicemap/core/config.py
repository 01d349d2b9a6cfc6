from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    APP_NAME: str = "Device Map API"
    # storage backend options: memory | database
    STORAGE_BACKEND: str = "memory"
    DB_URI: str = "sqlite:///./devicemap.db"
    SEED_DEMO_DATA: bool = True
    SEED_RANDOM_SEED: Optional[int] = None
    CORS_ORIGINS: str = "http://localhost:5173"
    LOG_LEVEL: str = "INFO"
    # dashboard client
    API_BASE_URL: str = "http://localhost:8000"
    CLIENT_TIMEOUT_SECONDS: float = 8.0

    model_config = SettingsConfigDict(
        env_file=[
            Path(__file__).resolve().parents[2] / ".env",
            Path(".env"),
        ],
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
