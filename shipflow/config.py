# shipflow/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./shipflow.db"
    DATABASE_ECHO: bool = False

    # Batas waktu untuk setiap call ke store (detik)
    STORE_TIMEOUT_SECONDS: float = 10.0

    NOTIFICATION_SERVICE_URL: str = "http://notification-service:8084"
    NOTIFICATION_TIMEOUT_SECONDS: float = 5.0
    NOTIFICATION_WORKERS: int = 4
    NOTIFICATION_QUEUE_SIZE: int = 1000

    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]
    ALLOWED_HOSTS: List[str] = ["*"]

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding='utf-8', extra='ignore')

settings = Settings()
