# backend/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./database_inventory.db"

    FRONTEND_URL: str = "http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    # Defaults used until an admin saves application settings
    LOW_STOCK_THRESHOLD: int = 5
    DEFAULT_CATEGORY: str = "General"
    AUTO_GENERATE_SKU: bool = True
    CURRENCY: str = "USD"

    # CSV import upload limit
    IMPORT_MAX_BYTES: int = 5 * 1024 * 1024

    # Product icons are written here and served under /uploads
    UPLOAD_DIR: str = "static/uploads"

    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")

settings = Settings()
