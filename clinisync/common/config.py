import os
from typing import List
from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings

# Load environment variables from the correct .env file
os.environ.setdefault("APP_ENV", "development")
env_file = ".env" if os.getenv("APP_ENV") == "development" else ".env.production"
load_dotenv(env_file)

class Settings(BaseSettings):
    APP_ENV: str = "development"
    DEBUG: bool = False
    # In-memory by default; state does not outlive the process
    DATABASE_URL: str = "sqlite+aiosqlite://"
    JWT_SECRET: str = "clinisync-development-secret-change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    SESSION_TTL_HOURS: int = 24
    ALLOWED_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "info"

    # Uploads
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Dashboard
    RECENT_ACTIVITY_LIMIT: int = 10

    @field_validator("ALLOWED_ORIGINS", mode="before")
    def split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

settings = Settings()
