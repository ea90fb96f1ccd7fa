# expense_tracker/core/config.py

from functools import lru_cache
from pathlib import Path
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the project root directory (where .env should be located)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

SESSION_BACKENDS = ("memory", "database")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore"
    )

    # App Configuration
    APP_NAME: str = "Expense Tracker API"
    DEBUG: bool = False
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database Configuration
    DATABASE_URL: str = f"sqlite+aiosqlite:///{BASE_DIR / 'expense_tracker.db'}"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_STATEMENT_TIMEOUT: float = 10.0
    CREATE_TABLES_ON_STARTUP: bool = True
    SEED_DEFAULT_CATEGORIES: bool = True

    # Security Configuration
    SECRET_KEY: str
    BCRYPT_ROUNDS: int = 10

    # Session Configuration
    SESSION_BACKEND: str = "memory"
    SESSION_COOKIE_NAME: str = "expense_session"
    SESSION_MAX_AGE_SECONDS: int = 86400
    SESSION_COOKIE_SECURE: bool = False

    # CORS Configuration
    FRONTEND_URL: str = "http://localhost:3000"

    @field_validator("SECRET_KEY")
    @classmethod
    def secret_key_length(cls, value: str) -> str:
        if len(value) < 16:
            raise ValueError("SECRET_KEY must be at least 16 characters long")
        return value

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def bcrypt_rounds_range(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return value

    @field_validator("SESSION_BACKEND")
    @classmethod
    def known_session_backend(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in SESSION_BACKENDS:
            raise ValueError(f"SESSION_BACKEND must be one of {', '.join(SESSION_BACKENDS)}")
        return value

    @property
    def is_sqlite(self) -> bool:
        """SQLite URLs get no pool sizing (the dialect picks its own pool)"""
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    return Settings()
