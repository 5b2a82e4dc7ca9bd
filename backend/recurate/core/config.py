from pydantic_settings import BaseSettings
from typing import Optional


DEFAULT_SECRET_KEY = "change-me-recurate-session-secret"


class Settings(BaseSettings):
    # Database connection string - can be overridden via .env file
    # Any SQLAlchemy URL works; SQLite is the default single-node store
    DATABASE_URL: str = "sqlite:///./recurate.db"

    # Security settings
    # SECRET_KEY signs the session cookie - must be overridden in production
    # If compromised, attackers can mint cookies for any live session token
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    ALGORITHM: str = "HS256"  # Cookie signing algorithm - must match in security.py
    BCRYPT_ROUNDS: int = 10  # Work factor for password hashing

    # Server-side sessions
    SESSION_COOKIE_NAME: str = "recurate_session"
    SESSION_IDLE_TIMEOUT_MINUTES: int = 30
    SESSION_PURGE_INTERVAL_MINUTES: int = 10
    SCHEDULER_ENABLED: bool = True  # Background session purge job
    SESSION_COOKIE_SECURE: bool = False

    # Fixed-window limit for login attempts, in `limits` notation
    LOGIN_RATE_LIMIT: str = "5 per 15 minutes"

    # File Storage settings
    UPLOAD_DIR: str = "./public/uploads"  # Directory where uploaded media is stored
    UPLOAD_URL_PREFIX: str = "/uploads"  # Public prefix recorded in the database
    MAX_FILE_SIZE: int = 50 * 1024 * 1024  # 50MB - maximum upload size

    # Bootstrap admin, created on startup when no admin exists
    ADMIN_EMAIL: str = "admin@recurate.local"
    ADMIN_PASSWORD: str = "change-me-admin"
    ADMIN_FULL_NAME: str = "Administrator"
    ADMIN_PHONE: str = "0000000000"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Logging - LOG_FILE adds a file handler next to stderr
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    @property
    def uses_default_secret(self) -> bool:
        return self.SECRET_KEY == DEFAULT_SECRET_KEY

    @property
    def session_idle_timeout_seconds(self) -> int:
        return self.SESSION_IDLE_TIMEOUT_MINUTES * 60

    class Config:
        # Load settings from .env file if it exists
        # Environment variables override defaults
        env_file = ".env"
        case_sensitive = True  # Environment variable names are case-sensitive


settings = Settings()
