from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Any
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Student Portal"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str = "CHANGE_ME"
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./portal.db"
    DB_ECHO: bool = False

    # ==========================================
    # Session Cookie
    # ==========================================
    SESSION_COOKIE_NAME: str = "session"
    SESSION_TTL_SECONDS: int = 60 * 60 * 24 * 7  # 7 days
    SESSION_SECRET_KEY: str = "CHANGE_ME"
    SESSION_ALGORITHM: str = "HS256"

    # ==========================================
    # One-Time Codes
    # ==========================================
    OTP_TTL_MINUTES: int = 5
    OTP_LENGTH: int = 6
    PHONE_MIN_DIGITS: int = 9

    # ==========================================
    # SMS Gateway
    # ==========================================
    SMS_API_URL: str = "https://sender.ge/api/send.php"
    SMS_API_KEY: str = ""  # Empty disables dispatch
    SMS_TIMEOUT_SECONDS: float = 10.0

    # CORS (stored as comma-separated string, parsed to list)
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    OTP_RATE_LIMIT: str = "5/minute"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""  # Empty disables the rotating file handler

    # ==========================================
    # Listing
    # ==========================================
    DEFAULT_PAGE_LIMIT: int = 100
    STUDENT_SEARCH_LIMIT: int = 50

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields in .env that aren't defined in Settings
    )

    def is_production(self) -> bool:
        """Secure cookies and JSON logs are only used in production"""
        return self.ENVIRONMENT == "production"

    def is_dev_mode(self) -> bool:
        """Check if running in development mode"""
        return self.ENVIRONMENT == "development" or self.DEBUG


# Create settings instance
settings = Settings()
