from pydantic_settings import BaseSettings
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
    APP_NAME: str = "MosqueConnect"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str
    API_PREFIX: str = "/api"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 12  # 4 for dev/tests, 12 for prod

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"  # Empty disables file logging

    # ==========================================
    # Pagination
    # ==========================================
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # ==========================================
    # Offers
    # ==========================================
    OFFER_SWEEP_ENABLED: bool = True
    OFFER_SWEEP_INTERVAL_SECONDS: int = 300  # Recompute draft/active/expired every 5 minutes
    OFFER_EXPIRING_SOON_DAYS: int = 7

    # ==========================================
    # Halal certification
    # ==========================================
    CERTIFICATION_VALIDITY_DAYS: int = 365
    CERTIFICATE_URL_BASE: str = "/certificates"

    # ==========================================
    # Prayer times (Aladhan API)
    # ==========================================
    PRAYER_TIMES_API_URL: str = "https://api.aladhan.com/v1/calendar"
    PRAYER_TIMES_TIMEOUT: float = 10.0
    PRAYER_TIMES_DEFAULT_LATITUDE: float = 40.7128  # New York
    PRAYER_TIMES_DEFAULT_LONGITUDE: float = -74.0060
    PRAYER_TIMES_DEFAULT_METHOD: int = 2  # ISNA

    # ==========================================
    # Seed admin (scripts/create_admin.py)
    # ==========================================
    ADMIN_EMAIL: str = ""
    ADMIN_PASSWORD: str = ""
    ADMIN_NAME: str = "Administrator"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


# Create settings instance
settings = Settings()
