# taskflow/core/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    """
    Environment variables and application settings.
    Values are read from the environment or .env.
    """
    # Database
    DATABASE_URL: str

    # JWT / Security
    SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    BCRYPT_ROUNDS: int = 12

    # First admin (seeded by initial_data.py)
    FIRST_SUPERUSER_NAME: str = "Admin User"
    FIRST_SUPERUSER_EMAIL: str
    FIRST_SUPERUSER_PASSWORD: str

    # App meta
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Notifications / audit
    NOTIFICATION_PAGE_SIZE: int = 20
    ACTIVITY_LOG_PAGE_SIZE: int = 50
    ACTIVITY_LOG_RETENTION_DAYS: int = 90

    @property
    def allowed_origins(self) -> List[str]:
        """Comma-separated ALLOWED_ORIGINS as a list."""
        return [i.strip() for i in self.ALLOWED_ORIGINS.split(",") if i.strip()]

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

settings = Settings()
