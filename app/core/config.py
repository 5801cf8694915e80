from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Everything has a development default so the API boots with no .env.

    Production must override at least:
      - JWT_SECRET
      - DATABASE_URL (e.g. a PostgreSQL connection string)
      - ENVIRONMENT=production (hides stack traces in 500 responses)

    Optional:
      - SMTP_* (order notifications are only logged when SMTP_HOST is unset)
    """

    PROJECT_NAME: str = "ShopEase API"
    API_PREFIX: str = "/api"

    # development | production | test
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # DB config
    DATABASE_URL: str = "sqlite:///./shopease.db"
    SQL_ECHO: bool = False

    # JWT issuing / verification
    JWT_SECRET: str = "your-secret-key-change-in-production"
    JWT_ALG: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7

    BCRYPT_ROUNDS: int = 10

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Outgoing mail for order notifications
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_FROM_EMAIL: str | None = None
    SMTP_FROM_NAME: str = "ShopEase"
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
