# app/core/config.py
# Application settings (database URL, JWT secret, platform commission, ...)
from decimal import Decimal
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database
    DATABASE_URL: str
    DATABASE_ECHO: bool = False

    # JWT
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Platform commission taken from every contract (0.10 == 10%).
    # Proposal acceptance reads it to fill contract.platform_fee; settlement
    # pays out amount - platform_fee, so this is the only place the rate lives.
    PLATFORM_COMMISSION_RATE: Decimal = Field(Decimal("0.10"), ge=0, lt=1)

    # Text limits
    MESSAGE_MAX_LENGTH: int = 5000
    NOTE_MAX_LENGTH: int = 2000

    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"


settings = Settings()
