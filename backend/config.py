# backend/config.py
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    # Hosted backend (auth + tables + RPC + storage)
    SUPABASE_URL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
    )
    SUPABASE_ANON_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"),
    )
    # The service-role key used to live under a misnamed public variable; both are read
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_SERVICE_ROLE_KEY", "NEXT_PUBLIC_SUPABASE_SERVICE_ROLE"),
    )

    FRONTEND_URL: Optional[str] = None
    SESSION_COOKIE_NAME: str = "depozit-access-token"
    HTTP_TIMEOUT: float = 10.0

    # Business defaults used by the screens
    APP_TIMEZONE: str = "America/Mazatlan"
    LOW_STOCK_THRESHOLD: int = 10
    TAX_RATE: float = 0.16
    CURRENCY_SYMBOL: str = "$"
    PRODUCT_IMAGES_BUCKET: str = "product-images"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
