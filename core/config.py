from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Property Access API"
    ENV: str = "development"

    # -------------------------------------------------
    # Admin UI origins
    # -------------------------------------------------
    FRONTEND_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None)
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None)
    SUPABASE_JWT_SECRET: Optional[str] = Field(None)
    SUPABASE_JWT_AUDIENCE: str = "authenticated"

    # -------------------------------------------------
    # Authorization core
    # -------------------------------------------------
    # PostgREST timeout for grant / assignment lookups. A timeout is a
    # store failure and always resolves to DENY.
    AUTHZ_STORE_TIMEOUT_SECONDS: int = Field(
        5,
        description="Timeout (seconds) for authorization store round-trips",
    )

    # Roles whose resource access is narrowed to their assignment edges
    OWNERSHIP_SCOPED_ROLE_IDS: List[int] = Field(
        [5],
        description="Role ids resolved through building/villa/tenant assignments",
    )

    # Used when the token's metadata carries no usable role id
    DEFAULT_ROLE_ID: int = Field(6, description="Fallback role id (tenant)")

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    model_config = SettingsConfigDict(case_sensitive=True)


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
settings.BACKEND_CORS_ORIGINS = sorted(
    {origin.rstrip("/") for origin in settings.FRONTEND_ORIGINS if origin}
)
