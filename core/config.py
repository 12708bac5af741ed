from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Farmers Connect Admin API"
    ENV: str = "development"

    # -------------------------------------------------
    # Dashboard frontends (CORS)
    # -------------------------------------------------
    DASHBOARD_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # -------------------------------------------------
    # Supabase (DB, Auth, Storage, RPC)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None)
    SUPABASE_ANON_KEY: Optional[str] = Field(None)
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None)

    # Storage bucket holding homepage cover images
    COVER_IMAGE_BUCKET: str = "cover-images"

    # -------------------------------------------------
    # Admin sessions
    # -------------------------------------------------
    SESSION_TTL_SECONDS: int = Field(
        8 * 60 * 60,
        description="Seconds before a dashboard session expires (default: 8 hours)",
    )
    SESSION_STORE_PATH: Optional[str] = Field(
        None,
        description="JSON file used to persist sessions across restarts; memory only when unset",
    )

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Normalize CORS origins after loading settings
# -------------------------------------------------
settings.DASHBOARD_ORIGINS = sorted(
    {origin.rstrip("/") for origin in settings.DASHBOARD_ORIGINS}
)
