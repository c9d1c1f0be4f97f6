"""Application settings, read from the environment (and a local .env file)."""

import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

API_VERSION = "1.0.0"


class Settings(BaseModel):
    sheets_backend: str = "google"
    google_credentials_json: Optional[str] = None
    google_credentials_file: str = "credentials.json"
    cors_origins: List[str] = ["*"]
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 8000


def load_settings() -> Settings:
    """Build Settings from environment variables; call once at startup"""
    load_dotenv()

    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    return Settings(
        sheets_backend=os.getenv("SHEETS_BACKEND", "google").lower(),
        google_credentials_json=os.getenv("GOOGLE_CREDENTIALS_JSON") or None,
        google_credentials_file=os.getenv("GOOGLE_CREDENTIALS_FILE", "credentials.json"),
        cors_origins=origins or ["*"],
        environment=os.getenv("ENVIRONMENT", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        port=int(os.getenv("PORT", 8000)),
    )
