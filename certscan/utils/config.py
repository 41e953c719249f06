"""Configuration and settings management."""

import os
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator
from pathlib import Path

class Settings(BaseSettings):
    # CardLadder valuation service
    CARDLADDER_AUTHORIZATION: Optional[str] = None
    CARDLADDER_APP_CHECK: Optional[str] = None
    CARDLADDER_SEARCH_URL: str = "https://us-central1-cardladder-71d53.cloudfunctions.net/httpCertSearch"
    CARDLADDER_ESTIMATE_URL: str = "https://us-central1-cardladder-71d53.cloudfunctions.net/httpEstimateValue"

    # PSA public image API
    PSA_API_TOKEN: Optional[str] = None
    PSA_IMAGES_URL: str = "https://api.psacard.com/publicapi/cert/GetImagesByCertNumber"

    # Token acquisition: "static" (manual re-entry) or "browser" (login capture)
    TOKEN_SOURCE: str = "static"
    CARDLADDER_LOGIN_URL: str = "https://app.cardladder.com/login"
    CARDLADDER_EMAIL: Optional[str] = None
    CARDLADDER_PASSWORD: Optional[str] = None
    BROWSER_HEADLESS: bool = True
    LOGIN_MAX_ATTEMPTS: int = 0
    TOKEN_CAPTURE_TIMEOUT_S: float = 60.0

    # Logging
    LOG_LEVEL: str = "WARNING"

    # Storage
    SCANS_DIR: str = "scans"
    ENV_FILE: str = ".env"

    # Network
    HTTP_TIMEOUT_S: float = 30.0

    @field_validator(
        'CARDLADDER_AUTHORIZATION', 'CARDLADDER_APP_CHECK', 'PSA_API_TOKEN',
        'CARDLADDER_EMAIL', 'CARDLADDER_PASSWORD',
        mode='before'
    )
    @classmethod
    def validate_secret(cls, v):
        """Convert empty/whitespace strings to None."""
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator('TOKEN_SOURCE', mode='before')
    @classmethod
    def validate_token_source(cls, v):
        """Normalise the token source name; blank means static."""
        if isinstance(v, str):
            v = v.strip().lower() or "static"
            if v not in ("static", "browser"):
                raise ValueError(f"TOKEN_SOURCE must be 'static' or 'browser', got {v!r}")
        return v

    @field_validator('LOG_LEVEL', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        """Convert empty/whitespace strings to default."""
        if isinstance(v, str) and not v.strip():
            return "WARNING"
        return v

    @field_validator('SCANS_DIR', mode='before')
    @classmethod
    def validate_scans_dir(cls, v):
        """Convert empty/whitespace strings to default."""
        if isinstance(v, str) and not v.strip():
            return "scans"
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

def load_settings() -> Settings:
    """Build settings from the env file named by ENV_FILE (default .env)."""
    return Settings(_env_file=os.getenv("ENV_FILE") or ".env")

# Global settings instance
settings = load_settings()

def ensure_scans_dir(scans_dir: Optional[str] = None) -> Path:
    """Ensure the ledger directory exists and return it."""
    path = Path(scans_dir or settings.SCANS_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path
