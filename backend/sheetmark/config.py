# backend/sheetmark/config.py
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load your dev env early (optional)
load_dotenv(Path(__file__).parents[1] / ".env.dev", override=False)

class Settings(BaseSettings):
    # Config for pydantic-settings
    model_config = SettingsConfigDict(
        env_file=".env",            # used if present; real env vars still take precedence
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # --- Core ---
    ENV: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # --- Google / Sheets ---
    # Base64 encoded service account JSON; GOOGLE_CREDS_PATH is read when unset
    GOOGLE_SERVICE_ACCOUNT_KEY: Optional[str] = None
    GOOGLE_CREDS_PATH: Optional[str] = None
    SHEETS_TIMEOUT: float = Field(default=30.0, gt=0)
    SHEETS_NUM_RETRIES: int = Field(default=0, ge=0)

    # --- Matching ---
    PROJECT_ID_LABEL: str = "案件ID"
    GREY_RED: float = Field(default=0.3, ge=0, le=1)
    GREY_GREEN: float = Field(default=0.3, ge=0, le=1)
    GREY_BLUE: float = Field(default=0.3, ge=0, le=1)

    # --- CSV upload ---
    CSV_ENCODING: Optional[str] = None
    CSV_FALLBACK_ENCODING: str = "cp932"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    @property
    def grey_color(self) -> dict:
        return {"red": self.GREY_RED, "green": self.GREY_GREEN, "blue": self.GREY_BLUE}

@lru_cache
def get_settings() -> Settings:
    return Settings()
