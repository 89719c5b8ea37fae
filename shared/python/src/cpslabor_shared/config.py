"""
config.py — pydantic-settings Settings class.

All environment variables for cpslabor are declared here. The pipeline,
its loaders, and the CLI import `settings` from this module. The
aggregation core never reads settings; it is driven entirely by its
arguments.

Usage:
    from cpslabor_shared.config import settings
    print(settings.table_dir)
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_dotenv() -> Path | None:
    """Walk up from CWD to find the nearest .env file."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / ".env"
        if candidate.is_file():
            return candidate
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_find_dotenv() or ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Extract files (downloaded beforehand from IPUMS CPS)
    # -------------------------------------------------------------------------
    extract_path: str = Field(default="./data/raw/cps_00001.csv")

    # -------------------------------------------------------------------------
    # Outputs
    # -------------------------------------------------------------------------
    processed_dir: str = Field(default="./data/processed")

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")

    # -------------------------------------------------------------------------
    # Derived / computed
    # -------------------------------------------------------------------------
    @property
    def table_dir(self) -> Path:
        return Path(self.processed_dir) / "tables"

    @field_validator("extract_path", "processed_dir", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") if isinstance(v, str) else v


# ---------------------------------------------------------------------------
# Module-level singleton — import this everywhere
# ---------------------------------------------------------------------------
settings = Settings()
