# core/config.py

"""
Runtime settings for the grading engine.

Values are read from environment variables prefixed with `GRADING_` (or from a
local `.env` file), e.g. `GRADING_DATA_DIR=/srv/gradebooks`.
"""

import logging
import os
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GradingSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GRADING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================
    # storage
    # =========================
    data_dir: str = os.path.join(os.path.expanduser("~"), "Documents", "Gradebooks")

    # =========================
    # logging
    # =========================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # =========================
    # reporting
    # =========================
    # sum of item weights above which a PolicyWarning is attached (1.0 == 100%)
    weight_warning_threshold: float = Field(default=1.0, gt=0)
    top_students_limit: int = Field(default=10, ge=1)
    top_subjects_limit: int = Field(default=5, ge=1)
    # dashboard "excellent" counter, independent of the SUPERIOR cut point
    excellent_threshold: float = Field(default=4.5, ge=0, le=5)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("data_dir", mode="after")
    @classmethod
    def _expand_data_dir(cls, v: str) -> str:
        return os.path.abspath(os.path.expanduser(v))


@lru_cache
def get_settings() -> GradingSettings:
    """
    Returns the process-wide settings instance.

    Call `get_settings.cache_clear()` after changing the environment to force a re-read.
    """
    return GradingSettings()


def configure_logging(settings: GradingSettings | None = None) -> None:
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger().setLevel(settings.log_level)
