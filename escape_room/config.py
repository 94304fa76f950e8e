"""
Configuration settings for the escape room engine.

Uses Pydantic Settings for environment variable management with .env file support.
All variables are prefixed with ESCAPE_ROOM_ (e.g. ESCAPE_ROOM_MISMATCH_DELAY_MS).
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ESCAPE_ROOM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Runtime
    # ========================================
    mismatch_delay_ms: int = Field(
        default=500,
        ge=0,
        description="How long a mismatched matching pair stays highlighted",
    )
    gap_marker: str = Field(
        default="[GAP]",
        min_length=1,
        description="Placeholder marking a gap in the cloze text",
    )
    shuffle_seed: int | None = Field(
        default=None,
        description="Seed for matching-column shuffles (random when unset)",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="WARNING",
        description="Loguru level for the CLI sink",
    )

    # ========================================
    # Bundling
    # ========================================
    output_dir: str = Field(
        default="dist",
        description="Directory bundled artifacts are written to by default",
    )
    interpreter: str = Field(
        default="/usr/bin/env python3",
        description="Shebang interpreter written into the bundled artifact",
    )

    @property
    def mismatch_delay_seconds(self) -> float:
        """Mismatch highlight delay in seconds, as the scheduler expects."""
        return self.mismatch_delay_ms / 1000


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
