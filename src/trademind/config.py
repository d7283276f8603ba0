"""Configuration via environment variables using pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class JournalConfig(BaseSettings):
    """Application settings, loaded from env vars with TRADEMIND_ prefix.

    Per-trader rules (target/stop defaults, limits, checklist) are part of the
    stored profile, not of this config.
    """

    model_config = {"env_prefix": "TRADEMIND_", "extra": "ignore", "env_file": ".env"}

    # --- Paths ---
    data_path: Path = Field(default=Path("data/journal.json"))
    export_dir: Path = Field(default=Path("out"))

    # --- Volatility gate ---
    vix_threshold: float = 25.0

    # --- Anthropic coach ---
    anthropic_api_key: str = ""
    llm_model: str = "claude-sonnet-4-5-20250929"
    llm_timeout_seconds: int = 60
    llm_max_tokens: int = 1024
    llm_temperature: float = 0.3
    coach_trade_window: int = 10

    # --- Runtime ---
    offline_mode: bool = False
