"""
Mood Journal Configuration
==========================
All environment variables in one place. Pydantic Settings validates
types at startup so a bad value fails on boot, not on the first request.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Loaded from environment variables or a .env file."""

    # --- Storage ---
    # "memory" keeps entries in-process (dev / tests), "supabase" persists
    # them to the mood_entries table.
    storage_backend: Literal["memory", "supabase"] = "memory"
    supabase_url: str = "http://localhost:54321"
    supabase_service_key: str = ""

    # --- Anthropic / Claude API ---
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    # Analysis payloads carry up to 3 insights, so leave headroom
    anthropic_max_tokens: int = 1024
    anthropic_timeout_seconds: float = 15.0

    # --- App settings ---
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # No auth layer: every request without X-User-Id belongs to this user.
    default_user_id: str = "demo-user"

    # --- Query limits ---
    entries_default_limit: int = 50
    # Analytics reads "everything", capped at a practical upper bound
    analytics_entry_limit: int = 1000
    pattern_history_limit: int = 20

    # --- Feature flags ---
    # Kill switch: if False, entries are enriched by the deterministic
    # fallback only and the Claude API is never called.
    enable_ai_analysis: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
