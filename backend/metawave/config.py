from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8000",
    ]

    cors_origin_regex: str | None = None
    trusted_hosts: list[str] = ["*"]
    root_path: str = ""

    # Supabase (validated lazily when a client is created)
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""
    notes_table: str = "notes"

    # Keyword tables: an optional directory whose YAML files extend the packaged ones
    lexicon_dir: str | None = None

    # Emotion scoring
    emotion_secondary_count: int = 2

    # Bias evaluation
    bias_include_voice: bool = False

    # Loop detection
    loop_similarity_threshold: float = 0.7
    loop_min_cluster_size: int = 2
    loop_max_window_days: float = 7.0
    loop_include_voice: bool = False

    # Pruning
    pruning_threshold: float = 0.6

    # Time patterns (hour and weekday buckets use this zone)
    pattern_timezone: str = "UTC"
    pattern_trend_days: int = 30

    # Bulk emotion scoring
    analysis_max_concurrency: int = 3  # Concurrent persistence writes during a bulk pass


settings = Settings()
