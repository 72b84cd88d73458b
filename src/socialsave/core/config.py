"""Application configuration utilities.

This module defines application settings loaded from environment variables and
ensures the downloads directory exists at startup.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application settings loaded from the environment.

    Notes
    -----
    - Environment variables are read with the ``SOCIALSAVE_`` prefix
      (e.g., ``SOCIALSAVE_DOWNLOAD_TIMEOUT``).
    - Timeouts are expressed in seconds. Metadata-only calls get short budgets,
      media downloads a long one.
    - ``downloads_dir`` is the only directory the service writes to; the staging
      area for in-flight downloads lives inside it.
    """

    model_config = SettingsConfigDict(env_prefix="SOCIALSAVE_", env_file=".env", extra="ignore")

    app_name: str = Field(default="SocialSave Download Server", description="Application display name")
    debug: bool = Field(default=False, description="Enable debug mode")
    host: str = Field(default="0.0.0.0", description="Interface uvicorn binds to when run as a script")
    port: int = Field(default=3000, description="Port uvicorn listens on when run as a script")
    downloads_dir: Path = Field(
        default=Path("downloads"),
        description="Directory where downloaded artifacts are stored and served from",
    )
    public_downloads_path: str = Field(
        default="/downloads",
        description="URL path under which downloaded artifacts are served",
    )
    cors_origins: list[str] = Field(default=["*"], description="CORS allowed origins")

    ytdlp_binary: str = Field(default="yt-dlp", description="Executable used for extraction")
    default_quality: str = Field(
        default="best[height<=720]",
        description="yt-dlp format selector used when a request does not provide one",
    )

    info_timeout: float = Field(default=30.0, gt=0, description="Budget for template metadata calls")
    record_timeout: float = Field(default=15.0, gt=0, description="Budget for full JSON record calls")
    fallback_timeout: float = Field(default=10.0, gt=0, description="Budget for the simplified fallback call")
    direct_url_timeout: float = Field(default=10.0, gt=0, description="Budget for resolving a direct media URL")
    download_timeout: float = Field(default=300.0, gt=0, description="Budget for media downloads")
    max_output_bytes: int = Field(
        default=50 * 1024 * 1024,
        gt=0,
        description="Upper bound on captured stdout/stderr per invocation",
    )

    retention_seconds: float = Field(default=2 * 60 * 60, gt=0, description="Age after which artifacts are swept")
    sweep_interval_seconds: float = Field(default=60 * 60, gt=0, description="Period of the retention sweep")
    sweep_enabled: bool = Field(default=True, description="Run the retention sweeper in the background")


def ensure_directories(settings: Settings) -> None:
    """Create required directories if they do not exist.

    Notes
    -----
    - Idempotent: safe to call multiple times.
    - The staging directory is created lazily by the download orchestrator.
    """

    settings.downloads_dir.mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache application settings.

    Notes
    -----
    - Cached with ``functools.lru_cache(maxsize=1)`` to provide a single settings instance
      across the process. Tests call ``get_settings.cache_clear()`` after changing the
      environment.
    - Applies ``ensure_directories`` once to guarantee a sane startup state.
    """

    settings: Settings = Settings()
    ensure_directories(settings)
    return settings
