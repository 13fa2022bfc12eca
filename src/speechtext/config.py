"""
Process-wide configuration loaded once from environment variables.

Configuration:
    AZURE_SPEECH_KEY: Speech service subscription key
        (legacy name: AzureSpeechSubscriptionKey)
    AZURE_SPEECH_REGION: Speech service region (legacy name: AzureSpeechRegion)
    RECOGNITION_BACKEND: Recognition backend to use (default: "azure")
    CHUNK_SECONDS: Maximum segment duration (default: 35)
    RECOGNITION_TIMEOUT_SEC: Global deadline for all segments (default: 30)
    SESSION_TIMEOUT_SEC: Per-session deadline (default: RECOGNITION_TIMEOUT_SEC)
    CLEANUP_GRACE_SEC: Wait for cancelled sessions to stop (default: 5)
    FFMPEG_PATH: Transcoder executable (default: "ffmpeg")
    FETCH_TIMEOUT_SEC: HTTP timeout for downloading the source (default: 60)
    WORK_DIR: Base directory for temporary files (default: system temp dir)
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, PositiveFloat, PositiveInt


class SpeechServiceConfig(BaseModel, frozen=True):
    """Speech service credentials and fixed recognition settings."""

    subscription_key: str
    region: str
    language: str = "en-US"
    profanity: Literal["masked", "removed", "raw"] = "masked"


class PipelineConfig(BaseModel, frozen=True):
    """Limits and tooling used by a single pipeline run."""

    chunk_seconds: PositiveInt = 35
    recognition_timeout_sec: PositiveFloat = 30.0
    session_timeout_sec: PositiveFloat = 30.0
    cleanup_grace_sec: float = Field(default=5.0, ge=0)
    sample_rate: PositiveInt = 16000
    channels: PositiveInt = 1
    ffmpeg_path: str = "ffmpeg"
    fetch_timeout_sec: PositiveFloat = 60.0
    work_dir: str | None = None


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    speech: SpeechServiceConfig
    pipeline: PipelineConfig = PipelineConfig()
    recognition_backend: str = "azure"


def _getenv(*names: str, default: str = "") -> str:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


def load_config() -> AppConfig:
    """Loads configuration from environment variables."""
    recognition_timeout = _getenv("RECOGNITION_TIMEOUT_SEC", default="30")
    return AppConfig(
        speech=SpeechServiceConfig(
            subscription_key=_getenv("AZURE_SPEECH_KEY", "AzureSpeechSubscriptionKey"),
            region=_getenv("AZURE_SPEECH_REGION", "AzureSpeechRegion"),
        ),
        pipeline=PipelineConfig(
            chunk_seconds=_getenv("CHUNK_SECONDS", default="35"),
            recognition_timeout_sec=recognition_timeout,
            session_timeout_sec=_getenv("SESSION_TIMEOUT_SEC", default=recognition_timeout),
            cleanup_grace_sec=_getenv("CLEANUP_GRACE_SEC", default="5"),
            ffmpeg_path=_getenv("FFMPEG_PATH", default="ffmpeg"),
            fetch_timeout_sec=_getenv("FETCH_TIMEOUT_SEC", default="60"),
            work_dir=_getenv("WORK_DIR") or None,
        ),
        recognition_backend=_getenv("RECOGNITION_BACKEND", default="azure"),
    )


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the process-wide configuration singleton."""
    return load_config()
