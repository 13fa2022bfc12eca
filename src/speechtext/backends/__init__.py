"""Pluggable recognition backend factory.

The factory returns a singleton backend instance chosen by the
``recognition_backend`` configuration value (env ``RECOGNITION_BACKEND``).
Only the selected backend is imported, so a missing SDK for another backend
doesn't cause ImportError.
"""

from __future__ import annotations

from functools import lru_cache

from speechtext.backends.base import RecognitionBackend
from speechtext.config import get_config


@lru_cache(maxsize=1)
def get_recognition_backend() -> RecognitionBackend:
    """Get the configured recognition backend singleton."""
    config = get_config()
    name = config.recognition_backend
    if name == "azure":
        from speechtext.backends.recognition.azure import AzureSpeechBackend

        return AzureSpeechBackend(config.speech)
    raise ValueError(f"Unknown recognition backend: {name}")
