"""Abstract base classes for pluggable speech recognition backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from speechtext.backends.types import RecognizedText, SessionEnd

RecognizedCallback = Callable[[RecognizedText], None]
SessionEndCallback = Callable[[SessionEnd], None]


class RecognitionSession(ABC):
    """A continuous recognition session over a single WAV file.

    Callbacks may be invoked from threads owned by the backend, never from
    the caller's event loop. ``start`` and ``stop`` block until the service
    acknowledges the command.
    """

    @abstractmethod
    def connect(self, on_recognized: RecognizedCallback, on_session_end: SessionEndCallback) -> None:
        """Register event callbacks. Must be called before ``start``."""

    @abstractmethod
    def start(self) -> None:
        """Begin continuous recognition."""

    @abstractmethod
    def stop(self) -> None:
        """End continuous recognition. Safe to call after the session ended."""

    def close(self) -> None:
        """Release callbacks and native resources.

        Default implementation: no-op.
        """


class RecognitionBackend(ABC):
    """Abstract interface for streaming speech recognition services."""

    @abstractmethod
    def open_session(self, wav_path: Path) -> RecognitionSession:
        """Create a session that will read audio from ``wav_path``."""
