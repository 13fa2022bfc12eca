"""Shared data types for recognition backend interfaces."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RecognitionReason(Enum):
    RECOGNIZED = "recognized"  # final, successful recognition
    NO_MATCH = "no_match"  # speech detected but not recognized
    OTHER = "other"


class SessionEndReason(Enum):
    STOPPED = "stopped"
    CANCELED = "canceled"


@dataclass(frozen=True)
class RecognizedText:
    """A recognition result emitted by a session."""

    text: str
    reason: RecognitionReason = RecognitionReason.RECOGNIZED

    @property
    def is_final(self) -> bool:
        return self.reason is RecognitionReason.RECOGNIZED


@dataclass(frozen=True)
class SessionEnd:
    """Terminal notification from a session."""

    reason: SessionEndReason
    detail: str = ""
