"""Data types passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class CanonicalAudio:
    """A 16 kHz mono PCM WAV file produced for one pipeline run."""

    path: Path
    sample_rate: int = 16000
    channels: int = 1


@dataclass(frozen=True)
class AudioSegment:
    """One bounded-duration slice of canonical audio, written as its own WAV."""

    index: int  # 0-based, defines aggregation order
    path: Path
    byte_length: int
    duration_sec: float


@dataclass(frozen=True)
class RecognitionOutcome:
    """Recognized fragments for one segment, in recognition order."""

    segment_index: int
    fragments: list[str] = field(default_factory=list)


class ResultStatus(Enum):
    """Caller-facing result categories."""

    OK = "ok"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    INTERNAL_ERROR = "internal_error"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ResultStatus.OK: 200,
    ResultStatus.BAD_REQUEST: 400,
    ResultStatus.NOT_FOUND: 404,
    ResultStatus.TIMEOUT: 408,
    ResultStatus.INTERNAL_ERROR: 500,
}


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of one run; ``results`` is set only when status is OK."""

    status: ResultStatus
    results: list[str] | None = None
    message: str = ""
