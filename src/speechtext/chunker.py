"""
Deterministic splitting of canonical audio into bounded-duration segments.

Segments are contiguous, non-overlapping windows of ``chunk_seconds`` worth
of PCM bytes. Each one is written as a standalone WAV with the source's
format so a recognition session can open it on its own. The final window
may be shorter; an empty input yields no segments.
"""

from __future__ import annotations

import logging
import wave
from pathlib import Path

from speechtext.janitor import ResourceJanitor
from speechtext.models import AudioSegment, CanonicalAudio

logger = logging.getLogger(__name__)


def split_audio(
    audio: CanonicalAudio,
    chunk_seconds: int,
    output_dir: Path,
    janitor: ResourceJanitor,
) -> list[AudioSegment]:
    """Split ``audio`` into WAV segments of at most ``chunk_seconds`` each.

    Args:
        audio: The canonical WAV to split.
        chunk_seconds: Maximum duration of a segment, in whole seconds.
        output_dir: Directory the segment files are written into.
        janitor: Tracks every segment file before it is written.

    Returns:
        Segments ordered by index, starting at 0.
    """
    if chunk_seconds <= 0:
        raise ValueError(f"chunk_seconds must be positive, got {chunk_seconds}")

    segments: list[AudioSegment] = []
    with wave.open(str(audio.path), "rb") as reader:
        params = reader.getparams()
        frame_size = params.sampwidth * params.nchannels
        bytes_per_second = params.framerate * frame_size
        frames_per_chunk = params.framerate * chunk_seconds

        while True:
            data = reader.readframes(frames_per_chunk)
            if not data:
                break

            index = len(segments)
            path = janitor.track(output_dir / f"chunk_{index + 1}.wav")
            with wave.open(str(path), "wb") as writer:
                writer.setnchannels(params.nchannels)
                writer.setsampwidth(params.sampwidth)
                writer.setframerate(params.framerate)
                writer.writeframes(data)

            segments.append(
                AudioSegment(
                    index=index,
                    path=path,
                    byte_length=len(data),
                    duration_sec=len(data) / bytes_per_second,
                )
            )

    logger.info(
        "Audio split into segments",
        extra={
            "path": str(audio.path),
            "segment_count": len(segments),
            "duration_sec": sum(s.duration_sec for s in segments),
            "chunk_seconds": chunk_seconds,
        },
    )
    return segments


def read_pcm(path: Path | str) -> bytes:
    """Read the raw PCM frames of a WAV file."""
    with wave.open(str(path), "rb") as reader:
        return reader.readframes(reader.getnframes())
