"""
Concurrent fan-out of recognition workers with a global deadline.

One worker task is started per segment. The joint completion of all tasks
is raced against ``recognition_timeout_sec``. If the deadline wins, or any
worker fails, the remaining tasks are cancelled and given up to
``cleanup_grace_sec`` to stop their sessions, so segment files are no longer
in use by the time the caller cleans them up. The transcript is assembled in
segment index order regardless of completion order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence

from speechtext.backends.base import RecognitionBackend
from speechtext.config import PipelineConfig
from speechtext.exceptions import TimeoutFailure
from speechtext.models import AudioSegment, RecognitionOutcome
from speechtext.recognizer import RecognitionWorker

logger = logging.getLogger(__name__)


def assemble_transcript(outcomes: Iterable[RecognitionOutcome]) -> list[str]:
    """Flatten outcomes into one fragment list ordered by segment index."""
    results: list[str] = []
    for outcome in sorted(outcomes, key=lambda o: o.segment_index):
        results.extend(outcome.fragments)
    return results


def _consume_result(task: asyncio.Task) -> None:
    if not task.cancelled():
        task.exception()


async def _cancel_and_drain(tasks: set[asyncio.Task], grace_sec: float) -> None:
    for task in tasks:
        task.cancel()
        task.add_done_callback(_consume_result)
    if grace_sec <= 0:
        return
    _, still_running = await asyncio.wait(tasks, timeout=grace_sec)
    if still_running:
        logger.warning(
            "Recognition sessions still running after cancellation",
            extra={"pending": len(still_running), "grace_sec": grace_sec},
        )


async def transcribe_segments(
    segments: Sequence[AudioSegment],
    backend: RecognitionBackend,
    config: PipelineConfig,
) -> list[str]:
    """Recognize every segment concurrently and return the ordered transcript.

    Raises:
        TimeoutFailure: If the global deadline (or a session deadline) passes
            first. Nothing recognized so far is returned.
        RecognitionFailure: If any session cannot be driven to completion.
    """
    if not segments:
        return []

    tasks = [
        asyncio.create_task(
            RecognitionWorker(
                backend,
                segment,
                config.session_timeout_sec,
                cancel_grace_sec=config.cleanup_grace_sec,
            ).run(),
            name=f"recognize-segment-{segment.index}",
        )
        for segment in segments
    ]

    try:
        done, pending = await asyncio.wait(
            tasks,
            timeout=config.recognition_timeout_sec,
            return_when=asyncio.FIRST_EXCEPTION,
        )
    except asyncio.CancelledError:
        await _cancel_and_drain(set(tasks), config.cleanup_grace_sec)
        raise

    failed = [t for t in tasks if t in done and t.exception() is not None]
    if pending:
        await _cancel_and_drain(pending, config.cleanup_grace_sec)
    if failed:
        raise failed[0].exception()
    if pending:
        logger.warning(
            "Recognition timed out",
            extra={
                "timeout_sec": config.recognition_timeout_sec,
                "pending": len(pending),
                "segment_count": len(segments),
            },
        )
        raise TimeoutFailure(config.recognition_timeout_sec, pending=len(pending))

    return assemble_transcript(task.result() for task in tasks)
