"""
Speech recognition pipeline orchestration.

A run takes a source URL through:

    Download + transcode -> Split into segments -> Concurrent recognition

and translates the outcome into a caller-facing ResultStatus. Every
temporary artifact is registered with a ResourceJanitor that wraps the whole
run, so files are removed on success, failure and timeout alike.

Metrics:
    Rolling stage timings for the last 100 runs and per-status counters,
    exposed through get_metrics() for the /metrics endpoint.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections import Counter, deque

from speechtext.aggregator import transcribe_segments
from speechtext.backends.base import RecognitionBackend
from speechtext.chunker import split_audio
from speechtext.config import PipelineConfig
from speechtext.converter import FormatConverter
from speechtext.exceptions import ConversionFailure, TimeoutFailure, ValidationFailure
from speechtext.janitor import ResourceJanitor
from speechtext.models import PipelineResult, ResultStatus

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Speech recognition completed."
CONVERSION_FAILED_MESSAGE = "Unable to process the audio file."

# Metrics
_metrics = {
    "conversion_times": deque(maxlen=100),
    "chunking_times": deque(maxlen=100),
    "recognition_times": deque(maxlen=100),
    "statuses": Counter(),
}


def _avg_ms(values) -> float:
    values = list(values)
    return sum(values) / len(values) * 1000 if values else 0


def get_metrics() -> dict:
    return {
        "avg_conversion_time_ms": _avg_ms(_metrics["conversion_times"]),
        "avg_chunking_time_ms": _avg_ms(_metrics["chunking_times"]),
        "avg_recognition_time_ms": _avg_ms(_metrics["recognition_times"]),
        "runs": {status.value: _metrics["statuses"][status.value] for status in ResultStatus},
    }


def validate_source_url(source_url: str | None) -> str:
    """Return the stripped URL, or raise ValidationFailure if it is missing."""
    if not source_url or not source_url.strip():
        raise ValidationFailure()
    return source_url.strip()


class SpeechPipeline:
    """Orchestrates conversion, chunking and recognition. Each run is independent."""

    def __init__(
        self,
        converter: FormatConverter,
        backend: RecognitionBackend,
        config: PipelineConfig,
    ):
        self._converter = converter
        self._backend = backend
        self._config = config

    async def run(self, source_url: str | None) -> PipelineResult:
        """Run the full pipeline for ``source_url``; never raises."""
        result = await self._run(source_url)
        _metrics["statuses"][result.status.value] += 1
        return result

    async def _run(self, source_url: str | None) -> PipelineResult:
        try:
            source_url = validate_source_url(source_url)
        except ValidationFailure as e:
            logger.info("Rejected request without source URL")
            return PipelineResult(ResultStatus.BAD_REQUEST, message=str(e))

        run_id = uuid.uuid4().hex[:12]
        logger.info("Speech recognition run started", extra={"run_id": run_id, "source_url": source_url})

        try:
            with ResourceJanitor(self._config.work_dir) as janitor:
                results = await self._execute(source_url, janitor, run_id)
        except ConversionFailure:
            return PipelineResult(ResultStatus.NOT_FOUND, message=CONVERSION_FAILED_MESSAGE)
        except TimeoutFailure as e:
            logger.warning("Recognition timed out", extra={"run_id": run_id, "error": str(e)})
            return PipelineResult(ResultStatus.TIMEOUT)
        except Exception:
            logger.exception("An error occurred during speech recognition", extra={"run_id": run_id})
            return PipelineResult(ResultStatus.INTERNAL_ERROR)

        logger.info(
            "Speech recognition run completed",
            extra={"run_id": run_id, "fragment_count": len(results)},
        )
        return PipelineResult(ResultStatus.OK, results=results, message=SUCCESS_MESSAGE)

    async def _execute(self, source_url: str, janitor: ResourceJanitor, run_id: str) -> list[str]:
        loop = asyncio.get_running_loop()

        start = time.perf_counter()
        canonical = await self._converter.convert(source_url, janitor)
        _metrics["conversion_times"].append(time.perf_counter() - start)

        start = time.perf_counter()
        segment_dir = janitor.make_temp_dir(prefix=f"chunks_{run_id}_")
        segments = await loop.run_in_executor(
            None,
            split_audio,
            canonical,
            self._config.chunk_seconds,
            segment_dir,
            janitor,
        )
        _metrics["chunking_times"].append(time.perf_counter() - start)

        start = time.perf_counter()
        results = await transcribe_segments(segments, self._backend, self._config)
        _metrics["recognition_times"].append(time.perf_counter() - start)
        return results
