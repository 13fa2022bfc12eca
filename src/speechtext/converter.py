"""
Source download and transcoding to canonical audio.

The source file is streamed from its URL into a temporary file, then ffmpeg
resamples it to 16 kHz mono PCM WAV. Both failure kinds (fetch and
transcode) are logged with their details but surface to callers only as
ConversionFailure, and no partial canonical file is ever returned.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import httpx

from speechtext.config import PipelineConfig
from speechtext.exceptions import ConversionFailure, FetchFailure, TranscodeFailure
from speechtext.janitor import ResourceJanitor
from speechtext.models import CanonicalAudio

logger = logging.getLogger(__name__)


def build_transcode_command(
    ffmpeg_path: str,
    input_path: Path | str,
    output_path: Path | str,
    sample_rate: int = 16000,
    channels: int = 1,
) -> list[str]:
    """Build the ffmpeg argument list for resampling to canonical PCM."""
    return [
        ffmpeg_path,
        "-y",
        "-hide_banner",
        "-loglevel",
        "error",
        "-i",
        str(input_path),
        "-vn",
        "-ar",
        str(sample_rate),
        "-ac",
        str(channels),
        "-c:a",
        "pcm_s16le",
        str(output_path),
    ]


class FormatConverter:
    """Fetches a remote audio/video file and produces canonical audio."""

    def __init__(self, http_client: httpx.AsyncClient, config: PipelineConfig):
        self._http = http_client
        self._config = config

    async def convert(self, source_url: str, janitor: ResourceJanitor) -> CanonicalAudio:
        """
        Download ``source_url`` and transcode it to 16 kHz mono WAV.

        Every file written is registered with ``janitor`` before it is written,
        so a failure at any step still leaves nothing behind after cleanup.

        Raises:
            ConversionFailure: If the download or the transcode fails. The
                concrete subclass (FetchFailure, TranscodeFailure) is kept for
                logging; callers should treat all of them alike.
        """
        try:
            raw_path = janitor.make_temp_file(suffix=".src")
            await self._download(source_url, raw_path)

            wav_path = janitor.track(raw_path.with_suffix(".wav"))
            await self._transcode(source_url, raw_path, wav_path)

            raw_path.unlink(missing_ok=True)
        except ConversionFailure as e:
            logger.warning(
                "Conversion failed",
                extra={
                    "source_url": source_url,
                    "failure": type(e).__name__,
                    "status_code": getattr(e, "status_code", None),
                    "returncode": getattr(e, "returncode", None),
                    "stderr": getattr(e, "stderr", "")[-500:],
                },
            )
            raise
        except Exception as e:
            logger.exception("Unexpected error during conversion", extra={"source_url": source_url})
            raise ConversionFailure(source_url, e) from e

        logger.info(
            "Source converted to canonical audio",
            extra={"source_url": source_url, "path": str(wav_path)},
        )
        return CanonicalAudio(
            path=wav_path,
            sample_rate=self._config.sample_rate,
            channels=self._config.channels,
        )

    async def _download(self, source_url: str, dest: Path) -> None:
        try:
            async with self._http.stream(
                "GET", source_url, timeout=self._config.fetch_timeout_sec
            ) as response:
                if not response.is_success:
                    raise FetchFailure(source_url, status_code=response.status_code)
                loop = asyncio.get_running_loop()
                f = await loop.run_in_executor(None, open, dest, "wb")
                try:
                    async for chunk in response.aiter_bytes():
                        await loop.run_in_executor(None, f.write, chunk)
                finally:
                    await loop.run_in_executor(None, f.close)
        except FetchFailure:
            raise
        except httpx.HTTPError as e:
            raise FetchFailure(source_url, cause=e) from e

    async def _transcode(self, source_url: str, input_path: Path, output_path: Path) -> None:
        cmd = build_transcode_command(
            self._config.ffmpeg_path,
            input_path,
            output_path,
            sample_rate=self._config.sample_rate,
            channels=self._config.channels,
        )
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise TranscodeFailure(source_url, cause=e) from e

        _, stderr = await process.communicate()
        if process.returncode != 0:
            raise TranscodeFailure(
                source_url,
                returncode=process.returncode,
                stderr=stderr.decode(errors="replace"),
            )
