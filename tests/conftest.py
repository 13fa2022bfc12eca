"""Pytest configuration and fixtures."""

import wave

import numpy as np
import pytest

from speechtext.config import PipelineConfig
from speechtext.janitor import ResourceJanitor


@pytest.fixture
def make_wav(tmp_path):
    """Factory writing a 16 kHz mono WAV of random PCM with the given duration."""

    def _make(duration_sec: float, name: str = "canonical.wav", sample_rate: int = 16000):
        path = tmp_path / name
        rng = np.random.default_rng(1234)
        samples = rng.integers(-32768, 32767, int(duration_sec * sample_rate), dtype=np.int16)
        with wave.open(str(path), "wb") as wf:
            wf.setnchannels(1)
            wf.setsampwidth(2)
            wf.setframerate(sample_rate)
            wf.writeframes(samples.tobytes())
        return path

    return _make


@pytest.fixture
def work_dir(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def janitor(work_dir):
    janitor = ResourceJanitor(str(work_dir))
    yield janitor
    janitor.cleanup()


@pytest.fixture
def pipeline_config(work_dir):
    """Pipeline config with short deadlines suitable for tests."""
    return PipelineConfig(
        chunk_seconds=35,
        recognition_timeout_sec=2.0,
        session_timeout_sec=2.0,
        cleanup_grace_sec=1.0,
        work_dir=str(work_dir),
    )
