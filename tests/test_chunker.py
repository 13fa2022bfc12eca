"""Tests for the audio chunker."""

import math
import wave

import pytest

from speechtext.chunker import read_pcm, split_audio
from speechtext.models import CanonicalAudio
from speechtext.scripts.chunk_file import main as chunk_file_main


class TestSplitAudio:
    """Tests for split_audio."""

    def test_concatenation_is_lossless(self, make_wav, janitor, work_dir):
        wav = make_wav(12.3)
        segments = split_audio(CanonicalAudio(path=wav), 5, work_dir, janitor)

        joined = b"".join(read_pcm(s.path) for s in segments)
        assert joined == read_pcm(wav)
        assert sum(s.byte_length for s in segments) == len(joined)

    @pytest.mark.parametrize(
        ("duration", "chunk_seconds"),
        [(10.0, 5), (10.5, 5), (4.0, 5), (1.0, 1), (7.25, 3)],
    )
    def test_segment_count(self, make_wav, janitor, work_dir, duration, chunk_seconds):
        segments = split_audio(CanonicalAudio(path=make_wav(duration)), chunk_seconds, work_dir, janitor)

        assert len(segments) == math.ceil(duration / chunk_seconds)
        assert 0 < segments[-1].duration_sec <= chunk_seconds
        assert all(s.duration_sec == chunk_seconds for s in segments[:-1])

    def test_ninety_seconds_at_thirty_five(self, make_wav, janitor, work_dir):
        segments = split_audio(CanonicalAudio(path=make_wav(90.0)), 35, work_dir, janitor)
        assert [s.duration_sec for s in segments] == [35.0, 35.0, 20.0]
        assert [s.index for s in segments] == [0, 1, 2]
        assert [s.path.name for s in segments] == ["chunk_1.wav", "chunk_2.wav", "chunk_3.wav"]

    def test_short_audio_yields_one_segment(self, make_wav, janitor, work_dir):
        segments = split_audio(CanonicalAudio(path=make_wav(2.0)), 35, work_dir, janitor)
        assert len(segments) == 1
        assert segments[0].duration_sec == 2.0

    def test_empty_audio_yields_no_segments(self, make_wav, janitor, work_dir):
        segments = split_audio(CanonicalAudio(path=make_wav(0.0)), 35, work_dir, janitor)
        assert segments == []
        assert list(work_dir.iterdir()) == []

    def test_segments_are_standalone_wavs(self, make_wav, janitor, work_dir):
        segments = split_audio(CanonicalAudio(path=make_wav(3.0)), 2, work_dir, janitor)
        for segment in segments:
            with wave.open(str(segment.path), "rb") as wf:
                assert wf.getnchannels() == 1
                assert wf.getsampwidth() == 2
                assert wf.getframerate() == 16000
                assert wf.getnframes() * 2 == segment.byte_length

    def test_segments_are_tracked(self, make_wav, janitor, work_dir):
        segments = split_audio(CanonicalAudio(path=make_wav(3.0)), 1, work_dir, janitor)
        assert janitor.tracked == [s.path for s in segments]
        janitor.cleanup()
        assert not any(s.path.exists() for s in segments)

    def test_invalid_chunk_seconds(self, make_wav, janitor, work_dir):
        with pytest.raises(ValueError):
            split_audio(CanonicalAudio(path=make_wav(1.0)), 0, work_dir, janitor)


class TestChunkFileScript:
    """Tests for the chunk_file CLI."""

    def test_prints_segments_and_cleans_up(self, make_wav, capsys):
        segments = chunk_file_main([str(make_wav(5.0)), "--chunk-seconds", "2"])
        out = capsys.readouterr().out
        assert len(segments) == 3
        assert "chunk_3.wav" in out
        assert not any(s.path.exists() for s in segments)

    def test_keeps_segments_in_output_dir(self, make_wav, tmp_path):
        out_dir = tmp_path / "out"
        segments = chunk_file_main([str(make_wav(3.0)), "--chunk-seconds", "2", "--output-dir", str(out_dir)])
        assert all(s.path.parent == out_dir and s.path.exists() for s in segments)
