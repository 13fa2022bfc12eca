"""Split a local canonical WAV with the pipeline chunker and print the segments."""

import argparse
from pathlib import Path

from speechtext.chunker import split_audio
from speechtext.janitor import ResourceJanitor
from speechtext.models import CanonicalAudio


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("wav", type=Path, help="16 kHz mono PCM WAV file")
    parser.add_argument("--chunk-seconds", type=int, default=35)
    parser.add_argument("--output-dir", type=Path, default=None, help="Keep segments here")
    args = parser.parse_args(argv)

    janitor = ResourceJanitor()
    output_dir = args.output_dir
    if output_dir is None:
        output_dir = janitor.make_temp_dir(prefix="chunks_")
    else:
        output_dir.mkdir(parents=True, exist_ok=True)

    try:
        segments = split_audio(CanonicalAudio(path=args.wav), args.chunk_seconds, output_dir, janitor)
        print(f"{'index':>5}  {'seconds':>8}  {'bytes':>10}  path")
        for seg in segments:
            print(f"{seg.index:>5}  {seg.duration_sec:>8.2f}  {seg.byte_length:>10}  {seg.path}")
    finally:
        if args.output_dir is None:
            janitor.cleanup()

    return segments


if __name__ == "__main__":
    main()
