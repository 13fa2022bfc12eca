import argparse
import functools
import http.server
import tempfile
import threading
import wave
from pathlib import Path

import httpx
import numpy as np


def generate_wav(
    path: str,
    duration_sec: float = 2.0,
    sample_rate: int = 16000,
    frequency: float = 0.0,
):
    """Write a mono 16-bit WAV: silence, or a sine tone when frequency > 0."""
    num_samples = int(duration_sec * sample_rate)
    if frequency > 0:
        t = np.arange(num_samples) / sample_rate
        samples = (np.sin(2 * np.pi * frequency * t) * 8000).astype(np.int16)
    else:
        samples = np.zeros(num_samples, dtype=np.int16)

    with wave.open(path, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(samples.tobytes())


def main():
    parser = argparse.ArgumentParser(description="Post a generated WAV to a running instance")
    parser.add_argument("--url", default="http://localhost:8000/recognize")
    parser.add_argument("--duration", type=float, default=5.0)
    parser.add_argument("--port", type=int, default=8765)
    args = parser.parse_args()

    with tempfile.TemporaryDirectory() as tmp_dir:
        generate_wav(str(Path(tmp_dir) / "smoke.wav"), duration_sec=args.duration)

        handler = functools.partial(http.server.SimpleHTTPRequestHandler, directory=tmp_dir)
        server = http.server.ThreadingHTTPServer(("127.0.0.1", args.port), handler)
        threading.Thread(target=server.serve_forever, daemon=True).start()
        try:
            response = httpx.post(
                args.url,
                json={"BlobFileUrl": f"http://127.0.0.1:{args.port}/smoke.wav"},
                timeout=120.0,
            )
        finally:
            server.shutdown()

    assert response.status_code == 200, f"Expected 200, got {response.status_code}"

    result = response.json()
    print(f"Response: {result}")

    assert result["Message"] == "Speech recognition completed."
    assert isinstance(result["Results"], list)

    print("\nPipeline smoke test passed!")


if __name__ == "__main__":
    main()
