"""
FastAPI application for blob-URL speech recognition.

Endpoints:
    POST /recognize - Transcribe the audio/video file at {"BlobFileUrl": ...}
    GET  /health    - Health check
    GET  /metrics   - Rolling pipeline stage timings and result counts

Responses from /recognize:
    200 {"Message": "Speech recognition completed.", "Results": [...]}
    400 "Blob file URL is required."
    404 "Unable to process the audio file."
    408 (empty) recognition did not finish before the deadline
    500 (empty) any other failure

Startup:
    The .env file (if any) and environment are read once, JSON logging is
    installed, and one shared HTTP client is opened for the process lifetime.
"""

from contextlib import asynccontextmanager

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ValidationError

from speechtext.backends import get_recognition_backend
from speechtext.config import get_config
from speechtext.converter import FormatConverter
from speechtext.logging_setup import setup_logging
from speechtext.models import ResultStatus
from speechtext.pipeline import SpeechPipeline, get_metrics


class SpeechRequest(BaseModel):
    BlobFileUrl: str | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    load_dotenv()
    setup_logging()
    config = get_config()
    async with httpx.AsyncClient(follow_redirects=True) as http_client:
        app.state.pipeline = SpeechPipeline(
            FormatConverter(http_client, config.pipeline),
            get_recognition_backend(),
            config.pipeline,
        )
        yield


app = FastAPI(
    title="SpeechText",
    description="Chunked, concurrent speech recognition for remote audio files",
    lifespan=lifespan,
)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/metrics")
async def metrics():
    return get_metrics()


@app.post("/recognize")
async def recognize(request: Request):
    try:
        payload = SpeechRequest.model_validate(await request.json())
        source_url = payload.BlobFileUrl
    except (ValueError, ValidationError):
        source_url = None

    result = await request.app.state.pipeline.run(source_url)

    if result.status is ResultStatus.OK:
        return JSONResponse({"Message": result.message, "Results": result.results})
    if result.message:
        return JSONResponse(result.message, status_code=result.status.http_status)
    return Response(status_code=result.status.http_status)
