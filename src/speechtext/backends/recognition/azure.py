"""Azure Speech recognition backend (azure-cognitiveservices-speech).

Each segment gets its own SpeechRecognizer reading the segment WAV directly.
The SDK delivers events on its own threads; this module only translates
them into backend-neutral types and leaves thread hand-off to the caller.
"""

from __future__ import annotations

from pathlib import Path

import azure.cognitiveservices.speech as speechsdk

from speechtext.backends.base import (
    RecognitionBackend,
    RecognitionSession,
    RecognizedCallback,
    SessionEndCallback,
)
from speechtext.backends.types import (
    RecognitionReason,
    RecognizedText,
    SessionEnd,
    SessionEndReason,
)
from speechtext.config import SpeechServiceConfig

class AzureRecognitionSession(RecognitionSession):
    """Continuous recognition over one WAV file via SpeechRecognizer."""

    def __init__(self, recognizer: speechsdk.SpeechRecognizer):
        self._recognizer = recognizer

    def connect(self, on_recognized: RecognizedCallback, on_session_end: SessionEndCallback) -> None:
        def _recognized(evt) -> None:
            result = evt.result
            if result.reason == speechsdk.ResultReason.RecognizedSpeech:
                reason = RecognitionReason.RECOGNIZED
            elif result.reason == speechsdk.ResultReason.NoMatch:
                reason = RecognitionReason.NO_MATCH
            else:
                reason = RecognitionReason.OTHER
            on_recognized(RecognizedText(text=result.text or "", reason=reason))

        def _canceled(evt) -> None:
            details = evt.cancellation_details
            detail = str(details.reason)
            if details.error_details:
                detail = f"{detail}: {details.error_details}"
            on_session_end(SessionEnd(SessionEndReason.CANCELED, detail=detail))

        def _stopped(_evt) -> None:
            on_session_end(SessionEnd(SessionEndReason.STOPPED))

        self._recognizer.recognized.connect(_recognized)
        self._recognizer.canceled.connect(_canceled)
        self._recognizer.session_stopped.connect(_stopped)

    def start(self) -> None:
        self._recognizer.start_continuous_recognition_async().get()

    def stop(self) -> None:
        self._recognizer.stop_continuous_recognition_async().get()

    def close(self) -> None:
        self._recognizer.recognized.disconnect_all()
        self._recognizer.canceled.disconnect_all()
        self._recognizer.session_stopped.disconnect_all()


class AzureSpeechBackend(RecognitionBackend):
    """Azure Speech backend with a fixed language and profanity masking."""

    def __init__(self, config: SpeechServiceConfig):
        self._config = config

    def _speech_config(self) -> speechsdk.SpeechConfig:
        speech_config = speechsdk.SpeechConfig(
            subscription=self._config.subscription_key,
            region=self._config.region,
        )
        speech_config.speech_recognition_language = self._config.language
        speech_config.set_profanity(getattr(speechsdk.ProfanityOption, self._config.profanity.capitalize()))
        return speech_config

    def open_session(self, wav_path: Path) -> AzureRecognitionSession:
        audio_config = speechsdk.audio.AudioConfig(filename=str(wav_path))
        recognizer = speechsdk.SpeechRecognizer(
            speech_config=self._speech_config(),
            audio_config=audio_config,
        )
        return AzureRecognitionSession(recognizer)
