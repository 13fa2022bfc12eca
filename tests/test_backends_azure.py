"""Tests for AzureSpeechBackend."""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from speechtext.backends.recognition import azure
from speechtext.backends.recognition.azure import AzureRecognitionSession, AzureSpeechBackend
from speechtext.backends.types import RecognitionReason, SessionEndReason
from speechtext.config import SpeechServiceConfig


@pytest.fixture
def mock_sdk():
    with patch.object(azure, "speechsdk") as sdk:
        yield sdk


@pytest.fixture
def config():
    return SpeechServiceConfig(subscription_key="key", region="westeurope")


def _connected_session():
    recognizer = MagicMock()
    session = AzureRecognitionSession(recognizer)
    recognized, ended = [], []
    session.connect(recognized.append, ended.append)
    handlers = {
        "recognized": recognizer.recognized.connect.call_args[0][0],
        "canceled": recognizer.canceled.connect.call_args[0][0],
        "session_stopped": recognizer.session_stopped.connect.call_args[0][0],
    }
    return session, recognizer, handlers, recognized, ended


class TestAzureSpeechBackend:
    """Tests for session creation."""

    def test_open_session_configures_recognizer(self, mock_sdk, config):
        backend = AzureSpeechBackend(config)

        session = backend.open_session(Path("/tmp/chunk_1.wav"))

        assert isinstance(session, AzureRecognitionSession)
        mock_sdk.SpeechConfig.assert_called_once_with(subscription="key", region="westeurope")
        speech_config = mock_sdk.SpeechConfig.return_value
        assert speech_config.speech_recognition_language == "en-US"
        speech_config.set_profanity.assert_called_once_with(mock_sdk.ProfanityOption.Masked)
        mock_sdk.audio.AudioConfig.assert_called_once_with(filename="/tmp/chunk_1.wav")
        mock_sdk.SpeechRecognizer.assert_called_once_with(
            speech_config=speech_config,
            audio_config=mock_sdk.audio.AudioConfig.return_value,
        )

    def test_raw_profanity_option(self, mock_sdk):
        backend = AzureSpeechBackend(SpeechServiceConfig(subscription_key="key", region="westeurope", profanity="raw"))

        backend.open_session(Path("/tmp/chunk_1.wav"))

        mock_sdk.SpeechConfig.return_value.set_profanity.assert_called_once_with(mock_sdk.ProfanityOption.Raw)


class TestAzureRecognitionSession:
    """Tests for SDK event translation."""

    def test_recognized_speech(self, mock_sdk):
        _, _, handlers, recognized, _ = _connected_session()
        result = SimpleNamespace(reason=mock_sdk.ResultReason.RecognizedSpeech, text="Hello.")

        handlers["recognized"](SimpleNamespace(result=result))

        assert recognized[0].text == "Hello."
        assert recognized[0].reason is RecognitionReason.RECOGNIZED

    def test_no_match(self, mock_sdk):
        _, _, handlers, recognized, _ = _connected_session()
        result = SimpleNamespace(reason=mock_sdk.ResultReason.NoMatch, text="")

        handlers["recognized"](SimpleNamespace(result=result))

        assert recognized[0].reason is RecognitionReason.NO_MATCH
        assert not recognized[0].is_final

    def test_canceled(self, mock_sdk):
        _, _, handlers, _, ended = _connected_session()
        details = SimpleNamespace(reason="CancellationReason.EndOfStream", error_details="")

        handlers["canceled"](SimpleNamespace(cancellation_details=details))

        assert ended[0].reason is SessionEndReason.CANCELED
        assert ended[0].detail == "CancellationReason.EndOfStream"

    def test_canceled_with_error(self, mock_sdk):
        _, _, handlers, _, ended = _connected_session()
        details = SimpleNamespace(reason="CancellationReason.Error", error_details="401 Unauthorized")

        handlers["canceled"](SimpleNamespace(cancellation_details=details))

        assert "401 Unauthorized" in ended[0].detail

    def test_session_stopped(self, mock_sdk):
        _, _, handlers, _, ended = _connected_session()
        handlers["session_stopped"](SimpleNamespace())
        assert ended[0].reason is SessionEndReason.STOPPED

    def test_start_stop_wait_for_service(self, mock_sdk):
        session, recognizer, _, _, _ = _connected_session()

        session.start()
        session.stop()

        recognizer.start_continuous_recognition_async.return_value.get.assert_called_once()
        recognizer.stop_continuous_recognition_async.return_value.get.assert_called_once()

    def test_close_disconnects_handlers(self, mock_sdk):
        session, recognizer, _, _, _ = _connected_session()
        session.close()
        recognizer.recognized.disconnect_all.assert_called_once()
        recognizer.canceled.disconnect_all.assert_called_once()
        recognizer.session_stopped.disconnect_all.assert_called_once()
