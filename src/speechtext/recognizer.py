"""
Per-segment recognition worker.

A worker drives one recognition session over one segment file:

    IDLE -> SESSION_STARTED -> (recognized events) -> SESSION_ENDING -> STOPPED

The session reports completion through either a canceled or a stopped
event; whichever arrives first resolves a one-shot future on the event loop.
After that (or after cancellation or the per-session timeout) the worker
always issues an explicit stop before returning.

Threading model:
    - Backend calls (open/start/stop/close) block, so they run in the loop's
      default executor
    - Backend callbacks arrive on backend threads and are marshalled onto
      the loop with call_soon_threadsafe, which keeps fragments in emission
      order ahead of the terminal event
    - A cancelled worker lets an in-flight open or start return (up to
      cancel_grace_sec) before it stops and closes the session
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from speechtext.backends.base import RecognitionBackend
from speechtext.backends.types import RecognizedText, SessionEnd, SessionEndReason
from speechtext.exceptions import RecognitionFailure, TimeoutFailure
from speechtext.models import AudioSegment, RecognitionOutcome

logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    SESSION_STARTED = "session_started"
    SESSION_ENDING = "session_ending"
    STOPPED = "stopped"


class RecognitionWorker:
    """Runs one segment through a recognition session to completion."""

    def __init__(
        self,
        backend: RecognitionBackend,
        segment: AudioSegment,
        session_timeout_sec: float | None = None,
        cancel_grace_sec: float = 5.0,
    ):
        self.backend = backend
        self.segment = segment
        self.session_timeout_sec = session_timeout_sec
        self.cancel_grace_sec = cancel_grace_sec
        self.state = WorkerState.IDLE
        self.session_end: SessionEnd | None = None
        self._fragments: list[str] = []

    def _log_extra(self, **kwargs) -> dict:
        return {"segment_index": self.segment.index, "path": str(self.segment.path), **kwargs}

    async def run(self) -> RecognitionOutcome:
        """Recognize the segment and return its fragments.

        Raises:
            TimeoutFailure: If the session does not end within
                ``session_timeout_sec``.
            RecognitionFailure: If the session cannot be opened or started.
        """
        if self.state is not WorkerState.IDLE:
            raise RuntimeError("RecognitionWorker.run() may only be called once")

        loop = asyncio.get_running_loop()
        ended: asyncio.Future[SessionEnd] = loop.create_future()

        def _append(result: RecognizedText) -> None:
            if result.is_final and result.text:
                self._fragments.append(result.text)

        def _resolve(end: SessionEnd) -> None:
            if not ended.done():
                ended.set_result(end)

        def on_recognized(result: RecognizedText) -> None:
            loop.call_soon_threadsafe(_append, result)

        def on_session_end(end: SessionEnd) -> None:
            loop.call_soon_threadsafe(_resolve, end)

        open_fut = loop.run_in_executor(None, self.backend.open_session, self.segment.path)
        try:
            session = await asyncio.shield(open_fut)
        except asyncio.CancelledError:
            if await self._settle(open_fut, "open"):
                self._close(open_fut.result())
            elif not open_fut.done():
                open_fut.add_done_callback(self._close_when_opened)
            raise
        except Exception as e:
            logger.exception("Failed to open recognition session", extra=self._log_extra())
            raise RecognitionFailure(self.segment.index, e) from e

        try:
            session.connect(on_recognized, on_session_end)
            start_fut = loop.run_in_executor(None, session.start)
            try:
                await asyncio.shield(start_fut)
            except asyncio.CancelledError:
                # stop must not overtake a start still running on its thread
                await self._settle(start_fut, "start")
                raise
            except Exception as e:
                logger.exception("Failed to start recognition session", extra=self._log_extra())
                raise RecognitionFailure(self.segment.index, e) from e

            self.state = WorkerState.SESSION_STARTED
            logger.debug("Recognition session started", extra=self._log_extra())

            try:
                self.session_end = await asyncio.wait_for(ended, timeout=self.session_timeout_sec)
            except asyncio.TimeoutError:
                logger.warning(
                    "Recognition session did not end in time",
                    extra=self._log_extra(timeout_sec=self.session_timeout_sec),
                )
                raise TimeoutFailure(self.session_timeout_sec) from None

            if self.session_end.reason is SessionEndReason.CANCELED:
                logger.info(
                    "Recognition session canceled",
                    extra=self._log_extra(detail=self.session_end.detail),
                )
        finally:
            await self._shutdown(loop, session)

        logger.info(
            "Segment recognized",
            extra=self._log_extra(fragment_count=len(self._fragments)),
        )
        return RecognitionOutcome(segment_index=self.segment.index, fragments=list(self._fragments))

    async def _settle(self, fut: asyncio.Future, call: str) -> bool:
        """Give a blocking backend call up to ``cancel_grace_sec`` to return.

        Returns True if it returned a result.
        """
        done, _ = await asyncio.wait({fut}, timeout=self.cancel_grace_sec)
        if not done:
            logger.warning(
                "Backend call still running after cancellation",
                extra=self._log_extra(call=call, grace_sec=self.cancel_grace_sec),
            )
            return False
        return fut.exception() is None

    def _close_when_opened(self, fut: asyncio.Future) -> None:
        if not fut.cancelled() and fut.exception() is None:
            self._close(fut.result())

    def _close(self, session) -> None:
        try:
            session.close()
        except Exception:
            logger.warning("Failed to close recognition session", extra=self._log_extra(), exc_info=True)

    async def _shutdown(self, loop: asyncio.AbstractEventLoop, session) -> None:
        self.state = WorkerState.SESSION_ENDING
        try:
            await loop.run_in_executor(None, session.stop)
        except Exception:
            # Session already ended on the service side; stop is best-effort
            logger.warning("Failed to stop recognition session", extra=self._log_extra(), exc_info=True)
        finally:
            self._close(session)
            self.state = WorkerState.STOPPED
