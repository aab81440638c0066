"""
Speech capture as an async event channel.

A recognizer backend pushes (is_final, text) results into a
SpeechEventSource; the dialogue side consumes them with `async for`.
Interim results only update the dialogue's staging buffer, final results
are submitted as answers. Nothing here advances the dialogue.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Union

from dialogue import GuidedDialogue
from errors import InvalidResponseError, SpeechRecognitionError

logger = logging.getLogger(__name__)

_STOP = object()


@dataclass(frozen=True)
class TranscriptEvent:
    is_final: bool
    text: str


class SpeechEventSource:
    """
    Cancellable, restartable source of transcript events.

    start() and stop() are idempotent. Once stop() returns no further event
    is delivered to consumers of that capture, even if results were already
    queued. Each start() opens a fresh capture.
    """

    def __init__(self):
        self._queue: Optional[asyncio.Queue] = None
        self._generation = 0
        self._active = False
        self._error: Optional[SpeechRecognitionError] = None

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self) -> None:
        if self._active:
            return
        self._generation += 1
        self._queue = asyncio.Queue()
        self._error = None
        self._active = True
        logger.info("Speech capture started", extra={"capture": self._generation})

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        self._queue.put_nowait(_STOP)
        logger.info("Speech capture stopped", extra={"capture": self._generation})

    def push(self, is_final: bool, text: str) -> bool:
        """Deliver a recognizer result; dropped (False) when not capturing."""
        if not self._active:
            return False
        self._queue.put_nowait(TranscriptEvent(is_final=is_final, text=text))
        return True

    def fail(self, error: Union[str, Exception]) -> None:
        """Report a recognizer failure to the consumer and end the capture."""
        if not self._active:
            return
        if not isinstance(error, SpeechRecognitionError):
            error = SpeechRecognitionError(f"Speech recognition error: {error}")
        self._error = error
        self._active = False
        self._queue.put_nowait(_STOP)
        logger.warning("Speech capture failed", extra={"error": error.message})

    async def events(self) -> AsyncIterator[TranscriptEvent]:
        queue = self._queue
        generation = self._generation
        if queue is None:
            return
        while True:
            item = await queue.get()
            if self._generation != generation:
                return
            if self._error is not None:
                raise self._error
            if item is _STOP or not self._active:
                return
            yield item


async def capture_responses(dialogue: GuidedDialogue, source: SpeechEventSource) -> int:
    """
    Feed recognizer results into the dialogue until the capture ends.

    Returns how many final transcripts were accepted into the draft.
    Recognition failures are logged and re-raised to the caller.
    """
    accepted = 0
    try:
        async for event in source.events():
            if not event.is_final:
                dialogue.stage(event.text)
                continue
            try:
                dialogue.submit_response(event.text)
                accepted += 1
            except InvalidResponseError as exc:
                dialogue.stage(event.text)
                logger.warning(exc.message, extra={"field": exc.field_id})
    except SpeechRecognitionError as exc:
        logger.warning("Speech recognition unavailable", extra={"error": exc.message})
        raise
    return accepted
