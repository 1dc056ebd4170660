"""
Speech source fed from outside the process.

The browser's speech engine (lang en-US, interimResults=false) does the
decoding and posts each result to /voice/transcript; engine errors arrive on
/voice/error. Both land in this queue and are replayed to the listener.
"""
import asyncio

from plantscan.adapters.speech.base import SpeechEvent, SpeechSource
from plantscan.orchestrator.errors import SpeechRecognitionError

_CLOSE = object()


class QueueSpeechSource(SpeechSource):
    def __init__(self, event_log):
        self.events = event_log
        self._queue: asyncio.Queue = asyncio.Queue()
        self.lang: str | None = None

    def push_transcript(self, text: str, is_final: bool = True):
        self._queue.put_nowait(SpeechEvent(transcript=text, is_final=is_final))

    def push_error(self, error: str):
        self._queue.put_nowait(SpeechRecognitionError(error))

    def close(self):
        self._queue.put_nowait(_CLOSE)

    def listen(self, lang: str):
        self.lang = lang
        # drop anything queued while nobody was listening, including a stale close
        while not self._queue.empty():
            self._queue.get_nowait()
        self.events.log(f"speech: listening ({lang})")
        return self._iterate()

    async def _iterate(self):
        while True:
            item = await self._queue.get()
            if item is _CLOSE:
                self.events.log("speech: closed")
                return
            if isinstance(item, SpeechRecognitionError):
                raise item
            yield item
