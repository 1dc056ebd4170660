import asyncio
from enum import Enum

from plantscan.orchestrator.errors import SpeechRecognitionError

# Checked in order against the lower-cased transcript (substring match)
VOICE_RULES = [
    ("start scan", "begin_capture"),
    ("capture",    "take_snapshot"),
]


class VoiceState(str, Enum):
    LISTENING = "listening"
    STOPPED = "stopped"


def match_command(transcript: str) -> str | None:
    text = transcript.lower()
    for phrase, action in VOICE_RULES:
        if phrase in text:
            return action
    return None


class VoiceCommandRouter:
    """Maps final speech transcripts onto pipeline controller actions."""

    def __init__(self, controller, speech_source, event_log, lang: str = "en-US"):
        self.controller = controller
        self.source = speech_source
        self.events = event_log
        self.lang = lang
        self.state = VoiceState.STOPPED
        self.last_error: SpeechRecognitionError | None = None
        self._task: asyncio.Task | None = None
        self._actions: set[asyncio.Task] = set()

    @property
    def listening(self) -> bool:
        return self.state is VoiceState.LISTENING

    def start(self) -> bool:
        """Begin listening. Returns False (no-op) when already listening."""
        if self.listening:
            return False
        self.last_error = None
        self.state = VoiceState.LISTENING
        stream = self.source.listen(self.lang)
        self._task = asyncio.create_task(self._run(stream))
        return True

    async def stop(self):
        if not self.listening:
            return
        self.source.close()
        task = self._task
        if task is not None:
            await task

    def handle_transcript(self, transcript: str) -> str | None:
        """Dispatch one final transcript; returns the action name or None."""
        action = match_command(transcript)
        if action is None:
            self.events.log(f"voice: ignored '{transcript}'")
            return None
        self.events.log(f"voice: '{transcript}' -> {action}")
        task = asyncio.create_task(getattr(self.controller, action)())
        self._actions.add(task)
        task.add_done_callback(self._actions.discard)
        return action

    async def wait_idle(self):
        """Wait for dispatched actions to finish."""
        if self._actions:
            await asyncio.gather(*list(self._actions))

    async def _run(self, stream):
        try:
            async for event in stream:
                if event.is_final:
                    self.handle_transcript(event.transcript)
        except SpeechRecognitionError as e:
            self.last_error = e
            self.events.log(f"voice: recognition error: {e}")
            self.controller.report_error(e)
        finally:
            self.state = VoiceState.STOPPED
            self._task = None
