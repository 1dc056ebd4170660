from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator


@dataclass(frozen=True)
class SpeechEvent:
    transcript: str
    is_final: bool = True


class SpeechSource(ABC):
    @abstractmethod
    def listen(self, lang: str) -> AsyncIterator[SpeechEvent]:
        """Begin listening and return an iterator of utterances, ending on close().

        A decoding failure raises SpeechRecognitionError from the iterator.
        """
        ...

    @abstractmethod
    def close(self):
        ...
