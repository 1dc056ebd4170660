import logging
from dataclasses import dataclass, field
from typing import List

logger = logging.getLogger("plantscan")

MAX_ENTRIES = 200


@dataclass
class EventLog:
    entries: List[str] = field(default_factory=list)

    def log(self, msg: str, level: int = logging.INFO):
        logger.log(level, msg)
        self.entries.append(msg)
        if len(self.entries) > MAX_ENTRIES:
            self.entries = self.entries[-MAX_ENTRIES:]

    def recent(self, n: int = 50) -> List[str]:
        return self.entries[-n:]
