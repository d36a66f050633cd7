"""Conversation data models."""
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Origin(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Direction(str, Enum):
    OUTGOING = "outgoing"
    INCOMING = "incoming"


DIRECTION_BY_ORIGIN = {
    Origin.USER: Direction.OUTGOING,
    Origin.ASSISTANT: Direction.INCOMING,
}


@dataclass(frozen=True)
class Turn:
    """Represents a single utterance in the transcript."""
    text: str
    origin: Origin
    direction: Direction

    def __post_init__(self):
        if not self.text:
            raise ValueError("Turn text cannot be empty")
        if DIRECTION_BY_ORIGIN.get(self.origin) != self.direction:
            raise ValueError(f"Turn from {self.origin!r} cannot be {self.direction!r}")

    @classmethod
    def from_user(cls, text: str) -> "Turn":
        return cls(text=text, origin=Origin.USER, direction=Direction.OUTGOING)

    @classmethod
    def from_assistant(cls, text: str) -> "Turn":
        return cls(text=text, origin=Origin.ASSISTANT, direction=Direction.INCOMING)


@dataclass(frozen=True)
class ConversationSnapshot:
    """Read-only view of the controller state handed to renderers."""
    transcript: Tuple[Turn, ...]
    pending: bool
    draft: str = ""
