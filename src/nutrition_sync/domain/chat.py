"""Domain models for the nutrition assistant conversation."""

from dataclasses import dataclass
from typing import Literal

from nutrition_sync.domain.logs import LogPatch


@dataclass(frozen=True)
class ChatMessage:
    """A single message in the assistant conversation."""

    id: str
    role: Literal["user", "model"]
    text: str
    image: bytes | None = None
    is_error: bool = False


@dataclass(frozen=True)
class AssistantReply:
    """Reply text plus the log patch extracted from it, if any."""

    text: str
    patch: LogPatch | None = None
