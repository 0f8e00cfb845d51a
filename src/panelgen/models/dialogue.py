# src/panelgen/models/dialogue.py
from enum import Enum
from typing import List, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .persona import Persona

MODERATOR = "moderator"
TOPIC_MAX_CHARS = 200
MIN_PARTICIPANTS = 2
MAX_PARTICIPANTS = 6
MIN_ROUNDS = 1
MAX_ROUNDS = 5


class DialogueMode(str, Enum):
    """Prompt style for a run."""
    DEFAULT = "default"    # customer-experience (CXP) framing
    EMOTION = "emotion"    # feelings and emotional drivers


class ChatMessage(BaseModel):
    """A single role-tagged message sent to the completion service."""
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str


class DialogueRequest(BaseModel):
    """Input to a group run.

    Construction normalizes the request (topic trimmed, participants
    deduplicated by id, round count clamped); emptiness checks happen at
    orchestrator entry so they surface as panelgen validation errors.
    """
    model_config = ConfigDict(frozen=True)

    topic: str
    participants: Tuple[Persona, ...]
    round_count: int = 2
    mode: DialogueMode = DialogueMode.DEFAULT

    @field_validator("topic")
    @classmethod
    def _trim_topic(cls, value: str) -> str:
        return value.strip()[:TOPIC_MAX_CHARS]

    @field_validator("participants")
    @classmethod
    def _dedup_participants(cls, value: Tuple[Persona, ...]) -> Tuple[Persona, ...]:
        seen = set()
        unique = []
        for persona in value:
            if persona.id in seen:
                continue
            seen.add(persona.id)
            unique.append(persona)
        return tuple(unique[:MAX_PARTICIPANTS])

    @field_validator("round_count")
    @classmethod
    def _clamp_rounds(cls, value: int) -> int:
        return max(MIN_ROUNDS, min(MAX_ROUNDS, value))

    @property
    def speaker_order(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.participants)


class TranscriptLine(BaseModel):
    """One utterance in the transcript."""
    model_config = ConfigDict(frozen=True)

    speaker: str
    text: str
    round: int = Field(..., ge=1)

    @property
    def is_moderator(self) -> bool:
        return self.speaker == MODERATOR


class DialogueResult(BaseModel):
    """Completed group run."""
    model_config = ConfigDict(frozen=True)

    topic: str
    mode: DialogueMode = DialogueMode.DEFAULT
    transcript: Tuple[TranscriptLine, ...] = ()
    insights: Tuple[str, ...] = ()

    def round_lines(self, round_index: int) -> List[TranscriptLine]:
        return [line for line in self.transcript if line.round == round_index]

    def speakers_in_round(self, round_index: int) -> List[str]:
        return [
            line.speaker for line in self.round_lines(round_index)
            if not line.is_moderator
        ]

    @property
    def round_count(self) -> int:
        return max((line.round for line in self.transcript), default=0)
