import re
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .dialogue import DialogueMode

_HANGUL = re.compile(r"[가-힣]")


class LanguageHint(str, Enum):
    AUTO = "auto"
    KOREAN = "ko"
    ENGLISH = "en"


def detect_language(text: str) -> str:
    """Return "ko" when the text contains Hangul, otherwise "en"."""
    return "ko" if _HANGUL.search(text or "") else "en"


DEFAULT_ANTI_PATTERNS = [
    "Do not speak as an AI assistant or break character",
    "Avoid generic marketing slogans and buzzwords",
    "Do not invent statistics or cite sources you cannot name",
    "Do not simply agree with the previous speaker",
]

DEFAULT_KPI_DEFAULTS = [
    "dwell time",
    "conversion rate",
    "revisit intention",
]

DEFAULT_ROUND_FRAMINGS = [
    "Pain points and friction in the current experience",
    "Concrete on-site ideas that would change behaviour",
    "Trade-offs: price, time and effort",
    "What would make you recommend it to a friend",
]


class PromptStyle(BaseModel):
    """Configuration consumed by the prompt builders."""
    model_config = ConfigDict(frozen=True)

    style_mode: DialogueMode = DialogueMode.DEFAULT
    language_hint: LanguageHint = LanguageHint.AUTO
    anti_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_ANTI_PATTERNS))
    kpi_defaults: List[str] = Field(default_factory=lambda: list(DEFAULT_KPI_DEFAULTS))
    round_framings: List[str] = Field(default_factory=lambda: list(DEFAULT_ROUND_FRAMINGS))

    def with_mode(self, mode: DialogueMode) -> "PromptStyle":
        return self.model_copy(update={"style_mode": mode})

    def resolve_language(self, text: str) -> str:
        """Language to answer in: the configured hint, or echo the input."""
        if self.language_hint == LanguageHint.AUTO:
            return detect_language(text)
        return self.language_hint.value

    def framing_for_round(self, round_index: int) -> Optional[str]:
        """Framing label for rounds after the first.

        A list shorter than the run yields None for the remaining rounds;
        extra labels are never used.
        """
        position = round_index - 2
        if position < 0 or position >= len(self.round_framings):
            return None
        label = self.round_framings[position].strip()
        return label or None
