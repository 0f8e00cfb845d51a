from .persona import Persona
from .dialogue import (
    MODERATOR,
    ChatMessage,
    DialogueMode,
    DialogueRequest,
    DialogueResult,
    TranscriptLine,
)
from .prompt_style import LanguageHint, PromptStyle, detect_language
from .default_personas import (
    DEFAULT_PERSONAS,
    get_available_panels,
    get_default_panel,
)

__all__ = [
    "Persona",
    "MODERATOR",
    "ChatMessage",
    "DialogueMode",
    "DialogueRequest",
    "DialogueResult",
    "TranscriptLine",
    "LanguageHint",
    "PromptStyle",
    "detect_language",
    "DEFAULT_PERSONAS",
    "get_available_panels",
    "get_default_panel",
]
