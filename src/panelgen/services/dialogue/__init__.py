"""Multi-round focus group dialogue."""

from .executor import RoundExecutor
from .insights import InsightExtractor, parse_insights
from .orchestrator import DialogueOrchestrator
from .parser import parse_round, sanitize_opening
from .prompts import RoundPrompt, RoundPromptBuilder, SoloPromptBuilder
from .summarizer import summarize

__all__ = [
    "DialogueOrchestrator",
    "RoundExecutor",
    "RoundPrompt",
    "RoundPromptBuilder",
    "SoloPromptBuilder",
    "InsightExtractor",
    "parse_insights",
    "parse_round",
    "sanitize_opening",
    "summarize",
]
