"""Core services for focus group simulation."""

from .llm import (
    CompletionClient,
    LLMProvider,
    OpenAICompletionClient,
    OllamaCompletionClient,
    DemoCompletionClient,
    create_completion_client,
)
from .dialogue import DialogueOrchestrator

__all__ = [
    "CompletionClient",
    "LLMProvider",
    "OpenAICompletionClient",
    "OllamaCompletionClient",
    "DemoCompletionClient",
    "create_completion_client",
    "DialogueOrchestrator",
]
