from typing import Optional
from .base import CompletionClient, LLMProvider
from .openai_service import OpenAICompletionClient
from .ollama_service import OllamaCompletionClient
from .demo_service import DemoCompletionClient

def create_completion_client(
    provider: LLMProvider,
    model_name: Optional[str] = None,
    api_key: Optional[str] = None,
    **kwargs
) -> CompletionClient:
    """Create appropriate completion client based on provider."""
    if provider == LLMProvider.OPENAI:
        if not api_key:
            raise ValueError("OpenAI API key required")
        return OpenAICompletionClient(api_key=api_key, model=model_name or "gpt-4o-mini")
    elif provider == LLMProvider.OLLAMA:
        return OllamaCompletionClient(
            model_name=model_name or "mistral:latest",
            host=kwargs.get('host', "http://localhost:11434")
        )
    elif provider == LLMProvider.DEMO:
        return DemoCompletionClient(kwargs.get('responses'))
    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")

__all__ = [
    'CompletionClient',
    'LLMProvider',
    'OpenAICompletionClient',
    'OllamaCompletionClient',
    'DemoCompletionClient',
    'create_completion_client',
]
