from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional
import logging

from ...models.dialogue import ChatMessage

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    """Available completion providers."""
    OPENAI = "openai"
    OLLAMA = "ollama"
    DEMO = "demo"


class CompletionClient(ABC):
    """Base class for completion clients.

    Implementations return the completion text or raise one of
    CompletionTimeout, UpstreamError or UpstreamMalformed.
    """

    @abstractmethod
    async def complete(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        timeout: Optional[float] = None
    ) -> str:
        """Generate a single completion for the message sequence."""
        pass

    async def close(self) -> None:
        """Release any network resources held by the client."""
        pass

    def provider_name(self) -> str:
        """Get the name of the completion provider."""
        return self.__class__.__name__.replace('CompletionClient', '').replace('Service', '')

    @staticmethod
    def to_payload(messages: List[ChatMessage]) -> List[Dict[str, str]]:
        return [{"role": m.role, "content": m.content} for m in messages]

    async def __aenter__(self) -> 'CompletionClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
