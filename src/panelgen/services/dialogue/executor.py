import asyncio
import logging
from typing import List, Optional

from ...errors import CompletionTimeout, UpstreamMalformed
from ...models.dialogue import ChatMessage
from ..llm.base import CompletionClient

logger = logging.getLogger(__name__)

DEFAULT_DEADLINE = 30.0

class RoundExecutor:
    """Runs one completion call under a hard deadline.

    There is no retry: a timeout or upstream error is raised to the caller.
    """

    def __init__(self, client: CompletionClient, deadline: float = DEFAULT_DEADLINE):
        self.client = client
        self.deadline = deadline

    async def execute(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        deadline: Optional[float] = None
    ) -> str:
        messages = [
            ChatMessage(role="system", content=system_prompt),
            ChatMessage(role="user", content=user_prompt),
        ]
        return await self.complete(messages, temperature, deadline)

    async def complete(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        deadline: Optional[float] = None
    ) -> str:
        if deadline is None:
            deadline = self.deadline
        try:
            # wait_for cancels the in-flight call, which closes its connection
            text = await asyncio.wait_for(
                self.client.complete(messages, temperature=temperature, timeout=deadline),
                timeout=deadline
            )
        except asyncio.TimeoutError as e:
            logger.error(f"{self.client.provider_name()} call exceeded {deadline:.1f}s deadline")
            raise CompletionTimeout(deadline) from e

        if not isinstance(text, str):
            raise UpstreamMalformed(f"Expected text from {self.client.provider_name()}, got {type(text).__name__}")
        logger.debug(f"Completion returned {len(text)} characters")
        return text
