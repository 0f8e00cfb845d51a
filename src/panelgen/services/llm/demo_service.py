import logging
from collections import deque
from typing import Iterable, List, Optional

from ...models.dialogue import ChatMessage
from .base import CompletionClient

logger = logging.getLogger(__name__)

DEMO_PREFIX = "DEMO 응답: "

class DemoCompletionClient(CompletionClient):
    """Offline client.

    Replays scripted replies in order; once they run out it echoes the last
    message back with a demo prefix.
    """

    def __init__(self, responses: Optional[Iterable[str]] = None):
        self._responses = deque(responses or [])
        self.calls: List[List[ChatMessage]] = []

    def queue(self, *responses: str) -> None:
        self._responses.extend(responses)

    async def complete(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        timeout: Optional[float] = None
    ) -> str:
        self.calls.append(list(messages))
        if self._responses:
            return self._responses.popleft()
        last = messages[-1].content if messages else ""
        logger.debug("No scripted reply left, echoing last message")
        return DEMO_PREFIX + last
