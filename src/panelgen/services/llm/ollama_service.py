import json
import logging
from typing import List, Optional

from ...errors import UpstreamError, UpstreamMalformed, truncate_body
from ...models.dialogue import ChatMessage
from .base import CompletionClient
from .session_manager import SessionManager

logger = logging.getLogger(__name__)

class OllamaCompletionClient(CompletionClient):
    """Completion client using a local Ollama server."""

    def __init__(
        self,
        model_name: str = "mistral:latest",
        host: str = "http://localhost:11434",
        context_window: int = 4096,
    ):
        self.model_name = model_name
        self.host = host
        self.api_base = f"{host}/api"
        self.context_window = context_window
        self.session_manager = SessionManager(self.api_base)

    async def complete(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        timeout: Optional[float] = None
    ) -> str:
        data = {
            "model": self.model_name,
            "messages": self.to_payload(messages),
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": min(2048, self.context_window),
            }
        }

        logger.debug(f"Sending chat request to Ollama model {self.model_name}")
        status, body = await self.session_manager.post_json("chat", data, timeout=timeout)
        if status != 200:
            error_text = truncate_body(body)
            logger.error(f"Ollama API error (status {status}): {error_text}")
            raise UpstreamError(status, error_text)

        try:
            result = json.loads(body)
        except ValueError as e:
            raise UpstreamMalformed(f"Ollama returned invalid JSON: {e}") from e

        if not isinstance(result, dict):
            raise UpstreamMalformed("Ollama response is not an object")
        if 'error' in result:
            raise UpstreamMalformed(f"Ollama API error: {truncate_body(str(result['error']))}")

        message = result.get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise UpstreamMalformed("Ollama response has no message content")
        logger.debug(f"Received response of length {len(content)}")
        return content

    async def close(self) -> None:
        await self.session_manager.close()
