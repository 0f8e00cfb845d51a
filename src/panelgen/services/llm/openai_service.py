import logging
from typing import List, Optional

import openai
from openai import AsyncOpenAI

from ...errors import CompletionTimeout, UpstreamError, UpstreamMalformed, truncate_body
from ...models.dialogue import ChatMessage
from .base import CompletionClient

logger = logging.getLogger(__name__)

class OpenAICompletionClient(CompletionClient):
    """Completion client using the OpenAI chat completions API."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", max_tokens: Optional[int] = None):
        # Retries are disabled: a second attempt would produce different free text
        self.client = AsyncOpenAI(api_key=api_key, max_retries=0)
        self.model = model
        self.max_tokens = max_tokens

    def _supports_system_messages(self) -> bool:
        """O1 models don't accept system messages."""
        return not self.model.startswith('o1')

    def _supports_temperature(self) -> bool:
        return not self.model.startswith('o1')

    def _get_token_param_name(self) -> str:
        if self.model.startswith('o1'):
            return 'max_completion_tokens'
        return 'max_tokens'

    def _build_messages(self, messages: List[ChatMessage]) -> List[dict]:
        payload = self.to_payload(messages)
        if self._supports_system_messages():
            return payload
        # Fold system text into the first user message
        system_text = "\n\n".join(m["content"] for m in payload if m["role"] == "system")
        rest = [m for m in payload if m["role"] != "system"]
        if system_text and rest and rest[0]["role"] == "user":
            rest[0] = {"role": "user", "content": f"{system_text}\n\n{rest[0]['content']}"}
        elif system_text:
            rest.insert(0, {"role": "user", "content": system_text})
        return rest

    async def complete(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        timeout: Optional[float] = None
    ) -> str:
        params = {
            "model": self.model,
            "messages": self._build_messages(messages),
        }
        if self._supports_temperature():
            params["temperature"] = temperature
        if self.max_tokens is not None:
            params[self._get_token_param_name()] = self.max_tokens
        if timeout is not None:
            params["timeout"] = timeout

        logger.debug(f"Requesting completion from {self.model} ({len(messages)} messages)")
        try:
            response = await self.client.chat.completions.create(**params)
        except openai.APITimeoutError as e:
            logger.error(f"OpenAI request timed out: {e}")
            raise CompletionTimeout(timeout or 0.0) from e
        except openai.APIStatusError as e:
            logger.error(f"OpenAI API error (status {e.status_code}): {truncate_body(str(e.message))}")
            raise UpstreamError(e.status_code, str(e.message)) from e
        except openai.APIConnectionError as e:
            logger.error(f"OpenAI connection failed: {e}")
            raise UpstreamError(None, str(e)) from e
        except openai.APIError as e:
            # e.g. a 2xx reply whose body fails the SDK's schema validation
            logger.error(f"OpenAI returned an unusable response: {e}")
            raise UpstreamMalformed(f"Invalid response from {self.model}: {truncate_body(str(e))}") from e

        if not response.choices:
            raise UpstreamMalformed(f"No choices returned by {self.model}")
        content = response.choices[0].message.content
        if content is None:
            raise UpstreamMalformed(f"Empty message content from {self.model}")
        return content
