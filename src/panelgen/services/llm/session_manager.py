import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

import aiohttp

from ...errors import CompletionTimeout, UpstreamError

logger = logging.getLogger(__name__)

class SessionManager:
    """Lazily opened aiohttp session bound to one API base URL.

    Transport failures are raised as completion errors so callers only
    have to interpret the status code and body.
    """

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def is_open(self) -> bool:
        return self._session is not None and not self._session.closed

    async def _get_session(self) -> aiohttp.ClientSession:
        if not self.is_open:
            self._session = aiohttp.ClientSession()
        return self._session

    async def post_json(
        self,
        path: str,
        payload: Dict[str, Any],
        timeout: Optional[float] = None
    ) -> Tuple[int, str]:
        """POST a JSON payload and return the status code and raw body."""
        session = await self._get_session()
        client_timeout = aiohttp.ClientTimeout(total=timeout) if timeout else None
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            async with session.post(url, json=payload, timeout=client_timeout) as response:
                return response.status, await response.text()
        except asyncio.TimeoutError as e:
            logger.error(f"POST {url} timed out after {timeout}s")
            raise CompletionTimeout(timeout or 0.0) from e
        except aiohttp.ClientError as e:
            logger.error(f"POST {url} failed: {e}")
            raise UpstreamError(None, str(e)) from e

    async def close(self):
        if self.is_open:
            await self._session.close()
        self._session = None
