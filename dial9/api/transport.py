"""HTTP transports for the Dial9 API client."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

import aiohttp

from .errors import TransportError

logger = logging.getLogger(__name__)


class HttpTransport(ABC):
    """Sends one JSON POST and hands back the raw response body."""

    @abstractmethod
    async def post(self, url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> bytes:
        """POST ``payload`` as JSON.

        Raises:
            TransportError: If no response could be obtained
        """
        pass


class AiohttpTransport(HttpTransport):
    """aiohttp transport; opens a client session per request."""

    def __init__(self, timeout_seconds: float = 30.0):
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def post(self, url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> bytes:
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(url, headers=headers, json=payload) as response:
                    body = await response.read()
                    logger.debug(f"POST {url} -> HTTP {response.status} ({len(body)} bytes)")
                    return body
        except asyncio.TimeoutError as e:
            raise TransportError(f"Request to {url} timed out") from e
        except aiohttp.ClientError as e:
            raise TransportError(str(e) or e.__class__.__name__) from e
