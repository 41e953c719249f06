"""Shared aiohttp plumbing for the service clients."""

import asyncio
import json
from typing import Any, Dict, Optional, Tuple

import aiohttp

from ..core.constants import BACKOFF_S, RETRYABLE_STATUS
from .config import settings
from .error_handler import CredentialsExpired, NetworkError
from .log import LoggerMixin


class ApiClient(LoggerMixin):
    """Base client holding one lazily created session per service.

    Subclasses set ``service`` so a 401 can be attributed to the right
    credential set.
    """

    service = "api"

    def __init__(self, timeout_s: Optional[float] = None):
        self.timeout_s = timeout_s if timeout_s is not None else settings.HTTP_TIMEOUT_S
        self.session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> None:
        """Ensure aiohttp session exists."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_s)
            )

    async def _request_with_backoff(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        payload: Optional[Dict[str, Any]] = None,
        raise_for_status: bool = True,
    ) -> Tuple[int, Any]:
        """Send a request, backing off on retryable statuses.

        Returns (status, decoded JSON body). Raises CredentialsExpired on
        401. Any other failure status or undecodable body raises
        NetworkError, unless ``raise_for_status`` is off, in which case the
        final status is returned with whatever body decoded (None if it
        did not).
        """
        await self._ensure_session()

        for attempt, delay in enumerate([0.0, *BACKOFF_S]):
            if delay > 0:
                await asyncio.sleep(delay)

            async with self.session.request(method, url, headers=headers, json=payload) as response:
                if response.status == 401:
                    raise CredentialsExpired(self.service, details={"url": url})
                if response.status in RETRYABLE_STATUS and attempt < len(BACKOFF_S):
                    self.logger.warning(
                        "Retryable response status",
                        service=self.service, status=response.status, attempt=attempt + 1
                    )
                    continue
                if response.status >= 400 and raise_for_status:
                    raise NetworkError(
                        f"{self.service} request failed with status {response.status}",
                        details={"url": url, "status": response.status},
                    )
                try:
                    body = await response.json(content_type=None)
                except (json.JSONDecodeError, aiohttp.ContentTypeError) as e:
                    if not raise_for_status:
                        return response.status, None
                    raise NetworkError(
                        f"{self.service} returned a body that is not JSON",
                        details={"url": url, "error": str(e)},
                    ) from e
                return response.status, body

        raise NetworkError("All retry attempts failed", details={"url": url})

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self.session and not self.session.closed:
            await self.session.close()
            self.session = None
