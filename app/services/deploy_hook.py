"""Rebuild signal for the separately deployed public site

Publishing an article POSTs to a deploy hook URL so the static public site
regenerates. The call is fire-and-forget: the save flow never waits for it
and failures only reach the log.
"""

import asyncio
import logging
from typing import Optional, Set

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


class DeployHook:
    """Thin wrapper around the deploy hook POST."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._url = url
        self._timeout = timeout
        self._transport = transport
        self._pending: Set[asyncio.Task] = set()

    @property
    def url(self) -> str:
        return self._url if self._url is not None else settings.DEPLOY_HOOK_URL

    async def trigger(self) -> bool:
        if not self.url:
            logger.warning("Deploy hook URL not configured, skipping rebuild")
            return False
        timeout = self._timeout or settings.DEPLOY_HOOK_TIMEOUT
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.post(self.url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Failed to trigger rebuild: %s", e)
            return False
        logger.info("Rebuild signal sent to deploy hook")
        return True

    def schedule(self) -> asyncio.Task:
        """Start trigger() in the background and return without awaiting it"""
        task = asyncio.get_running_loop().create_task(self.trigger())
        # keep a strong reference until the task settles
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for in-flight triggers (used on shutdown)"""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)


deploy_hook = DeployHook()
