"""
Completion Poller: waits for a generated document to become readable.

Each tick checks the local cache, then the Content Store. Ticks are
independent; a failed read is just a miss.
"""

import asyncio
import logging
from typing import Optional

from storefront_content_system.core.errors import StoreUnavailable
from storefront_content_system.core.event_bus import EventBus, Events
from storefront_content_system.core.models import GeneratedDocument, PollResult, PollStatus
from storefront_content_system.infrastructure.content_store import ContentStore
from storefront_content_system.infrastructure.local_cache import LocalCache, NullLocalCache
from storefront_content_system.infrastructure.logger import get_logger

logger = logging.getLogger("CompletionPoller")
structured = get_logger("CompletionPoller.events")

DOWNLOAD_MAX_ATTEMPTS = 15
PREVIEW_MAX_ATTEMPTS = 30
DEFAULT_INTERVAL_SECONDS = 2.0


def _check_attempts(max_attempts: int) -> int:
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
    return max_attempts


class PollHandle:
    """Cancellable handle on a running poll."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        self._task: Optional[asyncio.Task] = None
        self.attempts = 0

    @property
    def done(self) -> bool:
        return self._task.done()

    def cancel(self):
        """Stop polling. Safe to call at any time, any number of times."""
        if not self._task.done():
            self._task.cancel()

    async def result(self) -> PollResult:
        await asyncio.wait({self._task})
        if self._task.cancelled():
            return PollResult(status=PollStatus.CANCELLED, attempts=self.attempts)
        return self._task.result()


class CompletionPoller:
    def __init__(
        self,
        store: ContentStore,
        cache: Optional[LocalCache] = None,
        max_attempts: int = DOWNLOAD_MAX_ATTEMPTS,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ):
        self.max_attempts = _check_attempts(max_attempts)
        self.store = store
        self.cache = cache or NullLocalCache()
        self.interval_seconds = interval_seconds

    def _attempts(self, max_attempts: Optional[int]) -> int:
        """Per-call override; None means the poller default."""
        if max_attempts is None:
            return self.max_attempts
        return _check_attempts(max_attempts)

    async def check_once(self, product_id: str) -> Optional[GeneratedDocument]:
        """One tick: local cache first, then the store."""
        cached = self.cache.get_document(product_id)
        if cached is not None:
            return cached

        try:
            document = await self.store.get(product_id)
        except StoreUnavailable as e:
            logger.warning(f"Store read failed while polling {product_id}: {e}")
            return None

        if document is not None:
            self.cache.set_document(product_id, document)
        return document

    async def await_content(
        self,
        product_id: str,
        max_attempts: Optional[int] = None,
        interval_seconds: Optional[float] = None,
        handle: Optional[PollHandle] = None,
    ) -> PollResult:
        """Poll until found or max_attempts ticks have run."""
        max_attempts = self._attempts(max_attempts)
        interval = self.interval_seconds if interval_seconds is None else interval_seconds

        attempts = 0
        while True:
            attempts += 1
            if handle is not None:
                handle.attempts = attempts

            document = await self.check_once(product_id)
            if document is not None:
                EventBus.emit(Events.CONTENT_FOUND, {"attempts": attempts}, product_id)
                structured.poll_result(product_id, PollStatus.FOUND.value, attempts)
                return PollResult(status=PollStatus.FOUND, document=document, attempts=attempts)

            if attempts >= max_attempts:
                break
            await asyncio.sleep(interval)

        EventBus.emit(Events.POLL_TIMEOUT, {"attempts": attempts}, product_id)
        structured.poll_result(product_id, PollStatus.TIMEOUT.value, attempts)
        return PollResult(status=PollStatus.TIMEOUT, attempts=attempts)

    def start(
        self,
        product_id: str,
        max_attempts: Optional[int] = None,
        interval_seconds: Optional[float] = None,
    ) -> PollHandle:
        """Run await_content as a task the caller can cancel."""
        self._attempts(max_attempts)
        handle = PollHandle(product_id)
        handle._task = asyncio.ensure_future(
            self.await_content(product_id, max_attempts, interval_seconds, handle=handle)
        )
        return handle
