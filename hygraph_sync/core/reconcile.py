"""Read-after-webhook reconciliation.

Hygraph's content API is eventually consistent: a webhook can arrive before
a read of the same item reflects the change. The Reconciler refetches the
item until an operation-specific freshness check passes or the attempt
budget runs out.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .models import Asset, Document, WebhookOperation, parse_timestamp, published_stage

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_RETRY_DELAY = 0.5

Item = dict[str, Any]
FetchItem = Callable[[str], Awaitable[Item | None]]
FreshnessPredicate = Callable[[Item], bool]


class ReconcileOutcome(Enum):
    FRESH = "fresh"
    EXHAUSTED = "exhausted"
    ABSENT = "absent"


@dataclass
class ReconcileResult:
    """Terminal state of a reconciliation.

    ``item`` is None only when the outcome is ABSENT. After EXHAUSTED it
    holds the last item fetched.
    """
    outcome: ReconcileOutcome
    item: Item | None
    attempts: int


def freshness_predicate(
    operation: WebhookOperation,
    cached: Document | Asset | None = None,
) -> FreshnessPredicate:
    """Return the check telling whether a fetched item reflects ``operation``."""
    if operation is WebhookOperation.CREATE:
        return lambda item: True

    if operation is WebhookOperation.UPDATE:
        def is_updated(item: Item) -> bool:
            if cached is None:
                return True
            fetched_at = parse_timestamp(item.get("updatedAt"))
            if fetched_at is None or cached.updated_at is None:
                return False
            return cached.updated_at < fetched_at
        return is_updated

    if operation is WebhookOperation.PUBLISH:
        def is_published(item: Item) -> bool:
            published = published_stage(item)
            if published is None:
                return False
            published_at = parse_timestamp(published.get("updatedAt"))
            return published_at is not None and published_at == parse_timestamp(item.get("updatedAt"))
        return is_published

    if operation is WebhookOperation.UNPUBLISH:
        return lambda item: published_stage(item) is None

    if operation is WebhookOperation.DELETE:
        raise ValueError("delete notifications carry no item to reconcile")

    raise ValueError(f"Unhandled webhook operation: {operation}")


class Reconciler:
    """Refetches an item until it is fresh, absent, or attempts run out.

    Args:
        fetch_item: Coroutine function fetching an item by id, None if missing
        max_attempts: Total number of fetches
        delay: Seconds to wait before every fetch after the first
        sleep: Awaitable sleep, replaceable in tests
        label: Item kind used in log messages ("entry", "asset")
    """

    def __init__(
        self,
        fetch_item: FetchItem,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        label: str = "item",
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.fetch_item = fetch_item
        self.max_attempts = max_attempts
        self.delay = delay
        self.sleep = sleep
        self.label = label

    async def poll(self, item_id: str, is_fresh: FreshnessPredicate) -> ReconcileResult:
        """Fetch ``item_id`` until ``is_fresh`` holds.

        Does not log on exhaustion; callers decide how to report it.
        """
        item: Item | None = None
        for attempt in range(self.max_attempts):
            if attempt > 0:
                logger.debug("received older %s %s from Hygraph, waiting %sms and retrying",
                             self.label, item_id, int(self.delay * 1000))
                await self.sleep(self.delay)

            item = await self.fetch_item(item_id)
            if item is None:
                return ReconcileResult(ReconcileOutcome.ABSENT, None, attempt + 1)
            if is_fresh(item):
                return ReconcileResult(ReconcileOutcome.FRESH, item, attempt + 1)

        return ReconcileResult(ReconcileOutcome.EXHAUSTED, item, self.max_attempts)

    async def run(
        self,
        item_id: str,
        operation: WebhookOperation,
        cached: Document | Asset | None = None,
    ) -> ReconcileResult:
        """Reconcile a webhook for ``item_id`` and report how it ended."""
        result = await self.poll(item_id, freshness_predicate(operation, cached))
        if result.outcome is ReconcileOutcome.EXHAUSTED:
            logger.warning("Could not fetch updated %s %s from Hygraph after receiving %s webhook!",
                           self.label, item_id, operation.value)
        return result

    async def reconcile(
        self,
        item_id: str,
        operation: WebhookOperation,
        cached: Document | Asset | None = None,
    ) -> Item | None:
        """Return the freshest item available for a webhook, None if absent."""
        result = await self.run(item_id, operation, cached)
        return result.item
