"""캐시 무효화 이벤트 버스.

Cache invalidation bus. Routers publish an ``InvalidationEvent`` after a
successful commit so connected clients know which (entity, shop, range) to
refetch. Publishing never blocks: each subscriber has a bounded queue and a
subscriber that falls behind loses events instead of slowing writers.

Usage:
    invalidation_bus.publish(InvalidationEvent("shifts", shop_id))

    async with invalidation_bus.subscribe(shop_id) as queue:
        event = await queue.get()
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

logger = logging.getLogger(__name__)

# 구독자별 대기열 크기 (Per-subscriber queue size)
SUBSCRIBER_QUEUE_SIZE: int = 100


@dataclass(frozen=True)
class InvalidationEvent:
    """무효화 이벤트 (Entity type, shop and optional time range to refetch)."""

    entity: str
    shop_id: UUID
    range_start: datetime | None = None
    range_end: datetime | None = None

    def to_json(self) -> str:
        return json.dumps(
            {
                "entity": self.entity,
                "shop_id": str(self.shop_id),
                "range_start": self.range_start.isoformat() if self.range_start else None,
                "range_end": self.range_end.isoformat() if self.range_end else None,
            }
        )


class InvalidationBus:
    """매장별 인프로세스 pub/sub (In-process publish/subscribe keyed by shop)."""

    def __init__(self, queue_size: int = SUBSCRIBER_QUEUE_SIZE) -> None:
        self._queue_size: int = queue_size
        self._subscribers: dict[UUID, set[asyncio.Queue]] = {}

    def publish(self, event: InvalidationEvent) -> int:
        """이벤트를 매장 구독자에게 전달합니다.

        Deliver the event to every subscriber of its shop without waiting.

        Returns:
            int: 전달된 구독자 수 (Number of subscribers that received it)
        """
        delivered: int = 0
        for queue in list(self._subscribers.get(event.shop_id, ())):
            try:
                queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("Dropping %s invalidation for slow subscriber", event.entity)
        return delivered

    @asynccontextmanager
    async def subscribe(self, shop_id: UUID) -> AsyncIterator[asyncio.Queue]:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers.setdefault(shop_id, set()).add(queue)
        try:
            yield queue
        finally:
            subscribers = self._subscribers.get(shop_id)
            if subscribers is not None:
                subscribers.discard(queue)
                if not subscribers:
                    del self._subscribers[shop_id]

    def subscriber_count(self, shop_id: UUID) -> int:
        return len(self._subscribers.get(shop_id, ()))


# 전역 이벤트 버스 (Process-wide bus)
invalidation_bus: InvalidationBus = InvalidationBus()
