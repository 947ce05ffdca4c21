"""캐시 무효화 이벤트 버스 테스트.

Invalidation bus tests: per-shop delivery, non-blocking publish with bounded
queues, and subscriber cleanup.
"""

import json
import uuid
from datetime import datetime, timezone

from shopshift.services.invalidation_service import InvalidationBus, InvalidationEvent


class TestInvalidationBus:
    """매장별 pub/sub 테스트."""

    async def test_publish_reaches_shop_subscribers_only(self):
        bus = InvalidationBus()
        shop_a, shop_b = uuid.uuid4(), uuid.uuid4()

        async with bus.subscribe(shop_a) as queue_a, bus.subscribe(shop_b) as queue_b:
            delivered = bus.publish(InvalidationEvent("shifts", shop_a))

            assert delivered == 1
            event = queue_a.get_nowait()
            assert event.entity == "shifts"
            assert queue_b.empty()

    async def test_publish_without_subscribers(self):
        bus = InvalidationBus()
        assert bus.publish(InvalidationEvent("claims", uuid.uuid4())) == 0

    async def test_full_queue_drops_events(self):
        bus = InvalidationBus(queue_size=1)
        shop_id = uuid.uuid4()

        async with bus.subscribe(shop_id) as queue:
            assert bus.publish(InvalidationEvent("shifts", shop_id)) == 1
            assert bus.publish(InvalidationEvent("swaps", shop_id)) == 0
            assert queue.qsize() == 1
            assert queue.get_nowait().entity == "shifts"

    async def test_unsubscribe_on_exit(self):
        bus = InvalidationBus()
        shop_id = uuid.uuid4()

        async with bus.subscribe(shop_id):
            assert bus.subscriber_count(shop_id) == 1
        assert bus.subscriber_count(shop_id) == 0

    def test_event_json(self):
        shop_id = uuid.uuid4()
        start = datetime(2025, 1, 5, 5, tzinfo=timezone.utc)
        payload = json.loads(InvalidationEvent("shifts", shop_id, start).to_json())
        assert payload == {
            "entity": "shifts",
            "shop_id": str(shop_id),
            "range_start": "2025-01-05T05:00:00+00:00",
            "range_end": None,
        }
