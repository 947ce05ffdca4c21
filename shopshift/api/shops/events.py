"""캐시 무효화 이벤트 스트림 라우터 (Server-Sent Events).

Invalidation Event Router. Streams ``InvalidationEvent`` messages for one
shop as ``text/event-stream`` so clients refetch only the entity and range
that changed.

Permission Matrix:
    - 구독: 활성 구성원 (Any active member)
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from shopshift.api.deps import get_shop_context
from shopshift.context import ShopContext
from shopshift.services.invalidation_service import InvalidationEvent, invalidation_bus

router: APIRouter = APIRouter()

# 연결 유지용 주석 전송 간격(초) (Seconds between keep-alive comments)
KEEPALIVE_SECONDS: float = 15.0


async def _event_stream(request: Request, ctx: ShopContext) -> AsyncIterator[str]:
    async with invalidation_bus.subscribe(ctx.shop_id) as queue:
        yield ": connected\n\n"
        while not await request.is_disconnected():
            try:
                event: InvalidationEvent = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue
            yield f"event: invalidate\ndata: {event.to_json()}\n\n"


@router.get("/shops/{shop_id}/events")
async def stream_events(
    request: Request,
    ctx: Annotated[ShopContext, Depends(get_shop_context)],
) -> StreamingResponse:
    """매장 무효화 이벤트를 구독합니다.

    Subscribe to the shop's invalidation events. Each message carries
    ``entity``, ``shop_id`` and an optional ``range_start``/``range_end``.
    """
    return StreamingResponse(
        _event_stream(request, ctx),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
