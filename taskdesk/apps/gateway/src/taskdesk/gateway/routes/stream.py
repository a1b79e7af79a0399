"""SSE 通知流路由

GET /api/stream/notifications: 实时推送任务操作通知，空闲时发送心跳保活。
"""

import asyncio

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse
from taskdesk.core.config import SSE_HEARTBEAT_INTERVAL
from taskdesk.core.models import Notification

from ..deps import get_sse_hub
from ..services.sse_hub import SSEHub

router = APIRouter()


def _notification_to_sse(notification: Notification) -> dict:
    """将 Notification 转换为 SSE 消息"""
    return {
        "event": str(notification.kind),
        "data": notification.model_dump_json(),
    }


@router.get("/api/stream/notifications")
async def stream_notifications(sse_hub: SSEHub = Depends(get_sse_hub)):
    """SSE 通知流端点

    1. 注册到 SSEHub
    2. 实时推送新通知
    3. 心跳保活
    """
    queue = await sse_hub.subscribe()

    async def event_generator():
        try:
            while True:
                try:
                    notification = await asyncio.wait_for(
                        queue.get(), timeout=SSE_HEARTBEAT_INTERVAL
                    )
                    yield _notification_to_sse(notification)
                except TimeoutError:
                    yield {"comment": "heartbeat"}
        finally:
            await sse_hub.unsubscribe(queue)

    return EventSourceResponse(event_generator())
