"""SSEHub -- 内存中通知广播器

每个订阅者持有一个 asyncio.Queue，支持 subscribe/unsubscribe/broadcast。
同时实现 Notifier 接口：TaskStore 的 notify 调用会广播给所有订阅者。
"""

import asyncio

import structlog
from taskdesk.core.models import Notification, NotificationKind

log = structlog.get_logger()


class SSEHub:
    """SSE 通知广播器 -- 基于 asyncio.Queue 的发布/订阅模式"""

    def __init__(self, queue_maxsize: int = 100) -> None:
        self._subscribers: set[asyncio.Queue] = set()
        self._queue_maxsize = queue_maxsize

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def subscribe(self) -> asyncio.Queue:
        """订阅通知流

        Returns:
            asyncio.Queue 实例，新通知会被推送到此队列
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_maxsize)
        self._subscribers.add(queue)
        return queue

    async def unsubscribe(self, queue: asyncio.Queue) -> None:
        """取消订阅

        Args:
            queue: 之前订阅时返回的队列
        """
        self._subscribers.discard(queue)

    def broadcast(self, notification: Notification) -> None:
        """向所有订阅者广播通知

        队列已满的订阅者视为失联，直接移除。
        """
        dead_queues = []
        for queue in self._subscribers:
            try:
                queue.put_nowait(notification)
            except asyncio.QueueFull:
                dead_queues.append(queue)

        for q in dead_queues:
            self._subscribers.discard(q)
        if dead_queues:
            log.warning("sse_subscribers_dropped", count=len(dead_queues))

    def notify(
        self,
        kind: NotificationKind,
        message: str,
        task_id: str | None = None,
    ) -> None:
        """Notifier 接口实现 -- fire-and-forget"""
        self.broadcast(Notification(kind=kind, message=message, task_id=task_id))
