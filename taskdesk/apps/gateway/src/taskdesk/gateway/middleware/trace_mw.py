"""TraceMiddleware -- 为任务操作绑定 task_id

从 /api/tasks/{task_id}[/...] 路径中提取任务 ID，绑定到 structlog contextvars，
同一任务的所有日志可以按 task_id 聚合。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# /api/tasks 下的非任务 ID 路径段
_RESERVED_SEGMENTS = frozenset({"refresh"})


def extract_task_id(path: str) -> str | None:
    """从路径中提取任务 ID，不是任务路径时返回 None"""
    parts = [part for part in path.split("/") if part]
    for i, part in enumerate(parts[:-1]):
        if part == "tasks":
            candidate = parts[i + 1]
            if candidate not in _RESERVED_SEGMENTS:
                return candidate
    return None


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        task_id = extract_task_id(request.url.path)
        if task_id:
            structlog.contextvars.bind_contextvars(
                task_id=task_id,
                trace_id=f"trace-{task_id}",
            )
        return await call_next(request)
