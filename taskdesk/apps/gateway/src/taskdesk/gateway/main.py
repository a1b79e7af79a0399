"""FastAPI 应用主文件

app 创建 + lifespan 管理（组合根）：
DB 初始化/关闭 + 身份解析器 + TaskStore + 员工名录 + 通知广播 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from taskdesk.core.config import build_resolver, get_db_path
from taskdesk.core.employees import EmployeeDirectory
from taskdesk.core.store import create_store_group
from taskdesk.core.task_store import TaskStore

from .errors import register_exception_handlers
from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import dashboard, employees, health, stream, tasks
from .services.sse_hub import SSEHub

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB 与 TaskStore，关闭时清理连接"""
    db_path = get_db_path()
    store_group = await create_store_group(db_path)
    app.state.store_group = store_group

    sse_hub = SSEHub()
    app.state.sse_hub = sse_hub

    resolver = build_resolver()
    task_store = TaskStore(
        store_group.task_backend,
        resolver=resolver,
        notifier=sse_hub,
    )
    await task_store.refresh()
    app.state.task_store = task_store

    employee_directory = EmployeeDirectory(
        store_group.employee_backend,
        policy=task_store.policy,
        notifier=sse_hub,
    )
    await employee_directory.load()
    app.state.employee_directory = employee_directory

    log.info(
        "gateway_started",
        db_path=db_path,
        strategies=[str(name) for name in resolver.strategy_names],
        task_count=len(task_store.tasks),
        employee_count=len(employee_directory.employees),
    )

    yield

    # 关闭：清理数据库连接
    if getattr(app.state, "store_group", None):
        await app.state.store_group.conn.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="TaskDesk Gateway",
        version="0.1.0",
        description="TaskDesk 任务分配 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging，Logging 在最外层）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    register_exception_handlers(app)

    # 初始化日志
    setup_logging()
    setup_logfire(app)

    # 注册路由
    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(dashboard.router, tags=["dashboard"])
    app.include_router(employees.router, tags=["employees"])
    app.include_router(stream.router, tags=["stream"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
