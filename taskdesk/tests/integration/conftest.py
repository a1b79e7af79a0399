"""集成测试共享 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskdesk.core.employees import EmployeeDirectory
from taskdesk.core.store import create_store_group
from taskdesk.core.task_store import TaskStore
from taskdesk.gateway.services.sse_hub import SSEHub


async def build_app(db_path: str):
    """创建 app 并手动初始化 state（绕过 lifespan），返回 (app, store_group)"""
    from taskdesk.gateway.main import create_app

    app = create_app()
    store_group = await create_store_group(db_path)
    sse_hub = SSEHub()
    task_store = TaskStore(store_group.task_backend, notifier=sse_hub)
    await task_store.refresh()
    employee_directory = EmployeeDirectory(store_group.employee_backend, notifier=sse_hub)
    await employee_directory.load()

    app.state.store_group = store_group
    app.state.sse_hub = sse_hub
    app.state.task_store = task_store
    app.state.employee_directory = employee_directory
    return app, store_group


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path, monkeypatch):
    """集成测试用 FastAPI app"""
    db_path = str(tmp_path / "test.db")
    monkeypatch.setenv("TASKDESK_DB_PATH", db_path)
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")

    app, store_group = await build_app(db_path)
    yield app
    await store_group.conn.close()


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def app_factory():
    """返回 build_app，用于模拟进程重启"""
    return build_app
