"""apps/gateway 测试配置 -- httpx AsyncClient + 临时 DB fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskdesk.core.employees import EmployeeDirectory
from taskdesk.core.store import create_store_group
from taskdesk.core.task_store import TaskStore
from taskdesk.gateway.services.sse_hub import SSEHub

ADMIN_HEADERS = {
    "X-Principal-Id": "u-admin",
    "X-Employee-Id": "ADM001",
    "X-Principal-Email": "admin@example.com",
    "X-Principal-Name": "Admin",
    "X-Principal-Role": "admin",
}

ALICE_HEADERS = {
    "X-Principal-Id": "u-alice",
    "X-Employee-Id": "EMP001",
    "X-Principal-Email": "alice@example.com",
    "X-Principal-Name": "Alice",
    "X-Principal-Role": "employee",
}

BOB_HEADERS = {
    "X-Principal-Id": "u-bob",
    "X-Employee-Id": "EMP002",
    "X-Principal-Email": "bob@example.com",
    "X-Principal-Name": "Bob",
}


@pytest_asyncio.fixture
async def app(tmp_path: Path, monkeypatch):
    """创建测试用 FastAPI app 实例（手动初始化，绕过 lifespan）"""
    monkeypatch.setenv("TASKDESK_DB_PATH", str(tmp_path / "sqlite" / "test.db"))
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")

    from taskdesk.gateway.main import create_app

    application = create_app()

    store_group = await create_store_group(str(tmp_path / "sqlite" / "test.db"))
    sse_hub = SSEHub()
    task_store = TaskStore(store_group.task_backend, notifier=sse_hub)
    await task_store.refresh()
    employee_directory = EmployeeDirectory(store_group.employee_backend, notifier=sse_hub)
    await employee_directory.load()

    application.state.store_group = store_group
    application.state.sse_hub = sse_hub
    application.state.task_store = task_store
    application.state.employee_directory = employee_directory

    yield application

    await store_group.conn.close()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_headers() -> dict[str, str]:
    return dict(ADMIN_HEADERS)


@pytest_asyncio.fixture
async def alice_headers() -> dict[str, str]:
    return dict(ALICE_HEADERS)


@pytest_asyncio.fixture
async def bob_headers() -> dict[str, str]:
    return dict(BOB_HEADERS)
