"""packages/core 测试配置 -- 核心层 fixture"""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio
from taskdesk.core.models import Principal, Task, TaskPriority, TaskStatus, UserRole

NOW = datetime(2025, 4, 21, 9, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def core_db_path(tmp_path: Path) -> Path:
    """核心层临时数据库路径"""
    return tmp_path / "core_test.db"


@pytest_asyncio.fixture
async def core_db(core_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """核心层已初始化数据库连接"""
    from taskdesk.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(core_db_path))
    await init_db(conn)
    yield conn
    await conn.close()


@pytest.fixture
def admin() -> Principal:
    return Principal(
        id="u-admin",
        employee_id="ADM001",
        email="admin@example.com",
        name="Admin",
        role=UserRole.ADMIN,
    )


@pytest.fixture
def alice() -> Principal:
    return Principal(
        id="u-alice",
        employee_id="EMP001",
        email="alice@example.com",
        name="Alice",
    )


@pytest.fixture
def bob() -> Principal:
    return Principal(
        id="u-bob",
        employee_id="EMP002",
        email="bob@example.com",
        name="Bob",
    )


@pytest.fixture
def make_task() -> Callable[..., Task]:
    """Task 工厂：只需覆盖关心的字段"""

    def _make(**overrides) -> Task:
        fields = {
            "id": "task-1",
            "title": "Prepare quarterly report",
            "description": "Collect figures from every team",
            "assigned_to": "EMP001",
            "assigned_to_name": "Alice",
            "assigned_by": "u-admin",
            "assigned_by_name": "Admin",
            "status": TaskStatus.PENDING,
            "priority": TaskPriority.MEDIUM,
            "created_at": NOW,
            "updated_at": NOW,
            "due_date": NOW + timedelta(days=7),
            "completed_at": None,
            "progress": 0,
        }
        fields.update(overrides)
        return Task(**fields)

    return _make
