"""SQLite 数据库初始化

PRAGMA 配置 + 三张表 DDL（tasks / task_comments / employees）+ 索引创建。
列名使用 snake_case，与核心模型字段一一对应。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# tasks 表 DDL
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    id                TEXT PRIMARY KEY,
    title             TEXT NOT NULL,
    description       TEXT NOT NULL DEFAULT '',
    assigned_to       TEXT NOT NULL DEFAULT '',
    assigned_to_name  TEXT NOT NULL DEFAULT '',
    assigned_by       TEXT NOT NULL DEFAULT '',
    assigned_by_name  TEXT NOT NULL DEFAULT '',
    status            TEXT NOT NULL DEFAULT 'pending',
    priority          TEXT NOT NULL DEFAULT 'medium',
    created_at        TEXT NOT NULL,
    updated_at        TEXT NOT NULL,
    due_date          TEXT NOT NULL,
    completed_at      TEXT,
    progress          INTEGER NOT NULL DEFAULT 0 CHECK (progress BETWEEN 0 AND 100)
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_assigned_to ON tasks(assigned_to);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_created_at ON tasks(created_at DESC);",
]

# task_comments 表 DDL（只追加）
_COMMENTS_DDL = """
CREATE TABLE IF NOT EXISTS task_comments (
    id          TEXT PRIMARY KEY,
    task_id     TEXT NOT NULL,
    user_id     TEXT NOT NULL,
    user_name   TEXT NOT NULL DEFAULT '',
    text        TEXT NOT NULL,
    created_at  TEXT NOT NULL,

    FOREIGN KEY (task_id) REFERENCES tasks(id) ON DELETE CASCADE
);
"""

_COMMENTS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_task_comments_task ON task_comments(task_id, created_at);",
]


# employees 表 DDL（员工名录）
_EMPLOYEES_DDL = """
CREATE TABLE IF NOT EXISTS employees (
    user_id      TEXT PRIMARY KEY,
    employee_id  TEXT NOT NULL UNIQUE,
    name         TEXT NOT NULL,
    email        TEXT NOT NULL DEFAULT '',
    position     TEXT NOT NULL DEFAULT '',
    department   TEXT NOT NULL DEFAULT '',
    join_date    TEXT,
    contact      TEXT NOT NULL DEFAULT ''
);
"""

_EMPLOYEES_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_employees_email ON employees(email COLLATE NOCASE);",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    # 创建表
    await conn.execute(_TASKS_DDL)
    await conn.execute(_COMMENTS_DDL)
    await conn.execute(_EMPLOYEES_DDL)

    # 创建索引
    for idx_sql in _TASKS_INDEXES + _COMMENTS_INDEXES + _EMPLOYEES_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
