"""TaskBackend SQLite 实现

存储协作方的本地实现：负责 snake_case 列与核心模型之间的映射。
每次写操作独立提交，失败时回滚后向上抛出。
"""

from datetime import datetime
from enum import Enum
from typing import Any

import aiosqlite

from ..models.task import Comment, Task

_TASK_COLUMNS = (
    "id",
    "title",
    "description",
    "assigned_to",
    "assigned_to_name",
    "assigned_by",
    "assigned_by_name",
    "status",
    "priority",
    "created_at",
    "updated_at",
    "due_date",
    "completed_at",
    "progress",
)

# 可通过 update_task 修改的列（id / created_at 不可变）
_UPDATABLE_COLUMNS = frozenset(_TASK_COLUMNS) - {"id", "created_at"}

_COMMENT_COLUMNS = ("id", "task_id", "user_id", "user_name", "text", "created_at")


def _to_db(value: Any) -> Any:
    """模型值 -> SQLite 值"""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class SqliteTaskBackend:
    """TaskBackend 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def list_tasks(self) -> list[Task]:
        """查询全部任务，按 created_at 正序"""
        cursor = await self._conn.execute(
            f"SELECT {', '.join(_TASK_COLUMNS)} FROM tasks ORDER BY created_at ASC, rowid ASC"
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def list_comments(self) -> list[Comment]:
        """查询全部评论，按 created_at 正序"""
        cursor = await self._conn.execute(
            f"SELECT {', '.join(_COMMENT_COLUMNS)} FROM task_comments "
            "ORDER BY created_at ASC, rowid ASC"
        )
        rows = await cursor.fetchall()
        return [self._row_to_comment(row) for row in rows]

    async def insert_task(self, task: Task) -> Task:
        """写入新任务"""
        placeholders = ", ".join("?" for _ in _TASK_COLUMNS)
        values = tuple(_to_db(getattr(task, column)) for column in _TASK_COLUMNS)
        try:
            await self._conn.execute(
                f"INSERT INTO tasks ({', '.join(_TASK_COLUMNS)}) VALUES ({placeholders})",
                values,
            )
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise
        return task.model_copy(update={"comments": []})

    async def update_task(self, task_id: str, fields: dict[str, Any]) -> None:
        """按字段更新任务

        Raises:
            ValueError: 包含不可更新的列
        """
        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update columns: {sorted(unknown)}")
        if not fields:
            return

        assignments = ", ".join(f"{column} = ?" for column in fields)
        params = [_to_db(value) for value in fields.values()]
        params.append(task_id)
        try:
            await self._conn.execute(
                f"UPDATE tasks SET {assignments} WHERE id = ?",
                params,
            )
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise

    async def delete_task(self, task_id: str) -> None:
        """删除任务及其评论"""
        try:
            await self._conn.execute("DELETE FROM task_comments WHERE task_id = ?", (task_id,))
            await self._conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise

    async def insert_comment(self, comment: Comment) -> Comment:
        """写入新评论"""
        placeholders = ", ".join("?" for _ in _COMMENT_COLUMNS)
        values = tuple(_to_db(getattr(comment, column)) for column in _COMMENT_COLUMNS)
        try:
            await self._conn.execute(
                f"INSERT INTO task_comments ({', '.join(_COMMENT_COLUMNS)}) "
                f"VALUES ({placeholders})",
                values,
            )
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise
        return comment

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            id=row[0],
            title=row[1],
            description=row[2],
            assigned_to=row[3],
            assigned_to_name=row[4],
            assigned_by=row[5],
            assigned_by_name=row[6],
            status=row[7],
            priority=row[8],
            created_at=datetime.fromisoformat(row[9]),
            updated_at=datetime.fromisoformat(row[10]),
            due_date=datetime.fromisoformat(row[11]),
            completed_at=datetime.fromisoformat(row[12]) if row[12] else None,
            progress=row[13],
        )

    @staticmethod
    def _row_to_comment(row: aiosqlite.Row) -> Comment:
        """将数据库行转换为 Comment 模型"""
        return Comment(
            id=row[0],
            task_id=row[1],
            user_id=row[2],
            user_name=row[3],
            text=row[4],
            created_at=datetime.fromisoformat(row[5]),
        )
