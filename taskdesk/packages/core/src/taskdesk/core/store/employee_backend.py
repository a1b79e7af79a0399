"""EmployeeBackend SQLite 实现

employees 表与 Employee 模型之间的映射。
employee_id 由 UNIQUE 约束保证唯一；每次写操作独立提交，失败时回滚。
"""

from datetime import date
from typing import Any

import aiosqlite

from ..models.employee import Employee

_EMPLOYEE_COLUMNS = (
    "user_id",
    "employee_id",
    "name",
    "email",
    "position",
    "department",
    "join_date",
    "contact",
)

# user_id 是主键，不可修改
_UPDATABLE_COLUMNS = frozenset(_EMPLOYEE_COLUMNS) - {"user_id"}


def _to_db(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return value


class SqliteEmployeeBackend:
    """EmployeeBackend 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def list_employees(self) -> list[Employee]:
        cursor = await self._conn.execute(
            f"SELECT {', '.join(_EMPLOYEE_COLUMNS)} FROM employees ORDER BY rowid ASC"
        )
        rows = await cursor.fetchall()
        return [self._row_to_employee(row) for row in rows]

    async def insert_employee(self, employee: Employee) -> Employee:
        placeholders = ", ".join("?" for _ in _EMPLOYEE_COLUMNS)
        values = tuple(_to_db(getattr(employee, column)) for column in _EMPLOYEE_COLUMNS)
        try:
            await self._conn.execute(
                f"INSERT INTO employees ({', '.join(_EMPLOYEE_COLUMNS)}) "
                f"VALUES ({placeholders})",
                values,
            )
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise
        return employee

    async def update_employee(self, user_id: str, fields: dict[str, Any]) -> None:
        """按字段更新员工

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
        params.append(user_id)
        try:
            await self._conn.execute(
                f"UPDATE employees SET {assignments} WHERE user_id = ?",
                params,
            )
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise

    async def delete_employee(self, user_id: str) -> None:
        try:
            await self._conn.execute("DELETE FROM employees WHERE user_id = ?", (user_id,))
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise

    @staticmethod
    def _row_to_employee(row: aiosqlite.Row) -> Employee:
        return Employee(
            user_id=row[0],
            employee_id=row[1],
            name=row[2],
            email=row[3],
            position=row[4],
            department=row[5],
            join_date=date.fromisoformat(row[6]) if row[6] else None,
            contact=row[7],
        )
