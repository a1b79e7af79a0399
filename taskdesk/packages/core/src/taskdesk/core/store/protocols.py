"""协作方 Protocol 接口定义

TaskBackend（存储协作方）、EmployeeBackend（员工名录存储）
与 Notifier（通知协作方）的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from typing import Any, Protocol

from ..models.employee import Employee
from ..models.enums import NotificationKind
from ..models.task import Comment, Task


class TaskBackend(Protocol):
    """存储协作方接口

    所有调用都可能因传输错误失败，调用方不能假设同步完成。
    """

    async def list_tasks(self) -> list[Task]:
        """查询全部任务（不含评论）"""
        ...

    async def list_comments(self) -> list[Comment]:
        """查询全部评论"""
        ...

    async def insert_task(self, task: Task) -> Task:
        """写入新任务，返回已存储的任务"""
        ...

    async def update_task(self, task_id: str, fields: dict[str, Any]) -> None:
        """按字段更新任务"""
        ...

    async def delete_task(self, task_id: str) -> None:
        """删除任务及其评论"""
        ...

    async def insert_comment(self, comment: Comment) -> Comment:
        """写入新评论，返回已存储的评论"""
        ...


class EmployeeBackend(Protocol):
    """员工名录存储接口"""

    async def list_employees(self) -> list[Employee]:
        """查询全部员工（按加入名录的顺序）"""
        ...

    async def insert_employee(self, employee: Employee) -> Employee:
        """写入新员工，返回已存储的员工"""
        ...

    async def update_employee(self, user_id: str, fields: dict[str, Any]) -> None:
        """按字段更新员工"""
        ...

    async def delete_employee(self, user_id: str) -> None:
        """删除员工"""
        ...


class Notifier(Protocol):
    """通知协作方接口 -- fire-and-forget"""

    def notify(
        self,
        kind: NotificationKind,
        message: str,
        task_id: str | None = None,
    ) -> None:
        """发送通知，不返回结果"""
        ...
