"""TaskDesk Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .employee import Employee, EmployeeCreate, EmployeePatch
from .enums import (
    PRIORITY_ORDER,
    STATUS_ORDER,
    MatchStrategyName,
    NotificationKind,
    TaskPriority,
    TaskStatus,
    UserRole,
)
from .notification import Notification
from .principal import Principal
from .task import Comment, Task, TaskCreate, TaskPatch

__all__ = [
    # 枚举
    "TaskStatus",
    "TaskPriority",
    "UserRole",
    "MatchStrategyName",
    "NotificationKind",
    # 排序
    "STATUS_ORDER",
    "PRIORITY_ORDER",
    # Principal
    "Principal",
    # Task
    "Task",
    "TaskCreate",
    "TaskPatch",
    "Comment",
    # Employee
    "Employee",
    "EmployeeCreate",
    "EmployeePatch",
    # Notification
    "Notification",
]
