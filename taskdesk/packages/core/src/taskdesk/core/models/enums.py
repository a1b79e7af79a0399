"""枚举定义

包含 TaskStatus、TaskPriority、UserRole、MatchStrategyName、NotificationKind，
以及列表排序使用的 STATUS_ORDER / PRIORITY_ORDER。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """Task 状态

    overdue 由外部调度方写入，本系统不推导。
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class TaskPriority(StrEnum):
    """任务优先级"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class UserRole(StrEnum):
    """用户角色"""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class MatchStrategyName(StrEnum):
    """身份匹配策略名称（按诊断顺序排列）"""

    EXACT = "exact"
    CASE_INSENSITIVE = "case_insensitive"
    SUBSTRING = "substring"
    EMAIL_LOCAL_PART = "email_local_part"
    ALIAS = "alias"


class NotificationKind(StrEnum):
    """通知类型"""

    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


# 列表按状态排序：逾期最靠前
STATUS_ORDER: dict[TaskStatus, int] = {
    TaskStatus.OVERDUE: 0,
    TaskStatus.PENDING: 1,
    TaskStatus.IN_PROGRESS: 2,
    TaskStatus.COMPLETED: 3,
}

PRIORITY_ORDER: dict[TaskPriority, int] = {
    TaskPriority.HIGH: 0,
    TaskPriority.MEDIUM: 1,
    TaskPriority.LOW: 2,
}
