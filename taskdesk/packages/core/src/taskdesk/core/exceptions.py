"""TaskDesk 异常体系

所有领域异常都在边界处恢复：操作被拒绝、不提交任何部分修改，
由调用方转换为用户可见的错误信息。
同时继承对应的内置异常，调用方可以按任一类型捕获。
"""


class TaskDeskError(Exception):
    """TaskDesk 基础异常"""

    code = "TASKDESK_ERROR"

    def __init__(self, message: str) -> None:
        """
        Args:
            message: 面向用户的错误描述
        """
        super().__init__(message)
        self.message = message


class TaskPermissionError(TaskDeskError, PermissionError):
    """角色或归属校验失败 -- 操作被拒绝，状态不变"""

    code = "PERMISSION_DENIED"


class TaskValidationError(TaskDeskError, ValueError):
    """输入校验失败（进度越界、必填字段缺失）"""

    code = "VALIDATION_ERROR"


class TaskNotFoundError(TaskDeskError, LookupError):
    """引用的任务不存在"""

    code = "TASK_NOT_FOUND"

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id} does not exist")
        self.task_id = task_id


class StorageError(TaskDeskError):
    """存储协作方传输失败

    内存快照保持调用前的状态，不会出现静默损坏。
    """

    code = "STORAGE_UNAVAILABLE"

    def __init__(self, operation: str, original_error: Exception) -> None:
        """
        Args:
            operation: 失败的存储操作名称
            original_error: 原始异常
        """
        super().__init__(f"Storage operation {operation} failed: {original_error}")
        self.operation = operation
        self.original_error = original_error


class EmployeeNotFoundError(TaskDeskError, LookupError):
    """引用的员工不存在"""

    code = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: str) -> None:
        super().__init__(f"Employee with id {employee_id} does not exist")
        self.employee_id = employee_id


class DuplicateEmployeeError(TaskDeskError, ValueError):
    """员工编号或用户 ID 已被占用"""

    code = "EMPLOYEE_EXISTS"
