"""任务生命周期 -- status 与 progress 的唯一耦合点

所有修改路径（创建、更新、进度）都通过 derive_status 推导状态，
保证 completed 与 completed_at 同时出现、同时消失。

状态流转：
- pending -> in_progress: 进度从 0 变为正数
- pending | in_progress | overdue -> completed: 进度到达 100，或显式设置 completed
- completed 对进度驱动的流转是终态（不会回退）
- any -> overdue: 由外部调度方写入，这里不推导
"""

from datetime import datetime

from .exceptions import TaskValidationError
from .models.enums import TaskStatus
from .models.principal import Principal
from .models.task import Task, TaskCreate, TaskPatch

PROGRESS_MIN = 0
PROGRESS_MAX = 100


def validate_progress(progress: object) -> int:
    """校验进度值

    Returns:
        校验通过的进度值

    Raises:
        TaskValidationError: 非整数或不在 [0, 100]
    """
    if isinstance(progress, bool) or not isinstance(progress, int):
        raise TaskValidationError("Progress must be an integer")
    if progress < PROGRESS_MIN or progress > PROGRESS_MAX:
        raise TaskValidationError("Progress must be between 0 and 100")
    return progress


def derive_status(
    current_status: TaskStatus,
    completed_at: datetime | None,
    new_progress: int,
    now: datetime,
) -> tuple[TaskStatus, datetime | None]:
    """根据新进度推导状态

    Args:
        current_status: 当前状态
        completed_at: 当前完成时间
        new_progress: 新进度（已校验）
        now: 当前时间

    Returns:
        (status, completed_at) 元组
    """
    if current_status == TaskStatus.COMPLETED:
        # 已完成：不回退，也不覆盖已有的 completed_at
        return TaskStatus.COMPLETED, completed_at or now
    if new_progress == PROGRESS_MAX:
        return TaskStatus.COMPLETED, now
    if new_progress > 0 and current_status == TaskStatus.PENDING:
        return TaskStatus.IN_PROGRESS, None
    return current_status, None


def apply_progress(task: Task, progress: int, now: datetime) -> Task:
    """返回应用新进度后的 Task（不修改原对象）"""
    progress = validate_progress(progress)
    status, completed_at = derive_status(task.status, task.completed_at, progress, now)
    return task.model_copy(
        update={
            "progress": progress,
            "status": status,
            "completed_at": completed_at,
            "updated_at": now,
        }
    )


def apply_patch(task: Task, patch: TaskPatch, now: datetime) -> Task:
    """返回应用补丁后的 Task（不修改原对象）

    - 只应用补丁中显式设置的字段
    - 显式设置 completed（之前未完成）时强制 progress=100 + completed_at=now，
      忽略补丁中冲突的 progress
    - 显式离开 completed 时清除 completed_at
    - 只带 progress 的补丁按 derive_status 推导状态
    """
    fields = patch.present_fields()
    if "title" in fields and not fields["title"].strip():
        raise TaskValidationError("Title is required")
    if "assigned_to" in fields and not fields["assigned_to"].strip():
        raise TaskValidationError("Assignee is required")
    if "progress" in fields:
        validate_progress(fields["progress"])

    update = {**fields, "updated_at": now}
    new_status = fields.get("status")

    if new_status is None:
        if "progress" in fields:
            status, completed_at = derive_status(
                task.status, task.completed_at, fields["progress"], now
            )
            update["status"] = status
            update["completed_at"] = completed_at
    elif new_status == TaskStatus.COMPLETED:
        if task.status != TaskStatus.COMPLETED:
            update["progress"] = PROGRESS_MAX
            update["completed_at"] = now
        else:
            update["completed_at"] = task.completed_at or now
    else:
        update["completed_at"] = None

    return task.model_copy(update=update)


def build_task(
    data: TaskCreate,
    principal: Principal,
    task_id: str,
    now: datetime,
) -> Task:
    """根据创建输入构建新 Task

    初始 status/progress 组合同样经过 derive_status 归一化。
    """
    if not data.title.strip():
        raise TaskValidationError("Title is required")
    if not data.assigned_to.strip():
        raise TaskValidationError("Assignee is required")
    progress = validate_progress(data.progress)

    if data.status == TaskStatus.COMPLETED:
        status, completed_at, progress = TaskStatus.COMPLETED, now, PROGRESS_MAX
    else:
        status, completed_at = derive_status(data.status, None, progress, now)

    return Task(
        id=task_id,
        title=data.title.strip(),
        description=data.description,
        assigned_to=data.assigned_to.strip(),
        assigned_to_name=data.assigned_to_name,
        assigned_by=principal.id,
        assigned_by_name=principal.display_name,
        status=status,
        priority=data.priority,
        created_at=now,
        updated_at=now,
        due_date=data.due_date,
        completed_at=completed_at,
        progress=progress,
        comments=[],
    )
