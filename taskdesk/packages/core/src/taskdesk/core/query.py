"""任务列表查询与仪表盘统计

纯函数：输入任务列表，输出过滤/排序结果或汇总数据，不访问存储。
"""

from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel, Field

from .models.enums import PRIORITY_ORDER, STATUS_ORDER, TaskPriority, TaskStatus
from .models.task import Task

SortKey = Literal["due_date", "priority", "status", "created_at"]


class TaskQuery(BaseModel):
    """任务列表查询条件"""

    search: str = Field(default="", description="标题或描述中的关键字（不区分大小写）")
    status: TaskStatus | None = Field(default=None, description="None 表示全部状态")
    priority: TaskPriority | None = Field(default=None, description="None 表示全部优先级")
    sort_by: SortKey = Field(default="due_date")


def _matches(task: Task, query: TaskQuery) -> bool:
    if query.search:
        needle = query.search.lower()
        if needle not in task.title.lower() and needle not in task.description.lower():
            return False
    if query.status is not None and task.status != query.status:
        return False
    if query.priority is not None and task.priority != query.priority:
        return False
    return True


def apply_query(tasks: Sequence[Task], query: TaskQuery) -> list[Task]:
    """先过滤再排序（稳定排序，同值保持原顺序）

    created_at 按新到旧，其余键按升序。
    """
    filtered = [task for task in tasks if _matches(task, query)]
    if query.sort_by == "due_date":
        return sorted(filtered, key=lambda t: t.due_date)
    if query.sort_by == "priority":
        return sorted(filtered, key=lambda t: PRIORITY_ORDER[t.priority])
    if query.sort_by == "status":
        return sorted(filtered, key=lambda t: STATUS_ORDER[t.status])
    return sorted(filtered, key=lambda t: t.created_at, reverse=True)


def completion_rate(completed: int, total: int) -> int:
    """完成率百分比，四舍五入（half-up），total 为 0 时返回 0"""
    if total <= 0:
        return 0
    return (completed * 200 + total) // (total * 2)


class AssigneeSummary(BaseModel):
    """团队概览中单个负责人的统计"""

    assigned_to: str
    assigned_to_name: str = ""
    total: int = 0
    completed: int = 0
    completion_rate: int = 0


class DashboardSummary(BaseModel):
    """仪表盘汇总"""

    total: int = 0
    status_counts: dict[TaskStatus, int] = Field(default_factory=dict)
    completion_rate: int = 0
    recent: list[Task] = Field(default_factory=list)
    team: list[AssigneeSummary] = Field(
        default_factory=list,
        description="按负责人分组统计，仅管理员视图填充",
    )


def summarize_team(tasks: Sequence[Task]) -> list[AssigneeSummary]:
    """按 assigned_to 分组统计（按首次出现顺序）"""
    groups: dict[str, AssigneeSummary] = {}
    for task in tasks:
        entry = groups.get(task.assigned_to)
        if entry is None:
            entry = AssigneeSummary(
                assigned_to=task.assigned_to,
                assigned_to_name=task.assigned_to_name,
            )
            groups[task.assigned_to] = entry
        entry.total += 1
        if task.status == TaskStatus.COMPLETED:
            entry.completed += 1

    for entry in groups.values():
        entry.completion_rate = completion_rate(entry.completed, entry.total)
    return list(groups.values())


def summarize(
    tasks: Sequence[Task],
    recent_limit: int = 4,
    include_team: bool = False,
) -> DashboardSummary:
    """汇总任务列表

    Args:
        tasks: 调用方可见的任务
        recent_limit: 最近任务数量（按 created_at 新到旧）
        include_team: 是否附带按负责人分组统计
    """
    counts = {status: 0 for status in TaskStatus}
    for task in tasks:
        counts[task.status] += 1

    total = len(tasks)
    recent = sorted(tasks, key=lambda t: t.created_at, reverse=True)[: max(recent_limit, 0)]
    return DashboardSummary(
        total=total,
        status_counts=counts,
        completion_rate=completion_rate(counts[TaskStatus.COMPLETED], total),
        recent=recent,
        team=summarize_team(tasks) if include_team else [],
    )
