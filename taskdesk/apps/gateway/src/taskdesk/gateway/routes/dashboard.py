"""仪表盘与分配诊断路由

GET /api/dashboard: 当前用户可见任务的汇总（管理员附带团队概览）。
GET /api/me/assignments: 当前用户在全部任务上的身份匹配诊断。
"""

from fastapi import APIRouter, Depends
from taskdesk.core.config import RECENT_TASKS_LIMIT
from taskdesk.core.identity import AssignmentReport
from taskdesk.core.models import Principal
from taskdesk.core.query import DashboardSummary, summarize
from taskdesk.core.task_store import TaskStore

from ..deps import get_principal, get_task_store

router = APIRouter()


@router.get("/api/dashboard", response_model=DashboardSummary)
async def dashboard(
    store: TaskStore = Depends(get_task_store),
    principal: Principal = Depends(get_principal),
):
    tasks = store.list_for(principal)
    return summarize(tasks, recent_limit=RECENT_TASKS_LIMIT, include_team=principal.is_admin)


@router.get("/api/me/assignments", response_model=AssignmentReport)
async def my_assignments(
    store: TaskStore = Depends(get_task_store),
    principal: Principal = Depends(get_principal),
):
    """每个匹配策略命中的任务数量，排查"看不到分配给我的任务"问题"""
    return store.resolver.assignment_report(principal, store.tasks)
