"""任务路由

GET    /api/tasks                      任务列表（可见性 + 搜索/筛选/排序）
POST   /api/tasks                      创建任务（管理员）
POST   /api/tasks/refresh              重新加载快照，返回当前用户的任务
GET    /api/tasks/{task_id}            任务详情（含评论）
PATCH  /api/tasks/{task_id}            更新任务（管理员）
PUT    /api/tasks/{task_id}/progress   更新进度（管理员或负责人）
POST   /api/tasks/{task_id}/comments   追加评论（已登录用户）
DELETE /api/tasks/{task_id}            删除任务（管理员）

领域异常由 errors.py 统一映射为错误响应。
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from starlette.responses import Response
from taskdesk.core.employees import EmployeeDirectory
from taskdesk.core.models import (
    Comment,
    Principal,
    Task,
    TaskCreate,
    TaskPatch,
    TaskPriority,
    TaskStatus,
)
from taskdesk.core.query import SortKey, TaskQuery, apply_query
from taskdesk.core.task_store import TaskStore

from ..deps import get_employee_directory, get_principal, get_task_store

router = APIRouter()


class TaskListResponse(BaseModel):
    """任务列表响应"""

    tasks: list[Task]


class ProgressUpdate(BaseModel):
    """进度更新请求体"""

    progress: int = Field(description="进度 0-100")


class CommentRequest(BaseModel):
    """评论请求体"""

    text: str = Field(description="评论内容")


@router.get("/api/tasks", response_model=TaskListResponse)
async def list_tasks(
    employee_id: str | None = Query(default=None, description="管理员按负责人筛选"),
    search: str = Query(default="", description="标题或描述关键字"),
    status: TaskStatus | None = Query(default=None, description="按状态筛选"),
    priority: TaskPriority | None = Query(default=None, description="按优先级筛选"),
    sort_by: SortKey = Query(default="due_date", description="排序字段"),
    store: TaskStore = Depends(get_task_store),
    principal: Principal = Depends(get_principal),
):
    """查询当前用户可见的任务"""
    tasks = store.list_for(principal, employee_id_filter=employee_id)
    query = TaskQuery(search=search, status=status, priority=priority, sort_by=sort_by)
    return TaskListResponse(tasks=apply_query(tasks, query))


@router.post("/api/tasks", response_model=Task, status_code=201)
async def create_task(
    body: TaskCreate,
    store: TaskStore = Depends(get_task_store),
    directory: EmployeeDirectory = Depends(get_employee_directory),
    principal: Principal = Depends(get_principal),
):
    """创建任务；负责人是名录中的员工编号时自动补上姓名"""
    return await store.create(directory.fill_assignee(body), principal)


@router.post("/api/tasks/refresh", response_model=TaskListResponse)
async def refresh_tasks(
    store: TaskStore = Depends(get_task_store),
    principal: Principal = Depends(get_principal),
):
    """从存储重新加载，返回当前用户的任务"""
    tasks = await store.switch_principal(principal)
    return TaskListResponse(tasks=tasks)


@router.get("/api/tasks/{task_id}", response_model=Task)
async def get_task_detail(
    task_id: str,
    store: TaskStore = Depends(get_task_store),
    principal: Principal = Depends(get_principal),
):
    """任务详情；不可见的任务按不存在处理"""
    return store.get_for(principal, task_id)


@router.patch("/api/tasks/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    body: TaskPatch,
    store: TaskStore = Depends(get_task_store),
    principal: Principal = Depends(get_principal),
):
    return await store.update(task_id, body, principal)


@router.put("/api/tasks/{task_id}/progress", response_model=Task)
async def update_progress(
    task_id: str,
    body: ProgressUpdate,
    store: TaskStore = Depends(get_task_store),
    principal: Principal = Depends(get_principal),
):
    return await store.set_progress(task_id, body.progress, principal)


@router.post("/api/tasks/{task_id}/comments", response_model=Comment, status_code=201)
async def add_comment(
    task_id: str,
    body: CommentRequest,
    store: TaskStore = Depends(get_task_store),
    principal: Principal = Depends(get_principal),
):
    return await store.add_comment(task_id, body.text, principal)


@router.delete("/api/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    store: TaskStore = Depends(get_task_store),
    principal: Principal = Depends(get_principal),
):
    await store.delete(task_id, principal)
    return Response(status_code=204)
