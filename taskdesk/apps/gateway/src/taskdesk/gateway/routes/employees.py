"""员工名录路由

GET    /api/employees                  员工列表（已登录用户，支持搜索）
POST   /api/employees                  新增员工（管理员）
GET    /api/employees/{employee_id}    员工详情（管理员附带其任务统计）
PATCH  /api/employees/{employee_id}    更新员工（管理员）
DELETE /api/employees/{employee_id}    删除员工（管理员）
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from starlette.responses import Response
from taskdesk.core.config import RECENT_TASKS_LIMIT
from taskdesk.core.employees import EmployeeDirectory
from taskdesk.core.exceptions import EmployeeNotFoundError
from taskdesk.core.models import Employee, EmployeeCreate, EmployeePatch, Principal
from taskdesk.core.query import DashboardSummary, summarize
from taskdesk.core.task_store import TaskStore

from ..deps import get_employee_directory, get_principal, get_task_store

router = APIRouter()


class EmployeeListResponse(BaseModel):
    """员工列表响应"""

    employees: list[Employee]


class EmployeeDetail(BaseModel):
    """员工详情"""

    employee: Employee
    tasks: DashboardSummary | None = None


@router.get("/api/employees", response_model=EmployeeListResponse)
async def list_employees(
    search: str = Query(default="", description="姓名、员工编号、部门或职位关键字"),
    directory: EmployeeDirectory = Depends(get_employee_directory),
    principal: Principal = Depends(get_principal),
):
    if not principal.is_authenticated:
        return EmployeeListResponse(employees=[])
    return EmployeeListResponse(employees=directory.search(search))


@router.post("/api/employees", response_model=Employee, status_code=201)
async def add_employee(
    body: EmployeeCreate,
    directory: EmployeeDirectory = Depends(get_employee_directory),
    principal: Principal = Depends(get_principal),
):
    return await directory.add(body, principal)


@router.get("/api/employees/{employee_id}", response_model=EmployeeDetail)
async def get_employee(
    employee_id: str,
    directory: EmployeeDirectory = Depends(get_employee_directory),
    store: TaskStore = Depends(get_task_store),
    principal: Principal = Depends(get_principal),
):
    """员工详情；未登录按不存在处理，管理员视图附带该员工编号的任务统计"""
    if not principal.is_authenticated:
        raise EmployeeNotFoundError(employee_id)
    employee = directory.require(employee_id)
    if not principal.is_admin:
        return EmployeeDetail(employee=employee)
    tasks = store.list_for(principal, employee_id_filter=employee.employee_id)
    return EmployeeDetail(
        employee=employee,
        tasks=summarize(tasks, recent_limit=RECENT_TASKS_LIMIT),
    )


@router.patch("/api/employees/{employee_id}", response_model=Employee)
async def update_employee(
    employee_id: str,
    body: EmployeePatch,
    directory: EmployeeDirectory = Depends(get_employee_directory),
    principal: Principal = Depends(get_principal),
):
    return await directory.update(employee_id, body, principal)


@router.delete("/api/employees/{employee_id}", status_code=204)
async def delete_employee(
    employee_id: str,
    directory: EmployeeDirectory = Depends(get_employee_directory),
    principal: Principal = Depends(get_principal),
):
    await directory.delete(employee_id, principal)
    return Response(status_code=204)
