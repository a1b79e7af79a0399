"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store 实例与当前用户

Store 实例通过 app.state 管理，在 lifespan 中初始化/清理。
当前用户由上游认证代理通过请求头传入：

    X-Principal-Id      主身份标识（缺失表示未登录）
    X-Employee-Id       员工编号（缺失时从员工名录补上）
    X-Principal-Email   邮箱
    X-Principal-Name    显示名称
    X-Principal-Role    admin / employee（其他值按 employee 处理）
"""

import structlog
from fastapi import Request
from taskdesk.core.employees import EmployeeDirectory
from taskdesk.core.models import Principal, UserRole
from taskdesk.core.store import StoreGroup
from taskdesk.core.task_store import TaskStore

from .services.sse_hub import SSEHub

log = structlog.get_logger()


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_task_store(request: Request) -> TaskStore:
    """从 app.state 获取 TaskStore 实例"""
    return request.app.state.task_store


def get_employee_directory(request: Request) -> EmployeeDirectory:
    """从 app.state 获取 EmployeeDirectory 实例"""
    return request.app.state.employee_directory


def get_sse_hub(request: Request) -> SSEHub:
    """从 app.state 获取 SSEHub 实例"""
    return request.app.state.sse_hub


def _header(request: Request, name: str) -> str | None:
    value = request.headers.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def get_principal(request: Request) -> Principal:
    """从请求头解析当前用户

    请求头缺少员工编号时，从员工名录按 user_id / 邮箱补上。
    """
    principal_id = _header(request, "x-principal-id")
    if principal_id is None:
        return Principal.anonymous()

    raw_role = (_header(request, "x-principal-role") or UserRole.EMPLOYEE).lower()
    try:
        role = UserRole(raw_role)
    except ValueError:
        log.warning("unknown_principal_role", role=raw_role)
        role = UserRole.EMPLOYEE

    principal = Principal(
        id=principal_id,
        employee_id=_header(request, "x-employee-id"),
        email=_header(request, "x-principal-email"),
        name=_header(request, "x-principal-name"),
        role=role,
    )
    principal = get_employee_directory(request).enrich(principal)
    structlog.contextvars.bind_contextvars(principal_id=principal.id)
    return principal
