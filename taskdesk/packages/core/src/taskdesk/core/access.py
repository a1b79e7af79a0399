"""访问策略 -- 角色与归属校验的统一入口

其他组件保持纯粹，权限判断集中在这里。
"""

from .exceptions import TaskPermissionError
from .identity import IdentityResolver
from .models.principal import Principal
from .models.task import Task


class AccessPolicy:
    """基于角色与身份解析的访问策略"""

    def __init__(self, resolver: IdentityResolver | None = None) -> None:
        self._resolver = resolver or IdentityResolver()

    @property
    def resolver(self) -> IdentityResolver:
        return self._resolver

    def can_create(self, principal: Principal) -> bool:
        return principal.is_admin

    def can_delete(self, principal: Principal) -> bool:
        return principal.is_admin

    def can_edit_full(self, principal: Principal, task: Task) -> bool:
        return principal.is_admin

    def can_update_progress(self, principal: Principal, task: Task) -> bool:
        """管理员，或被解析为负责人的员工"""
        return principal.is_admin or self._resolver.resolves(principal, task)

    def can_comment(self, principal: Principal, task: Task) -> bool:
        """任何已登录用户都可评论（协作性质，不要求归属）"""
        return principal.is_authenticated

    def can_view(self, principal: Principal, task: Task) -> bool:
        return principal.is_admin or self._resolver.resolves(principal, task)

    def require_create(self, principal: Principal) -> None:
        if not self.can_create(principal):
            raise TaskPermissionError("Only admins can create tasks")

    def require_delete(self, principal: Principal) -> None:
        if not self.can_delete(principal):
            raise TaskPermissionError("Only admins can delete tasks")

    def require_edit_full(self, principal: Principal, task: Task) -> None:
        if not self.can_edit_full(principal, task):
            raise TaskPermissionError("Only admins can edit tasks")

    def require_update_progress(self, principal: Principal, task: Task) -> None:
        if not self.can_update_progress(principal, task):
            raise TaskPermissionError("Only the assignee or an admin can update progress")

    def require_comment(self, principal: Principal, task: Task) -> None:
        if not self.can_comment(principal, task):
            raise TaskPermissionError("Sign in to comment on tasks")

    def can_manage_employees(self, principal: Principal) -> bool:
        return principal.is_admin

    def require_manage_employees(self, principal: Principal, action: str) -> None:
        """action: add / update / delete"""
        if not self.can_manage_employees(principal):
            raise TaskPermissionError(f"Only admins can {action} employees")
