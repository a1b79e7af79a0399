"""EmployeeDirectory -- 员工名录

内存快照 + 注入的 EmployeeBackend，与 TaskStore 同样的写入流程：
权限校验 -> 输入校验 -> 写入存储 -> 提交快照 -> 通知。

名录同时为身份解析提供补充：认证协作方没有给出员工编号时，
按 user_id 或邮箱在名录中查找，把员工编号补到 Principal 上。
"""

import structlog
from ulid import ULID

from .access import AccessPolicy
from .exceptions import DuplicateEmployeeError, EmployeeNotFoundError, TaskValidationError
from .models.employee import Employee, EmployeeCreate, EmployeePatch
from .models.enums import NotificationKind
from .models.principal import Principal
from .models.task import TaskCreate
from .store.protocols import EmployeeBackend, Notifier
from .task_store import call_backend, notify_quietly

log = structlog.get_logger()


class EmployeeDirectory:
    """员工名录（管理员维护，所有已登录用户可查询）"""

    def __init__(
        self,
        backend: EmployeeBackend,
        policy: AccessPolicy | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._backend = backend
        self._policy = policy or AccessPolicy()
        self._notifier = notifier
        # user_id -> Employee，保持加入名录的顺序
        self._employees: dict[str, Employee] = {}
        self._version = 0

    @property
    def employees(self) -> list[Employee]:
        return list(self._employees.values())

    async def load(self) -> bool:
        """从存储重新加载名录

        Returns:
            True 表示快照已更新；False 表示加载期间已有写入提交，结果作废
        """
        version = self._version
        employees = await call_backend("list_employees", self._backend.list_employees)
        if version != self._version:
            await log.ainfo("stale_employee_load_discarded")
            return False
        self._employees = {employee.user_id: employee for employee in employees}
        await log.ainfo("employees_loaded", employee_count=len(employees))
        return True

    # ---- 查询 ----

    def get_by_employee_id(self, employee_id: str) -> Employee | None:
        for employee in self._employees.values():
            if employee.employee_id == employee_id:
                return employee
        return None

    def get_by_user_id(self, user_id: str) -> Employee | None:
        return self._employees.get(user_id)

    def require(self, employee_id: str) -> Employee:
        employee = self.get_by_employee_id(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        return employee

    def search(self, query: str = "") -> list[Employee]:
        """按姓名、员工编号、部门、职位搜索（忽略大小写）"""
        needle = query.strip().lower()
        if not needle:
            return self.employees
        return [
            employee
            for employee in self._employees.values()
            if any(
                needle in field.lower()
                for field in (
                    employee.name,
                    employee.employee_id,
                    employee.department,
                    employee.position,
                )
            )
        ]

    def find_for(self, principal: Principal) -> Employee | None:
        """查找 principal 对应的员工：先按 user_id，再按邮箱（忽略大小写）"""
        if principal.id:
            employee = self.get_by_user_id(principal.id)
            if employee is not None:
                return employee
        if principal.email:
            email = principal.email.strip().lower()
            for employee in self._employees.values():
                if employee.email and employee.email.strip().lower() == email:
                    return employee
        return None

    def enrich(self, principal: Principal) -> Principal:
        """principal 缺少员工编号时，从名录补上（姓名缺失时一并补上）"""
        if principal.employee_id or not principal.is_authenticated:
            return principal
        employee = self.find_for(principal)
        if employee is None:
            return principal
        log.debug(
            "principal_enriched",
            principal_id=principal.id,
            employee_id=employee.employee_id,
        )
        return principal.model_copy(
            update={
                "employee_id": employee.employee_id,
                "name": principal.name or employee.name,
            }
        )

    def fill_assignee(self, data: TaskCreate) -> TaskCreate:
        """assigned_to 是名录中的员工编号且未给出负责人名称时，补上姓名"""
        if data.assigned_to_name.strip():
            return data
        employee = self.get_by_employee_id(data.assigned_to.strip())
        if employee is None:
            return data
        return data.model_copy(update={"assigned_to_name": employee.name})

    # ---- 修改 ----

    async def add(self, data: EmployeeCreate, principal: Principal) -> Employee:
        """新增员工（仅管理员）；员工编号重复时拒绝"""
        self._policy.require_manage_employees(principal, "add")

        employee_id = data.employee_id.strip()
        if not employee_id:
            raise TaskValidationError("Employee ID is required")
        if not data.name.strip():
            raise TaskValidationError("Name is required")
        if self.get_by_employee_id(employee_id) is not None:
            raise DuplicateEmployeeError("Employee ID already exists")
        user_id = (data.user_id or "").strip() or str(ULID())
        if user_id in self._employees:
            raise DuplicateEmployeeError("User is already linked to an employee")

        employee = Employee(
            **data.model_dump(exclude={"user_id", "employee_id"}),
            user_id=user_id,
            employee_id=employee_id,
        )
        stored = await call_backend("insert_employee", self._backend.insert_employee, employee)
        self._version += 1
        self._employees[stored.user_id] = stored

        await log.ainfo(
            "employee_added",
            employee_id=stored.employee_id,
            user_id=stored.user_id,
            principal_id=principal.id,
        )
        notify_quietly(self._notifier, NotificationKind.SUCCESS, "Employee added successfully")
        return stored

    async def update(
        self, employee_id: str, patch: EmployeePatch, principal: Principal
    ) -> Employee:
        """更新员工（仅管理员）；改名到已存在的员工编号时拒绝"""
        self._policy.require_manage_employees(principal, "update")
        employee = self.require(employee_id)

        fields = patch.present_fields()
        if "employee_id" in fields:
            new_id = fields["employee_id"].strip()
            if not new_id:
                raise TaskValidationError("Employee ID is required")
            if new_id != employee.employee_id and self.get_by_employee_id(new_id) is not None:
                raise DuplicateEmployeeError("Employee ID already exists")
            fields["employee_id"] = new_id
        if "name" in fields and not fields["name"].strip():
            raise TaskValidationError("Name is required")

        updated = employee.model_copy(update=fields)
        changes = {
            name: value
            for name, value in fields.items()
            if getattr(employee, name) != value
        }
        await call_backend(
            "update_employee", self._backend.update_employee, employee.user_id, changes
        )
        self._version += 1
        self._employees[employee.user_id] = updated

        await log.ainfo(
            "employee_updated",
            employee_id=updated.employee_id,
            fields=sorted(changes),
        )
        notify_quietly(self._notifier, NotificationKind.SUCCESS, "Employee updated successfully")
        return updated

    async def delete(self, employee_id: str, principal: Principal) -> None:
        """删除员工（仅管理员）；已分配的任务保持不变"""
        self._policy.require_manage_employees(principal, "delete")
        employee = self.require(employee_id)

        await call_backend("delete_employee", self._backend.delete_employee, employee.user_id)
        self._version += 1
        self._employees.pop(employee.user_id, None)

        await log.ainfo("employee_deleted", employee_id=employee_id, principal_id=principal.id)
        notify_quietly(self._notifier, NotificationKind.SUCCESS, "Employee deleted successfully")
