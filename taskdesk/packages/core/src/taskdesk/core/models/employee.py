"""Employee Domain Model

员工名录条目。employee_id 是业务员工编号（唯一，可改名），
user_id 关联认证系统中的用户（唯一，创建后不变）。
"""

from datetime import date

from pydantic import BaseModel, Field


class Employee(BaseModel):
    """员工名录条目"""

    user_id: str = Field(description="认证系统中的用户 ID")
    employee_id: str = Field(description="业务员工编号，如 EMP001")
    name: str = Field(description="姓名")
    email: str = Field(default="", description="邮箱")
    position: str = Field(default="", description="职位")
    department: str = Field(default="", description="部门")
    join_date: date | None = Field(default=None, description="入职日期")
    contact: str = Field(default="", description="联系方式")


class EmployeeCreate(BaseModel):
    """新增员工输入；未提供 user_id 时由系统生成"""

    user_id: str | None = Field(default=None, description="认证系统中的用户 ID")
    employee_id: str = Field(description="业务员工编号")
    name: str = Field(description="姓名")
    email: str = Field(default="", description="邮箱")
    position: str = Field(default="", description="职位")
    department: str = Field(default="", description="部门")
    join_date: date | None = Field(default=None, description="入职日期")
    contact: str = Field(default="", description="联系方式")


class EmployeePatch(BaseModel):
    """更新员工输入 -- 仅显式设置的字段生效"""

    employee_id: str | None = None
    name: str | None = None
    email: str | None = None
    position: str | None = None
    department: str | None = None
    join_date: date | None = None
    contact: str | None = None

    def present_fields(self) -> dict:
        """返回显式设置且非 None 的字段"""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }
