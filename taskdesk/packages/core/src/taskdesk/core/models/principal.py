"""Principal Domain Model

当前操作者。known_identifiers 是所有可能代表该用户的字符串集合，
用于与任务的 assigned_to（owner-reference）做容错匹配。
"""

from pydantic import BaseModel, Field

from .enums import UserRole


class Principal(BaseModel):
    """当前登录用户（由认证协作方提供）"""

    id: str = Field(default="", description="主身份标识，如数据库 UUID")
    employee_id: str | None = Field(default=None, description="业务员工编号")
    email: str | None = Field(default=None, description="邮箱")
    name: str | None = Field(default=None, description="显示名称")
    role: UserRole = Field(default=UserRole.EMPLOYEE, description="角色")

    @classmethod
    def anonymous(cls) -> "Principal":
        """未登录用户：没有任何已知标识"""
        return cls()

    @property
    def email_local_part(self) -> str | None:
        """邮箱 @ 之前的部分，不存在或为空时返回 None"""
        if not self.email or "@" not in self.email:
            return None
        local = self.email.split("@", 1)[0].strip()
        return local or None

    @property
    def known_identifiers(self) -> list[str]:
        """有序去重的已知标识：id, employee_id, email, 邮箱本地部分

        空白值跳过，保留插入顺序。
        """
        identifiers: list[str] = []
        for value in (self.id, self.employee_id, self.email, self.email_local_part):
            if value is None:
                continue
            value = value.strip()
            if value and value not in identifiers:
                identifiers.append(value)
        return identifiers

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_authenticated(self) -> bool:
        return bool(self.known_identifiers)

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.id
