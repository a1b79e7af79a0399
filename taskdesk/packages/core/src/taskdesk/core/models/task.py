"""Task / Comment Domain Model

不变量：
- progress 始终在 [0, 100]
- status == completed 当且仅当 completed_at 已设置
- id 与 created_at 创建后不可变
- comments 只追加，按 created_at 从旧到新排列
- 时间字段一律带时区：不带时区的输入按 UTC 处理，保证任务之间可以比较
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator

from .enums import TaskPriority, TaskStatus


def assume_utc(value: datetime | None) -> datetime | None:
    """不带时区的时间补上 UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class Comment(BaseModel):
    """任务评论（创建后不可修改或删除）"""

    id: str = Field(description="唯一标识，ULID 格式")
    task_id: str = Field(description="所属任务 ID（反向引用）")
    user_id: str = Field(description="评论者 ID")
    user_name: str = Field(default="", description="评论者名称")
    text: str = Field(description="评论内容")
    created_at: datetime = Field(description="创建时间")

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, value: datetime) -> datetime:
        return assume_utc(value)


class Task(BaseModel):
    """Task 数据模型"""

    id: str = Field(description="唯一标识，ULID 格式")
    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    assigned_to: str = Field(
        default="",
        description="负责人引用：通常是员工编号，也可能是邮箱或其他字符串",
    )
    assigned_to_name: str = Field(default="", description="负责人名称")
    assigned_by: str = Field(default="", description="分配者 ID")
    assigned_by_name: str = Field(default="", description="分配者名称")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="当前状态")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="优先级")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
    due_date: datetime = Field(description="截止时间")
    completed_at: datetime | None = Field(default=None, description="完成时间")
    progress: int = Field(default=0, ge=0, le=100, description="进度 0-100")
    comments: list[Comment] = Field(default_factory=list, description="评论列表")

    @field_validator("created_at", "updated_at", "due_date", "completed_at")
    @classmethod
    def _datetimes_utc(cls, value: datetime | None) -> datetime | None:
        return assume_utc(value)


class TaskCreate(BaseModel):
    """创建任务输入（id / created_at / comments 由系统生成）"""

    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    assigned_to: str = Field(description="负责人引用")
    assigned_to_name: str = Field(default="", description="负责人名称")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="优先级")
    due_date: datetime = Field(description="截止时间")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="初始状态")
    progress: int = Field(default=0, description="初始进度")

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, value: datetime) -> datetime:
        return assume_utc(value)


class TaskPatch(BaseModel):
    """更新任务输入 -- 仅显式设置的字段生效"""

    title: str | None = None
    description: str | None = None
    assigned_to: str | None = None
    assigned_to_name: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    progress: int | None = None

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, value: datetime | None) -> datetime | None:
        return assume_utc(value)

    def present_fields(self) -> dict:
        """返回显式设置且非 None 的字段"""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }
