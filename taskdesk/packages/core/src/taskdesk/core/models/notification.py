"""Notification 模型 -- 状态变更后推送给通知协作方"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from .enums import NotificationKind


class Notification(BaseModel):
    """一条 fire-and-forget 通知"""

    kind: NotificationKind = Field(description="通知类型")
    message: str = Field(description="通知内容")
    ts: datetime = Field(default_factory=lambda: datetime.now(UTC), description="时间戳")
    task_id: str | None = Field(default=None, description="关联任务 ID")
