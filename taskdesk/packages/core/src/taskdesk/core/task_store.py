"""TaskStore -- 任务与评论的内存快照 + 不变量维护

存储协作方通过构造参数注入，由组合根（gateway lifespan / CLI）持有，
不使用模块级单例。

每个修改操作的流程：
1. 查找任务（TaskNotFoundError）
2. 访问策略校验（TaskPermissionError）
3. 纯函数计算新记录（TaskValidationError）
4. 写入存储协作方（StorageError）
5. 成功后才提交到内存快照（同时作废进行中的 refresh），然后发送通知

单条记录粒度上是原子的：任何一步失败都不会留下部分修改。
并发写入采用 last-write-wins，不做乐观锁。
"""

import asyncio
from collections import defaultdict
from collections.abc import Awaitable, Callable, Iterable
from datetime import UTC, datetime
from typing import Any

import structlog
from ulid import ULID

from .access import AccessPolicy
from .exceptions import StorageError, TaskNotFoundError, TaskValidationError
from .identity import IdentityResolver
from .lifecycle import apply_patch, apply_progress, build_task, validate_progress
from .models.enums import NotificationKind
from .models.principal import Principal
from .models.task import Comment, Task, TaskCreate, TaskPatch
from .store.protocols import Notifier, TaskBackend

log = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(UTC)


async def call_backend(
    operation: str,
    func: Callable[..., Awaitable[Any]],
    *args: Any,
) -> Any:
    """调用存储协作方，传输错误统一转换为 StorageError"""
    try:
        return await func(*args)
    except Exception as e:
        await log.aerror(
            "storage_call_failed",
            operation=operation,
            error_type=type(e).__name__,
            error=str(e),
        )
        raise StorageError(operation, e) from e


def notify_quietly(
    notifier: Notifier | None,
    kind: NotificationKind,
    message: str,
    task_id: str | None = None,
) -> None:
    """fire-and-forget：通知失败只记录日志，不影响操作结果"""
    if notifier is None:
        return
    try:
        notifier.notify(kind, message, task_id=task_id)
    except Exception as e:
        log.warning(
            "notify_failed",
            kind=str(kind),
            task_id=task_id,
            error_type=type(e).__name__,
        )


def join_comments(tasks: Iterable[Task], comments: Iterable[Comment]) -> dict[str, Task]:
    """把评论挂到各自的任务上（从旧到新），返回 id -> Task 的有序映射

    找不到所属任务的评论直接忽略。
    """
    by_task: dict[str, list[Comment]] = defaultdict(list)
    for comment in comments:
        by_task[comment.task_id].append(comment)

    joined: dict[str, Task] = {}
    for task in tasks:
        task_comments = sorted(by_task.get(task.id, []), key=lambda c: c.created_at)
        joined[task.id] = task.model_copy(update={"comments": task_comments})
    return joined


class TaskStore:
    """任务存储（内存快照 + 注入的存储协作方）"""

    def __init__(
        self,
        backend: TaskBackend,
        resolver: IdentityResolver | None = None,
        policy: AccessPolicy | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Args:
            backend: 存储协作方
            resolver: 身份解析器，None 表示默认策略
            policy: 访问策略，None 时基于 resolver 构建
            notifier: 通知协作方，None 表示不发送通知
            clock: 时间来源（测试可注入）
        """
        self._backend = backend
        self._policy = policy or AccessPolicy(resolver)
        self._notifier = notifier
        self._clock = clock or _utcnow
        self._tasks: dict[str, Task] = {}
        # 单调递增的请求令牌：过期的 refresh 结果不会覆盖更新的快照
        self._request_token = 0

    @property
    def policy(self) -> AccessPolicy:
        return self._policy

    @property
    def resolver(self) -> IdentityResolver:
        return self._policy.resolver

    @property
    def tasks(self) -> list[Task]:
        """当前快照中的全部任务（插入顺序）"""
        return list(self._tasks.values())

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def require(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def get_for(self, principal: Principal, task_id: str) -> Task:
        """查询 principal 可见的任务；不可见与不存在同样返回 404 语义"""
        task = self.require(task_id)
        if not self._policy.can_view(principal, task):
            raise TaskNotFoundError(task_id)
        return task

    # ---- 加载 ----

    async def refresh(self) -> bool:
        """从存储协作方重新加载任务和评论

        任务与评论并发获取，两者都返回后才做 join。
        期间若有更新的 refresh 开始，或有修改操作已提交到快照，
        本次结果作废，不覆盖更新的快照。

        Returns:
            True 表示快照已更新；False 表示本次结果已被取代

        Raises:
            StorageError: 存储调用失败（快照保持不变）；已被取代的请求不报错
        """
        self._request_token += 1
        token = self._request_token

        try:
            tasks, comments = await asyncio.gather(
                self._backend.list_tasks(),
                self._backend.list_comments(),
            )
        except Exception as e:
            if token != self._request_token:
                await log.ainfo(
                    "stale_refresh_failed",
                    token=token,
                    latest_token=self._request_token,
                    error_type=type(e).__name__,
                )
                return False
            await log.aerror(
                "storage_call_failed",
                operation="refresh",
                error_type=type(e).__name__,
                error=str(e),
            )
            raise StorageError("refresh", e) from e

        if token != self._request_token:
            await log.ainfo(
                "stale_refresh_discarded",
                token=token,
                latest_token=self._request_token,
            )
            return False

        self._tasks = join_comments(tasks, comments)
        await log.ainfo(
            "tasks_refreshed",
            task_count=len(tasks),
            comment_count=len(comments),
        )
        return True

    async def switch_principal(self, principal: Principal) -> list[Task]:
        """认证身份变化时调用：重新加载并返回该用户的任务"""
        await self.refresh()
        return self.list_for(principal)

    # ---- 查询 ----

    def list_for(
        self,
        principal: Principal,
        employee_id_filter: str | None = None,
    ) -> list[Task]:
        """返回 principal 可见的任务

        - 管理员：全部任务；指定 employee_id_filter 时按 assigned_to 精确过滤
        - 员工：身份解析器判定为负责人的任务
        """
        tasks = self.tasks
        if principal.is_admin:
            if employee_id_filter:
                return [task for task in tasks if task.assigned_to == employee_id_filter]
            return tasks
        return self.resolver.filter_tasks(principal, tasks)

    # ---- 修改 ----

    async def create(self, data: TaskCreate, principal: Principal) -> Task:
        """创建任务（仅管理员）"""
        self._policy.require_create(principal)

        task = build_task(data, principal, str(ULID()), self._clock())
        stored = await call_backend("insert_task", self._backend.insert_task, task)
        stored = stored.model_copy(update={"comments": []})
        self._invalidate_pending_refresh()
        self._tasks[stored.id] = stored

        await log.ainfo(
            "task_created",
            task_id=stored.id,
            assigned_to=stored.assigned_to,
            principal_id=principal.id,
        )
        self._notify(NotificationKind.SUCCESS, "Task created successfully", stored.id)
        return stored

    async def update(self, task_id: str, patch: TaskPatch, principal: Principal) -> Task:
        """按补丁更新任务（仅管理员）"""
        task = self.require(task_id)
        self._policy.require_edit_full(principal, task)

        updated = apply_patch(task, patch, self._clock())
        changes = self._changed_fields(task, updated)
        await call_backend("update_task", self._backend.update_task, task_id, changes)
        self._invalidate_pending_refresh()
        self._tasks[task_id] = updated

        await log.ainfo(
            "task_updated",
            task_id=task_id,
            fields=sorted(changes),
            status=str(updated.status),
        )
        self._notify(NotificationKind.SUCCESS, "Task updated successfully", task_id)
        return updated

    async def set_progress(self, task_id: str, progress: int, principal: Principal) -> Task:
        """更新进度（管理员或负责人）

        已完成任务再次更新进度时只修改 progress，状态保持 completed。
        """
        validate_progress(progress)
        task = self.require(task_id)
        self._policy.require_update_progress(principal, task)

        updated = apply_progress(task, progress, self._clock())
        if updated.progress == task.progress and updated.status == task.status:
            return task

        changes = self._changed_fields(task, updated)
        await call_backend("update_task", self._backend.update_task, task_id, changes)
        self._invalidate_pending_refresh()
        self._tasks[task_id] = updated

        await log.ainfo(
            "task_progress_updated",
            task_id=task_id,
            progress=updated.progress,
            from_status=str(task.status),
            to_status=str(updated.status),
        )
        self._notify(NotificationKind.SUCCESS, "Progress updated", task_id)
        return updated

    async def add_comment(self, task_id: str, text: str, principal: Principal) -> Comment:
        """追加评论（任何已登录用户）"""
        task = self.require(task_id)
        self._policy.require_comment(principal, task)
        if not text or not text.strip():
            raise TaskValidationError("Comment text is required")

        comment = Comment(
            id=str(ULID()),
            task_id=task_id,
            user_id=principal.id,
            user_name=principal.display_name,
            text=text.strip(),
            created_at=self._clock(),
        )
        stored = await call_backend("insert_comment", self._backend.insert_comment, comment)
        self._invalidate_pending_refresh()

        # 重新读取：写入期间快照可能已被 refresh 替换
        current = self._tasks.get(task_id, task)
        self._tasks[task_id] = current.model_copy(
            update={"comments": [*current.comments, stored]}
        )

        await log.ainfo("task_comment_added", task_id=task_id, comment_id=stored.id)
        self._notify(NotificationKind.SUCCESS, "Comment added", task_id)
        return stored

    async def delete(self, task_id: str, principal: Principal) -> None:
        """删除任务及其评论（仅管理员）"""
        self.require(task_id)
        self._policy.require_delete(principal)

        await call_backend("delete_task", self._backend.delete_task, task_id)
        self._invalidate_pending_refresh()
        self._tasks.pop(task_id, None)

        await log.ainfo("task_deleted", task_id=task_id, principal_id=principal.id)
        self._notify(NotificationKind.SUCCESS, "Task deleted", task_id)

    # ---- 内部 ----

    def _invalidate_pending_refresh(self) -> None:
        """写入已成功：进行中的 refresh 可能读到写入前的数据，令其结果作废"""
        self._request_token += 1

    def _notify(self, kind: NotificationKind, message: str, task_id: str) -> None:
        notify_quietly(self._notifier, kind, message, task_id)

    @staticmethod
    def _changed_fields(before: Task, after: Task) -> dict[str, Any]:
        """比较前后两个版本，返回发生变化的字段（不含 comments）"""
        return {
            name: getattr(after, name)
            for name in Task.model_fields
            if name != "comments" and getattr(after, name) != getattr(before, name)
        }
