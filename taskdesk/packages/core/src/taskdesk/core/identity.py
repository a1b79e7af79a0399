"""身份解析器 -- 判断任务是否属于当前用户

任务的 assigned_to 来源不一致：有时是员工编号，有时是邮箱，有时是 UUID。
解析器在读取时容错匹配：按顺序执行一组纯函数策略，任一命中即视为匹配（并集语义）。
策略顺序只影响诊断日志，不影响布尔结果。

宁可误报（把任务展示给编号相似的用户），也不漏报（隐藏已分配的任务）。
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from functools import partial

import structlog
from pydantic import BaseModel, Field

from .models.enums import MatchStrategyName
from .models.principal import Principal
from .models.task import Task

log = structlog.get_logger()

StrategyFn = Callable[[Principal, Task], bool]


def _owner_reference(task: Task) -> str | None:
    """取出可比较的 assigned_to；空值或非字符串返回 None"""
    value = task.assigned_to
    if not isinstance(value, str) or not value.strip():
        return None
    return value


def match_exact(principal: Principal, task: Task) -> bool:
    """assigned_to 与任一已知标识完全相等"""
    ref = _owner_reference(task)
    if ref is None:
        return False
    return ref in principal.known_identifiers


def match_case_insensitive(principal: Principal, task: Task) -> bool:
    """忽略大小写相等"""
    ref = _owner_reference(task)
    if ref is None:
        return False
    lowered = ref.lower()
    return any(lowered == ident.lower() for ident in principal.known_identifiers)


def match_substring(principal: Principal, task: Task) -> bool:
    """assigned_to 包含任一已知标识（如带前缀的编码 EMP-alice-07）"""
    ref = _owner_reference(task)
    if ref is None:
        return False
    return any(ident in ref for ident in principal.known_identifiers)


def match_email_local_part(principal: Principal, task: Task) -> bool:
    """邮箱本地部分与 assigned_to 相等或被其包含（忽略大小写）"""
    ref = _owner_reference(task)
    local = principal.email_local_part
    if ref is None or local is None:
        return False
    local = local.lower()
    ref = ref.lower()
    return ref == local or local in ref


def match_alias(
    principal: Principal,
    task: Task,
    aliases: Mapping[str, Sequence[str]],
) -> bool:
    """按配置的 邮箱 -> 标识 别名表匹配（忽略大小写相等）"""
    ref = _owner_reference(task)
    if ref is None or not principal.email:
        return False
    candidates = aliases.get(principal.email.strip().lower(), ())
    lowered = ref.lower()
    return any(alias and lowered == alias.lower() for alias in candidates)


DEFAULT_STRATEGIES: dict[MatchStrategyName, StrategyFn] = {
    MatchStrategyName.EXACT: match_exact,
    MatchStrategyName.CASE_INSENSITIVE: match_case_insensitive,
    MatchStrategyName.SUBSTRING: match_substring,
    MatchStrategyName.EMAIL_LOCAL_PART: match_email_local_part,
}


class MatchExplanation(BaseModel):
    """单个任务的匹配诊断"""

    task_id: str
    assigned_to: str
    matched: bool
    strategies: list[MatchStrategyName] = Field(
        default_factory=list, description="命中的策略（按执行顺序）"
    )


class AssignmentReport(BaseModel):
    """当前用户对一组任务的匹配诊断汇总"""

    principal_id: str
    known_identifiers: list[str]
    total_tasks: int
    strategy_counts: dict[str, int]
    matching_task_ids: list[str]


def _normalize_aliases(
    aliases: Mapping[str, Sequence[str]] | None,
) -> dict[str, list[str]]:
    if not aliases:
        return {}
    return {
        email.strip().lower(): [str(a).strip() for a in values if str(a).strip()]
        for email, values in aliases.items()
        if email and email.strip()
    }


class IdentityResolver:
    """多策略身份解析器"""

    def __init__(
        self,
        strategies: Mapping[MatchStrategyName, StrategyFn] | None = None,
        aliases: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        """
        Args:
            strategies: 有序策略表，None 表示默认四种策略
            aliases: 邮箱 -> 额外标识 的别名表，非空时追加 alias 策略
        """
        self._aliases = _normalize_aliases(aliases)
        if strategies is None:
            self._strategies: dict[MatchStrategyName, StrategyFn] = dict(DEFAULT_STRATEGIES)
            if self._aliases:
                self._strategies[MatchStrategyName.ALIAS] = self._alias_strategy()
        else:
            self._strategies = dict(strategies)

    @classmethod
    def from_names(
        cls,
        names: Iterable[MatchStrategyName],
        aliases: Mapping[str, Sequence[str]] | None = None,
    ) -> "IdentityResolver":
        """按策略名称构建解析器（用于配置加载）"""
        resolver = cls(strategies={}, aliases=aliases)
        for name in names:
            if name == MatchStrategyName.ALIAS:
                resolver._strategies[name] = resolver._alias_strategy()
            elif name in DEFAULT_STRATEGIES:
                resolver._strategies[name] = DEFAULT_STRATEGIES[name]
        return resolver

    def _alias_strategy(self) -> StrategyFn:
        return partial(match_alias, aliases=self._aliases)

    @property
    def strategy_names(self) -> list[MatchStrategyName]:
        return list(self._strategies)

    def resolves(self, principal: Principal, task: Task) -> bool:
        """判断 principal 是否是 task 的负责人

        未登录（无已知标识）或 assigned_to 为空时恒为 False。
        """
        if not principal.is_authenticated or _owner_reference(task) is None:
            return False
        for name, strategy in self._strategies.items():
            if strategy(principal, task):
                log.debug(
                    "identity_match",
                    strategy=str(name),
                    task_id=task.id,
                    principal_id=principal.id,
                )
                return True
        return False

    def explain(self, principal: Principal, task: Task) -> MatchExplanation:
        """执行全部策略，返回命中明细"""
        matched: list[MatchStrategyName] = []
        if principal.is_authenticated:
            matched = [
                name for name, strategy in self._strategies.items() if strategy(principal, task)
            ]
        return MatchExplanation(
            task_id=task.id,
            assigned_to=task.assigned_to or "",
            matched=bool(matched),
            strategies=matched,
        )

    def filter_tasks(self, principal: Principal, tasks: Iterable[Task]) -> list[Task]:
        """返回属于 principal 的任务（保持原顺序）"""
        if not principal.is_authenticated:
            return []
        return [task for task in tasks if self.resolves(principal, task)]

    def assignment_report(
        self, principal: Principal, tasks: Iterable[Task]
    ) -> AssignmentReport:
        """汇总每个策略命中的任务数量，帮助排查分配问题"""
        task_list = list(tasks)
        counts = {str(name): 0 for name in self._strategies}
        matching: list[str] = []
        for task in task_list:
            explanation = self.explain(principal, task)
            for name in explanation.strategies:
                counts[str(name)] += 1
            if explanation.matched:
                matching.append(task.id)
        return AssignmentReport(
            principal_id=principal.id,
            known_identifiers=principal.known_identifiers,
            total_tasks=len(task_list),
            strategy_counts=counts,
            matching_task_ids=matching,
        )
