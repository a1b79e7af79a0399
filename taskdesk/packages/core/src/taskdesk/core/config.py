"""配置模块 -- 可通过环境变量覆盖

包含数据库路径、SSE 心跳间隔等可配置常量，
以及身份解析器配置（策略列表 + 别名表）的加载。
"""

import json
import os
from pathlib import Path

import structlog
from pydantic import BaseModel, Field

from .identity import IdentityResolver
from .models.enums import MatchStrategyName

log = structlog.get_logger()


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKDESK_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKDESK_DB_PATH",
        str(_get_base_dir() / "sqlite" / "taskdesk.db"),
    )


# SSE 心跳间隔（秒）
SSE_HEARTBEAT_INTERVAL: int = int(
    os.environ.get("TASKDESK_SSE_HEARTBEAT_INTERVAL", "15")
)

# 仪表盘"最近任务"条数
RECENT_TASKS_LIMIT: int = 4


class ResolverConfig(BaseModel):
    """身份解析器配置

    环境变量:
        TASKDESK_MATCH_STRATEGIES: 逗号分隔的策略名称，为空表示全部
        TASKDESK_IDENTITY_ALIASES: JSON 对象 {email: [identifier, ...]}
    """

    strategies: list[MatchStrategyName] = Field(
        default_factory=lambda: list(MatchStrategyName),
        description="启用的匹配策略（按顺序）",
    )
    aliases: dict[str, list[str]] = Field(
        default_factory=dict,
        description="邮箱 -> 额外标识 的别名表",
    )


def load_resolver_config() -> ResolverConfig:
    """从环境变量加载解析器配置

    非法的策略名称或 JSON 仅记录警告，不阻塞启动。
    """
    kwargs: dict = {}

    if raw := os.environ.get("TASKDESK_MATCH_STRATEGIES"):
        names: list[MatchStrategyName] = []
        for part in raw.split(","):
            part = part.strip().lower()
            if not part:
                continue
            try:
                names.append(MatchStrategyName(part))
            except ValueError:
                log.warning(
                    "unknown_match_strategy",
                    env_var="TASKDESK_MATCH_STRATEGIES",
                    value=part,
                )
        if names:
            kwargs["strategies"] = names

    if raw := os.environ.get("TASKDESK_IDENTITY_ALIASES"):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            data = None
        if isinstance(data, dict) and all(isinstance(v, list) for v in data.values()):
            kwargs["aliases"] = {
                str(email): [str(item) for item in values] for email, values in data.items()
            }
        else:
            log.warning(
                "invalid_identity_aliases",
                env_var="TASKDESK_IDENTITY_ALIASES",
            )

    return ResolverConfig(**kwargs)


def build_resolver(config: ResolverConfig | None = None) -> IdentityResolver:
    """按配置构建身份解析器，None 时从环境变量加载"""
    config = config or load_resolver_config()
    return IdentityResolver.from_names(config.strategies, aliases=config.aliases)
