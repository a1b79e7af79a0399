"""CLI 入口模块 -- python -m taskdesk.core <command>

支持的命令：
  init-db        在配置的路径上创建数据库表结构
  explain-match  输出指定身份在全部任务上的匹配诊断
"""

import argparse
import asyncio
import sys

from .config import build_resolver, get_db_path
from .models.principal import Principal


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m taskdesk.core")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("init-db", help="在配置的路径上创建数据库表结构")

    explain = sub.add_parser("explain-match", help="输出指定身份的匹配诊断")
    explain.add_argument("--id", required=True, help="用户 ID")
    explain.add_argument("--employee-id", default=None, help="员工编号")
    explain.add_argument("--email", default=None, help="邮箱")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI 主入口"""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "init-db":
        asyncio.run(init_database())
    elif args.command == "explain-match":
        principal = Principal(id=args.id, employee_id=args.employee_id, email=args.email)
        asyncio.run(explain_match(principal))
    else:
        parser.print_help()
        sys.exit(1)


async def init_database() -> None:
    """创建表结构"""
    from .store import create_store_group, verify_wal_mode

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)
    try:
        wal = await verify_wal_mode(store_group.conn)
        print(f"初始化完成 (WAL: {'on' if wal else 'off'})")
    finally:
        await store_group.conn.close()


async def explain_match(principal: Principal) -> None:
    """加载全部任务并输出匹配诊断"""
    from .store import create_store_group
    from .task_store import TaskStore

    store_group = await create_store_group(get_db_path())
    try:
        store = TaskStore(store_group.task_backend, resolver=build_resolver())
        await store.refresh()
        report = store.resolver.assignment_report(principal, store.tasks)
        print(report.model_dump_json(indent=2))
    finally:
        await store_group.conn.close()


if __name__ == "__main__":
    main()
