#!/usr/bin/env python3
"""
FlowFocus — command-line board

Usage:
    flowfocus board                              # show all columns
    flowfocus board --search api --priority high
    flowfocus add "Write release notes" --due 2024-06-01 --tag docs
    flowfocus move 3 inprogress
    flowfocus toggle 3
    flowfocus edit 3 --title "New title" --tags "docs, release"
    flowfocus delete 3
    flowfocus stats
"""

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from .board import TaskBoard
from .config import BoardConfig
from .dates import format_due_date, is_overdue
from .errors import ValidationError
from .notify import CollectingNotifier
from .schema import COLUMNS, Task, parse_tags
from .stats import completion_chart, priority_chart


# ── Rendering ──────────────────────────────────────────────────────────────

def format_task(task: Task, today: Optional[date] = None) -> str:
    """One-line card: '[ ] #3 [high] Title (due Tomorrow) #docs #release'."""
    check = "x" if task.status.value == "done" else " "
    parts = [f"[{check}] #{task.id}", f"[{task.priority.value}]", task.title]
    if task.due_date:
        label = format_due_date(task.due_date, today)
        if is_overdue(task.due_date, today, task.status):
            label += ", overdue"
        parts.append(f"(due {label})")
    if task.tags:
        shown = " ".join(f"#{tag}" for tag in task.tags[:2])
        if len(task.tags) > 2:
            shown += f" +{len(task.tags) - 2}"
        parts.append(shown)
    return " ".join(parts)


def render_board(board: TaskBoard, today: Optional[date] = None) -> str:
    completed, total = board.progress()
    lines = [f"{completed}/{total} completed · {board.found_label()}"]
    grouping = board.columns()
    for column, tasks in grouping:
        lines.append("")
        lines.append(f"{column.title} ({len(tasks)})")
        lines.append("-" * (len(column.title) + 4))
        if not tasks:
            lines.append("  (no tasks)")
        for task in tasks:
            lines.append("  " + format_task(task, today))
    return "\n".join(lines)


def render_stats(board: TaskBoard, today: Optional[date] = None) -> str:
    stats = board.stats(today)
    lines = [
        f"Total tasks:     {stats.total}",
        f"Completed:       {stats.completed}",
        f"In progress:     {stats.in_progress}",
        f"Overdue:         {stats.overdue}",
        f"Completion rate: {stats.completion_rate:.0f}%",
        "",
        "Status:",
    ]
    lines += [f"  {label:<12} {value}" for label, value in completion_chart(stats)]
    lines.append("Priority:")
    lines += [f"  {label:<12} {value}" for label, value in priority_chart(stats)]
    return "\n".join(lines)


# ── Commands ───────────────────────────────────────────────────────────────

def _task_id(raw: str):
    return int(raw) if raw.isdigit() else raw


async def run(args: argparse.Namespace, board: TaskBoard, collector: CollectingNotifier) -> int:
    if not await board.load():
        return 1

    if args.command == "board":
        board.set_search(args.search or "")
        board.set_status_filter(args.status)
        board.set_priority_filter(args.priority)
        print(render_board(board))
        return 0

    if args.command == "stats":
        print(render_stats(board))
        return 0

    if args.command == "add":
        task = await board.create(
            args.title,
            description=args.description or "",
            status=args.status,
            priority=args.priority,
            due_date=args.due,
            tags=args.tag or [],
        )
        if task:
            print(format_task(task))
    elif args.command == "edit":
        changes = {}
        for name in ("title", "description", "status", "priority"):
            value = getattr(args, name)
            if value is not None:
                changes[name] = value
        if args.due is not None:
            changes["due_date"] = args.due
        if args.tags is not None:
            changes["tags"] = parse_tags(args.tags)
        task = await board.save(_task_id(args.id), changes)
        if task:
            print(format_task(task))
    elif args.command == "move":
        task = await board.save(_task_id(args.id), {"status": args.status})
        if task:
            print(format_task(task))
    elif args.command == "toggle":
        task = await board.toggle_complete(_task_id(args.id))
        if task:
            print(format_task(task))
    elif args.command == "delete":
        await board.delete(_task_id(args.id))

    return 1 if collector.failures() else 0


def build_parser() -> argparse.ArgumentParser:
    statuses = [col.status.value for col in COLUMNS]
    priorities = ["low", "medium", "high", "urgent"]

    ap = argparse.ArgumentParser(prog="flowfocus", description="FlowFocus task board")
    ap.add_argument("--config", default=None, help="Path to flowfocus.yaml")
    ap.add_argument("--db", default=None, help="SQLite database path (overrides config)")
    ap.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("board", help="Show the board")
    p.add_argument("--search", default="")
    p.add_argument("--status", default="all", choices=["all"] + statuses)
    p.add_argument("--priority", default="all", choices=["all"] + priorities)

    sub.add_parser("stats", help="Show dashboard statistics")

    p = sub.add_parser("add", help="Create a task")
    p.add_argument("title")
    p.add_argument("--description", default="")
    p.add_argument("--status", default="todo", choices=statuses)
    p.add_argument("--priority", default="medium", choices=priorities)
    p.add_argument("--due", default=None, help="Due date (YYYY-MM-DD)")
    p.add_argument("--tag", action="append", help="Tag (repeatable)")

    p = sub.add_parser("edit", help="Edit task fields")
    p.add_argument("id")
    p.add_argument("--title")
    p.add_argument("--description")
    p.add_argument("--status", choices=statuses)
    p.add_argument("--priority", choices=priorities)
    p.add_argument("--due", help="Due date (YYYY-MM-DD), '' to clear")
    p.add_argument("--tags", help="Comma-separated tags, '' to clear")

    p = sub.add_parser("move", help="Move a task to another column")
    p.add_argument("id")
    p.add_argument("status", choices=statuses)

    p = sub.add_parser("toggle", help="Toggle a task between done and todo")
    p.add_argument("id")

    p = sub.add_parser("delete", help="Delete a task")
    p.add_argument("id")

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    cfg = BoardConfig.load(args.config)
    if args.db:
        cfg.db_path = str(Path(args.db).expanduser())

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s [flowfocus] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    collector = CollectingNotifier()
    board = TaskBoard(cfg.build_gateway(), cfg.build_notifier(collector), config=cfg)
    try:
        return asyncio.run(run(args, board, collector))
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
