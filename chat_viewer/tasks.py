"""Task (TODO) records and the task-list formatter."""

import json
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

NO_TASKS_SENTINEL = "No tasks found"


class TaskStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "TaskStatus":
        for member in cls:
            if member is not cls.UNKNOWN and member.value == value:
                return member
        return cls.UNKNOWN


class TaskPriority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "TaskPriority":
        for member in cls:
            if member is not cls.UNKNOWN and member.value == value:
                return member
        return cls.UNKNOWN


STATUS_GLYPHS = {
    TaskStatus.PENDING: "⬜",
    TaskStatus.IN_PROGRESS: "🔄",
    TaskStatus.COMPLETED: "✅",
    TaskStatus.CANCELLED: "❌",
    TaskStatus.UNKNOWN: "❓",
}

PRIORITY_GLYPHS = {
    TaskPriority.HIGH: "⭐",
    TaskPriority.MEDIUM: "◆",
    TaskPriority.LOW: "○",
    TaskPriority.UNKNOWN: "⚪",
}


@dataclass(frozen=True)
class TaskRecord:
    status: TaskStatus
    priority: TaskPriority
    content: str

    @classmethod
    def from_value(cls, value: Any) -> "TaskRecord":
        """Loosely convert one JSON value into a TaskRecord.

        Missing or unrecognized fields degrade to UNKNOWN / empty content.
        A bare string is taken as the task's content.
        """
        if isinstance(value, dict):
            content = value.get("content")
            return cls(
                status=TaskStatus.parse(value.get("status")),
                priority=TaskPriority.parse(value.get("priority")),
                content="" if content is None else str(content),
            )
        return cls(
            status=TaskStatus.UNKNOWN,
            priority=TaskPriority.UNKNOWN,
            content="" if value is None else str(value),
        )


def format_task(task: TaskRecord) -> str:
    return f"{STATUS_GLYPHS[task.status]} {PRIORITY_GLYPHS[task.priority]} {task.content}"


def format_task_list(tasks: Any) -> str:
    """Render a task list as a header line plus one line per task, in input order."""
    if not isinstance(tasks, list) or not tasks:
        return NO_TASKS_SENTINEL

    lines = [f"📋 **TODO List** ({len(tasks)} tasks)", ""]
    for raw in tasks:
        lines.append(format_task(TaskRecord.from_value(raw)))
    return "\n".join(lines) + "\n"


def load_session_todos(todos_dir: str | os.PathLike, session_id: str) -> str | None:
    """Load and format the stored task list for a session.

    Returns None when the file is missing or cannot be decoded.
    """
    path = os.path.join(todos_dir, f"{session_id}.json")
    if not os.path.isfile(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            todos = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Could not load TODOs for session %s: %s", session_id, exc)
        return None
    return format_task_list(todos)
