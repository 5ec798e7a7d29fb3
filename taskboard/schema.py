"""
Task board schema: tasks, columns, priorities and board errors.

Column layout:
  Backlog → To Do → In Progress → Review → Client Approval → Done
  (+ user-defined custom columns, always after the predefined ones)

A task's column is its `status`; its position in the board is its position
in the flat task list. Nothing else encodes order.
"""
from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Tuple


class Priority(Enum):
    """Task priorities. Used for filtering only, never for ordering."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def from_str(cls, value: str) -> "Priority":
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.MEDIUM


class BoardError(Exception):
    """Base class for user-correctable board errors."""
    pass


class ValidationError(BoardError):
    """Raised when a column title is empty or whitespace."""
    pass


class OccupiedError(BoardError):
    """Raised when deleting a column that still holds tasks."""

    def __init__(self, column_id: str, task_count: int):
        self.column_id = column_id
        self.task_count = task_count
        super().__init__(
            f"Column '{column_id}' still has {task_count} task(s). "
            "Move or reassign them before deleting the column."
        )


@dataclass(frozen=True)
class Column:
    """A board column. Predefined columns are fixed; custom ones are user-made."""
    id: str
    title: str
    is_custom: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "is_custom": self.is_custom}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Column":
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            is_custom=bool(data.get("is_custom", data.get("isCustom", True))),
        )


PREDEFINED_COLUMNS: Tuple[Column, ...] = (
    Column("backlog", "Backlog"),
    Column("todo", "To Do"),
    Column("in_progress", "In Progress"),
    Column("review", "Review"),
    Column("client_approval", "Client Approval"),
    Column("done", "Done"),
)

PREDEFINED_COLUMN_IDS: Tuple[str, ...] = tuple(c.id for c in PREDEFINED_COLUMNS)

# New tasks land here; "clear completed" empties the terminal column
INITIAL_COLUMN_ID = "todo"
TERMINAL_COLUMN_ID = "done"


def _parse_dt(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        text = str(value)
        # fromisoformat only accepts a Z suffix from 3.11 on
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    except ValueError:
        return None


@dataclass
class Task:
    """A board task. The engine only ever touches `status` and list position."""

    # Identifiers
    id: str
    title: str = ""

    # Placement
    status: str = INITIAL_COLUMN_ID
    priority: Priority = Priority.MEDIUM

    # Content (carried through untouched)
    description: str = ""
    task_type: str = ""
    due_date: Optional[datetime] = None
    assignees: List[str] = field(default_factory=list)
    client_id: Optional[str] = None
    client_name: str = ""

    # Metadata
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "priority": self.priority.value if isinstance(self.priority, Priority) else self.priority,
            "description": self.description,
            "task_type": self.task_type,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "assignees": list(self.assignees),
            "client_id": self.client_id,
            "client_name": self.client_name,
            "created_at": self.created_at.isoformat() if isinstance(self.created_at, datetime) else self.created_at,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Deserialize from dict. Missing status falls back to the initial column."""
        assignees = data.get("assignees") or []
        # CRUD payloads may embed full user objects
        assignees = [a.get("id", "") if isinstance(a, dict) else str(a) for a in assignees]

        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            status=data.get("status") or INITIAL_COLUMN_ID,
            priority=Priority.from_str(data.get("priority", "medium")),
            description=data.get("description") or "",
            task_type=data.get("task_type") or data.get("type") or "",
            due_date=_parse_dt(data.get("due_date") or data.get("dueDate")),
            assignees=assignees,
            client_id=data.get("client_id") or data.get("clientId"),
            client_name=data.get("client_name") or data.get("clientName") or "",
            created_at=_parse_dt(data.get("created_at")) or datetime.now(timezone.utc),
            updated_at=_parse_dt(data.get("updated_at")),
        )
