"""
Filter layer: derive the rendered board from tasks, columns and filters.

Pure functions only. The board is re-rendered from scratch after every
change, so nothing here caches or holds state.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .schema import Column, Priority, Task


@dataclass
class RenderedColumn:
    """A column as displayed: its identity plus the tasks that pass the filters."""
    id: str
    title: str
    is_custom: bool = False
    tasks: List[Task] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "is_custom": self.is_custom,
            "tasks": [t.to_dict() for t in self.tasks],
        }


def default_priority_filter() -> Dict[str, bool]:
    return {p.value: True for p in Priority}


def priority_enabled(priority: Priority, priority_filter: Optional[Mapping[str, bool]]) -> bool:
    """A priority is shown unless it was explicitly switched off."""
    if not priority_filter:
        return True
    key = priority.value if isinstance(priority, Priority) else str(priority)
    return priority_filter.get(key) is not False


def render(
    tasks: Iterable[Task],
    visible_columns: Iterable[Column],
    priority_filter: Optional[Mapping[str, bool]] = None,
) -> List[RenderedColumn]:
    """Group filtered tasks under each visible column, keeping board order."""
    shown = [t for t in tasks if priority_enabled(t.priority, priority_filter)]
    return [
        RenderedColumn(
            id=col.id,
            title=col.title,
            is_custom=col.is_custom,
            tasks=[t for t in shown if t.status == col.id],
        )
        for col in visible_columns
    ]


def orphaned_tasks(tasks: Iterable[Task], columns: Iterable[Column]) -> List[Task]:
    """Tasks whose status names no registered column. They never render."""
    known = {c.id for c in columns}
    return [t for t in tasks if t.status not in known]


def active_priority_count(priority_filter: Optional[Mapping[str, bool]]) -> int:
    return sum(1 for p in Priority if priority_enabled(p, priority_filter))


def all_priorities_selected(priority_filter: Optional[Mapping[str, bool]]) -> bool:
    """True when the filter is effectively off (every priority, or none, enabled)."""
    count = active_priority_count(priority_filter)
    return count == len(Priority) or count == 0
