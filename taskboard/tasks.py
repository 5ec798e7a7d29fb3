"""
Task store: the ordered task collection that backs a board session.

The store is immutable. Every mutation returns a new store, which keeps the
drag reducer pure and lets callers compare before/after snapshots.
"""
from dataclasses import replace
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .schema import Task
from .reorder import array_move


class TaskStore:
    """Flat, ordered task list with an id -> position index."""

    def __init__(self, tasks: Iterable[Task] = ()):
        self._tasks: Tuple[Task, ...] = tuple(tasks)
        self._index: Dict[str, int] = {}
        for i, task in enumerate(self._tasks):
            # First occurrence wins on duplicate ids
            self._index.setdefault(task.id, i)

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks)

    def __getitem__(self, i: int) -> Task:
        return self._tasks[i]

    def __eq__(self, other) -> bool:
        if isinstance(other, TaskStore):
            return self._tasks == other._tasks
        return NotImplemented

    def __repr__(self) -> str:
        return f"TaskStore({[t.id for t in self._tasks]})"

    # ── queries ─────────────────────────────────────────────

    def get(self, task_id: Optional[str]) -> Optional[Task]:
        i = self.index_of(task_id)
        return self._tasks[i] if i != -1 else None

    def index_of(self, task_id: Optional[str]) -> int:
        if task_id is None:
            return -1
        return self._index.get(task_id, -1)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._index

    def ids(self) -> List[str]:
        return [t.id for t in self._tasks]

    def in_column(self, column_id: str) -> List[Task]:
        """Tasks in one column, in board order."""
        return [t for t in self._tasks if t.status == column_id]

    def count_in_column(self, column_id: str) -> int:
        return sum(1 for t in self._tasks if t.status == column_id)

    def to_list(self) -> List[Task]:
        return list(self._tasks)

    # ── mutations (return new stores) ───────────────────────

    def with_status(self, task_id: str, status: str) -> "TaskStore":
        """Move a task to another column without touching its position."""
        i = self.index_of(task_id)
        if i == -1 or self._tasks[i].status == status:
            return self
        tasks = list(self._tasks)
        tasks[i] = replace(tasks[i], status=status)
        return TaskStore(tasks)

    def moved(self, moving_id: str, target_id: str) -> "TaskStore":
        """Move `moving_id` to the position held by `target_id`."""
        old_index = self.index_of(moving_id)
        new_index = self.index_of(target_id)
        if old_index == -1 or new_index == -1 or old_index == new_index:
            return self
        return TaskStore(array_move(self._tasks, old_index, new_index))

    def without_column(self, column_id: str) -> Tuple["TaskStore", List[Task]]:
        """Drop every task in a column. Returns (new store, removed tasks)."""
        kept = [t for t in self._tasks if t.status != column_id]
        removed = [t for t in self._tasks if t.status == column_id]
        if not removed:
            return self, []
        return TaskStore(kept), removed
