"""
Task board: the session-level facade over tasks, columns, filters and drag.

Every committed change is written through to the store immediately. Writes
are fire-and-forget: a failed save is logged, counted and announced on the
`persist_failed` event, but in-memory state is never rolled back.

Events (subscribe with `board.subscribe(event_type, callback)`):
  tasks_changed    mutation="status"|"reorder"|"replace"|"clear"
  tasks_removed    task_ids=[...]   (for the CRUD collaborator to delete)
  columns_changed
  filters_changed
  persist_failed   key=...
"""
import logging
from typing import Callable, Dict, Iterable, List, Optional

from .columns import ColumnRegistry
from .drag import (
    BoardState,
    DragCancel,
    DragEnd,
    DragEvent,
    DragOver,
    DragSession,
    DragStart,
    Transition,
    reduce,
)
from .filters import (
    RenderedColumn,
    active_priority_count,
    all_priorities_selected,
    default_priority_filter,
    orphaned_tasks,
    render,
)
from .schema import Column, Priority, Task, TERMINAL_COLUMN_ID, ValidationError
from .store import (
    BoardStore,
    COLUMNS_KEY,
    PRIORITY_FILTER_KEY,
    TASKS_KEY,
    VISIBILITY_KEY,
)
from .tasks import TaskStore

logger = logging.getLogger(__name__)


class TaskBoard:
    """One user's board: the single source of truth for status and order."""

    def __init__(
        self,
        store: Optional[BoardStore] = None,
        tasks: Optional[Iterable[Task]] = None,
        registry: Optional[ColumnRegistry] = None,
        priority_filter: Optional[Dict[str, bool]] = None,
    ):
        self.store = store
        self.registry = registry or ColumnRegistry()
        self.priority_filter: Dict[str, bool] = dict(priority_filter or default_priority_filter())
        self.state = BoardState(TaskStore(tasks or []))
        self.persist_failures = 0
        self.subscribers: Dict[str, list] = {}

    @classmethod
    def load(cls, store: BoardStore, **kwargs) -> "TaskBoard":
        """Restore a board from storage; missing keys fall back to defaults."""
        registry = ColumnRegistry(
            visibility=store.load_column_visibility(),
            custom_columns=store.load_columns(),
            **kwargs,
        )
        board = cls(
            store=store,
            tasks=store.load_tasks() or [],
            registry=registry,
            priority_filter=store.load_priority_filter(),
        )
        logger.info(
            f"Loaded board: {len(board.tasks)} tasks, "
            f"{len(registry.custom_columns())} custom columns"
        )
        return board

    # ── events ──────────────────────────────────────────────

    def subscribe(self, event_type: str, callback: Callable) -> None:
        """Register a callback for an event type."""
        if event_type not in self.subscribers:
            self.subscribers[event_type] = []
        self.subscribers[event_type].append(callback)

    def _emit(self, event_type: str, **kwargs) -> None:
        for callback in self.subscribers.get(event_type, []):
            try:
                callback(**kwargs)
            except Exception as e:
                logger.error(f"Error in {event_type} callback: {e}")

    # ── persistence ─────────────────────────────────────────

    def _persist(self, key: str) -> bool:
        if self.store is None:
            return True
        if key == TASKS_KEY:
            ok = self.store.save_tasks(self.tasks.to_list())
        elif key == COLUMNS_KEY:
            ok = self.store.save_columns(self.registry.custom_columns())
        elif key == VISIBILITY_KEY:
            ok = self.store.save_column_visibility(self.registry.visibility())
        elif key == PRIORITY_FILTER_KEY:
            ok = self.store.save_priority_filter(dict(self.priority_filter))
        else:
            raise KeyError(key)
        if not ok:
            self.persist_failures += 1
            logger.warning(f"Board state '{key}' not persisted; keeping in-memory copy")
            self._emit("persist_failed", key=key)
        return ok

    # ── queries ─────────────────────────────────────────────

    @property
    def tasks(self) -> TaskStore:
        return self.state.tasks

    @property
    def session(self) -> DragSession:
        return self.state.session

    @property
    def active_task(self) -> Optional[Task]:
        return self.tasks.get(self.session.active_task_id)

    def visible_columns(self) -> List[Column]:
        return self.registry.visible_columns()

    def render(self) -> List[RenderedColumn]:
        """The board as displayed right now."""
        return render(self.tasks, self.registry.visible_columns(), self.priority_filter)

    def orphaned_tasks(self) -> List[Task]:
        return orphaned_tasks(self.tasks, self.registry.all_columns())

    # ── task list from the CRUD collaborator ────────────────

    def replace_tasks(self, tasks: Iterable[Task]) -> None:
        """Take a fresh full task list. Ends any drag in progress."""
        self.state = BoardState(TaskStore(tasks))
        self._persist(TASKS_KEY)
        self._emit("tasks_changed", mutation="replace")

    def clear_completed(self) -> List[str]:
        """Remove every task in the terminal column. Returns the removed ids."""
        tasks, removed = self.tasks.without_column(TERMINAL_COLUMN_ID)
        if not removed:
            return []
        self.state = BoardState(tasks, self.session)
        removed_ids = [t.id for t in removed]
        self._persist(TASKS_KEY)
        self._emit("tasks_removed", task_ids=removed_ids)
        self._emit("tasks_changed", mutation="clear")
        logger.info(f"Cleared {len(removed_ids)} completed task(s)")
        return removed_ids

    # ── drag gestures ───────────────────────────────────────

    def dispatch(self, event: DragEvent) -> Transition:
        """Run one drag event through the reducer and commit the result."""
        column_ids = {c.id for c in self.registry.visible_columns()}
        transition = reduce(self.state, event, column_ids)
        self.state = transition.state
        if transition.committed:
            self._persist(TASKS_KEY)
            self._emit("tasks_changed", mutation=transition.mutation.value)
        return transition

    def drag_start(self, task_id: str) -> Transition:
        return self.dispatch(DragStart(task_id))

    def drag_over(self, active_task_id: str, over_id: Optional[str]) -> Transition:
        return self.dispatch(DragOver(active_task_id, over_id))

    def drag_end(self, active_task_id: str, over_id: Optional[str]) -> Transition:
        return self.dispatch(DragEnd(active_task_id, over_id))

    def drag_cancel(self) -> Transition:
        return self.dispatch(DragCancel())

    # ── columns ─────────────────────────────────────────────

    def set_column_visible(self, column_id: str, visible: bool) -> bool:
        if not self.registry.set_column_visible(column_id, visible):
            return False
        self._persist(VISIBILITY_KEY)
        self._emit("columns_changed")
        return True

    def add_custom_column(self, title: str) -> Column:
        column = self.registry.add_custom_column(title)
        self._persist(COLUMNS_KEY)
        self._emit("columns_changed")
        return column

    def rename_custom_column(self, column_id: str, title: str) -> bool:
        if not self.registry.rename_custom_column(column_id, title):
            return False
        self._persist(COLUMNS_KEY)
        self._emit("columns_changed")
        return True

    def delete_custom_column(self, column_id: str) -> bool:
        """Raises OccupiedError while tasks remain in the column."""
        if not self.registry.delete_custom_column(column_id, self.tasks):
            return False
        self._persist(COLUMNS_KEY)
        self._emit("columns_changed")
        return True

    # ── filters ─────────────────────────────────────────────

    def set_priority_filter(self, priority: str, enabled: bool) -> None:
        try:
            key = Priority(str(priority).lower()).value
        except ValueError:
            raise ValidationError(f"Unknown priority: {priority}")
        self.priority_filter[key] = bool(enabled)
        self._persist(PRIORITY_FILTER_KEY)
        self._emit("filters_changed")

    def to_dict(self) -> Dict:
        return {
            "columns": [c.to_dict() for c in self.render()],
            "active_task_id": self.session.active_task_id,
            "priority_filter": dict(self.priority_filter),
            "active_priority_count": active_priority_count(self.priority_filter),
            "all_priorities_selected": all_priorities_selected(self.priority_filter),
            "column_visibility": self.registry.visibility(),
            "custom_columns": [c.to_dict() for c in self.registry.custom_columns()],
            "orphaned": [t.id for t in self.orphaned_tasks()],
            "persist_failures": self.persist_failures,
        }
