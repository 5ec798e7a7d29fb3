"""
Drag session controller: one drag gesture from pick-up to drop.

States:
  Idle → Dragging → Idle

A gesture changes two things at different moments:
  - status (column membership) changes live while hovering
  - order changes only on drop, and only when dropped onto another task

Hover-driven status changes are kept even if the gesture ends without a
drop target. Every transition is total: ids that resolve to nothing are
no-ops, never errors.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Collection, Optional, Union

from .tasks import TaskStore


class TargetKind(Enum):
    """What a pointer is currently over."""
    COLUMN = "column"
    TASK = "task"
    NONE = "none"


@dataclass(frozen=True)
class DropTarget:
    """A drag target resolved against the column registry and the task store."""
    kind: TargetKind
    id: Optional[str] = None
    column_id: Optional[str] = None  # For TASK targets: the task's status

    @classmethod
    def none(cls) -> "DropTarget":
        return cls(TargetKind.NONE)


def resolve_target(
    over_id: Optional[str],
    tasks: TaskStore,
    column_ids: Collection[str],
) -> DropTarget:
    """Classify `over_id` once. Columns win over tasks on an id clash."""
    if not isinstance(over_id, str):
        return DropTarget.none()
    if over_id in column_ids:
        return DropTarget(TargetKind.COLUMN, over_id, over_id)
    task = tasks.get(over_id)
    if task is not None:
        return DropTarget(TargetKind.TASK, task.id, task.status)
    return DropTarget.none()


# ── session + events ────────────────────────────────────────


@dataclass(frozen=True)
class DragSession:
    active_task_id: Optional[str] = None

    @property
    def is_dragging(self) -> bool:
        return self.active_task_id is not None


IDLE = DragSession()


@dataclass(frozen=True)
class DragStart:
    task_id: str


@dataclass(frozen=True)
class DragOver:
    active_task_id: str
    over_id: Optional[str] = None


@dataclass(frozen=True)
class DragEnd:
    active_task_id: str
    over_id: Optional[str] = None


@dataclass(frozen=True)
class DragCancel:
    """Keyboard escape or lost pointer. Same as a drop with no target."""
    pass


DragEvent = Union[DragStart, DragOver, DragEnd, DragCancel]


class Mutation(Enum):
    """What a transition changed in the task store."""
    NONE = "none"
    STATUS = "status"
    REORDER = "reorder"


@dataclass(frozen=True)
class BoardState:
    tasks: TaskStore
    session: DragSession = field(default=IDLE)


@dataclass(frozen=True)
class Transition:
    state: BoardState
    mutation: Mutation = Mutation.NONE

    @property
    def committed(self) -> bool:
        return self.mutation is not Mutation.NONE


# ── reducer ─────────────────────────────────────────────────


def reduce(state: BoardState, event: DragEvent, column_ids: Collection[str]) -> Transition:
    """Apply one drag event. `column_ids` are the ids of the droppable columns."""
    if isinstance(event, DragStart):
        return _on_drag_start(state, event)
    if isinstance(event, DragOver):
        return _on_drag_over(state, event, column_ids)
    if isinstance(event, DragEnd):
        return _on_drag_end(state, event, column_ids)
    if isinstance(event, DragCancel):
        return Transition(BoardState(state.tasks, IDLE))
    return Transition(state)


def _on_drag_start(state: BoardState, event: DragStart) -> Transition:
    if event.task_id not in state.tasks:
        return Transition(state)
    return Transition(BoardState(state.tasks, DragSession(event.task_id)))


def _on_drag_over(state: BoardState, event: DragOver, column_ids: Collection[str]) -> Transition:
    session = state.session
    if not session.is_dragging or event.active_task_id != session.active_task_id:
        return Transition(state)
    if event.over_id is None or event.over_id == event.active_task_id:
        return Transition(state)

    active = state.tasks.get(event.active_task_id)
    if active is None:
        return Transition(state)

    target = resolve_target(event.over_id, state.tasks, column_ids)
    if target.kind is TargetKind.NONE or target.column_id == active.status:
        return Transition(state)

    # Column membership follows the pointer; position waits for the drop
    tasks = state.tasks.with_status(active.id, target.column_id)
    return Transition(BoardState(tasks, session), Mutation.STATUS)


def _on_drag_end(state: BoardState, event: DragEnd, column_ids: Collection[str]) -> Transition:
    session = state.session
    if not session.is_dragging:
        return Transition(state)
    idle = BoardState(state.tasks, IDLE)

    if event.active_task_id != session.active_task_id or event.active_task_id not in state.tasks:
        return Transition(idle)

    target = resolve_target(event.over_id, state.tasks, column_ids)
    if target.kind is not TargetKind.TASK:
        # No target (cancelled) or a bare column: status already synced on hover
        return Transition(idle)

    tasks = state.tasks.moved(event.active_task_id, target.id)
    if tasks is state.tasks:
        return Transition(idle)
    return Transition(BoardState(tasks, IDLE), Mutation.REORDER)
