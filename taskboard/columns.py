"""
Column registry: predefined columns with visibility flags plus user-defined
custom columns.

- Predefined columns always exist. Hiding one stops it rendering and stops it
  being a drop target; its tasks stay where they are.
- Custom columns are created and deleted by the user. Deletion is refused
  while any task still sits in the column.
"""
import logging
import re
import time
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .schema import (
    Column,
    PREDEFINED_COLUMNS,
    PREDEFINED_COLUMN_IDS,
    OccupiedError,
    Task,
    ValidationError,
)

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def _now_ms() -> int:
    return int(time.time() * 1000)


def make_column_id(title: str, timestamp_ms: int) -> str:
    """Custom column id: slugged title + creation timestamp."""
    slug = _WHITESPACE_RE.sub("_", title.strip().lower())
    return f"custom_{slug}_{timestamp_ms}"


class ColumnRegistry:
    """Ordered set of displayable columns."""

    def __init__(
        self,
        visibility: Optional[Mapping[str, bool]] = None,
        custom_columns: Optional[Iterable[Column]] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        self._visibility: Dict[str, bool] = {cid: True for cid in PREDEFINED_COLUMN_IDS}
        for cid, visible in (visibility or {}).items():
            if cid in self._visibility:
                self._visibility[cid] = bool(visible)
        self._custom: List[Column] = []
        for col in custom_columns or []:
            if col.id in PREDEFINED_COLUMN_IDS or self.has_column(col.id):
                logger.warning(f"Skipping duplicate custom column id {col.id}")
                continue
            self._custom.append(Column(col.id, col.title, is_custom=True))
        self._clock = clock

    # ── queries ─────────────────────────────────────────────

    def visible_columns(self) -> List[Column]:
        """Visible predefined columns in fixed order, then custom columns."""
        predefined = [c for c in PREDEFINED_COLUMNS if self._visibility.get(c.id) is not False]
        return predefined + list(self._custom)

    def all_columns(self) -> List[Column]:
        return list(PREDEFINED_COLUMNS) + list(self._custom)

    def custom_columns(self) -> List[Column]:
        return list(self._custom)

    def visibility(self) -> Dict[str, bool]:
        return dict(self._visibility)

    def is_visible(self, column_id: str) -> bool:
        if column_id in self._visibility:
            return self._visibility[column_id]
        return self.get_custom(column_id) is not None

    def has_column(self, column_id: str) -> bool:
        return column_id in PREDEFINED_COLUMN_IDS or self.get_custom(column_id) is not None

    def get_custom(self, column_id: str) -> Optional[Column]:
        for col in self._custom:
            if col.id == column_id:
                return col
        return None

    # ── predefined visibility ───────────────────────────────

    def set_column_visible(self, column_id: str, visible: bool) -> bool:
        """Show or hide a predefined column. Tasks are never touched."""
        if column_id not in self._visibility:
            logger.warning(f"Visibility toggle ignored for non-predefined column {column_id}")
            return False
        self._visibility[column_id] = bool(visible)
        return True

    # ── custom column lifecycle ─────────────────────────────

    def add_custom_column(self, title: str) -> Column:
        """Create a custom column at the end of the board."""
        if not isinstance(title, str):
            raise ValidationError("Column title must be text.")
        title = title.strip()
        if not title:
            raise ValidationError("Please enter a title for the new column.")

        ts = self._clock()
        column_id = make_column_id(title, ts)
        while self.has_column(column_id):
            ts += 1
            column_id = make_column_id(title, ts)

        column = Column(column_id, title, is_custom=True)
        self._custom.append(column)
        logger.info(f"Added custom column {column_id}")
        return column

    def rename_custom_column(self, column_id: str, title: str) -> bool:
        """Retitle a custom column; its id never changes."""
        if not isinstance(title, str):
            raise ValidationError("Column title must be text.")
        title = title.strip()
        if not title:
            raise ValidationError("Column title cannot be empty.")
        for i, col in enumerate(self._custom):
            if col.id == column_id:
                self._custom[i] = Column(col.id, title, is_custom=True)
                return True
        return False

    def delete_custom_column(self, column_id: str, tasks: Iterable[Task]) -> bool:
        """
        Remove a custom column.

        Raises OccupiedError while any task's status is the column id.
        Returns False if the id is not a custom column.
        """
        if self.get_custom(column_id) is None:
            return False
        occupied = sum(1 for t in tasks if t.status == column_id)
        if occupied:
            raise OccupiedError(column_id, occupied)
        self._custom = [c for c in self._custom if c.id != column_id]
        logger.info(f"Deleted custom column {column_id}")
        return True
