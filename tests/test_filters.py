"""Tests for board rendering and priority filters."""
from conftest import make_task

from taskboard.columns import ColumnRegistry
from taskboard.filters import (
    active_priority_count,
    all_priorities_selected,
    default_priority_filter,
    orphaned_tasks,
    priority_enabled,
    render,
)
from taskboard.schema import Column, Priority


def _tasks():
    return [
        make_task("A", "todo", Priority.LOW),
        make_task("B", "review", Priority.URGENT),
        make_task("C", "todo", Priority.HIGH),
        make_task("D", "custom_x", Priority.MEDIUM),
        make_task("E", "ghost", Priority.MEDIUM),
    ]


class TestRender:

    def test_groups_tasks_by_status_in_board_order(self):
        registry = ColumnRegistry()
        columns = {c.id: c for c in render(_tasks(), registry.visible_columns())}
        assert [t.id for t in columns["todo"].tasks] == ["A", "C"]
        assert [t.id for t in columns["review"].tasks] == ["B"]
        assert columns["backlog"].tasks == []

    def test_column_order_matches_registry(self):
        registry = ColumnRegistry(custom_columns=[Column("custom_x", "X", True)])
        rendered = render(_tasks(), registry.visible_columns())
        assert [c.id for c in rendered] == [c.id for c in registry.visible_columns()]
        assert rendered[-1].is_custom
        assert [t.id for t in rendered[-1].tasks] == ["D"]

    def test_hidden_column_tasks_not_rendered(self):
        registry = ColumnRegistry()
        registry.set_column_visible("review", False)
        rendered = render(_tasks(), registry.visible_columns())
        shown = {t.id for c in rendered for t in c.tasks}
        assert "B" not in shown

    def test_priority_filter_explicit_false_hides(self):
        registry = ColumnRegistry()
        rendered = render(_tasks(), registry.visible_columns(), {"high": False})
        todo = next(c for c in rendered if c.id == "todo")
        assert [t.id for t in todo.tasks] == ["A"]

    def test_missing_priority_entry_means_visible(self):
        registry = ColumnRegistry()
        rendered = render(_tasks(), registry.visible_columns(), {"low": True})
        todo = next(c for c in rendered if c.id == "todo")
        assert [t.id for t in todo.tasks] == ["A", "C"]

    def test_empty_filter_shows_everything(self):
        registry = ColumnRegistry()
        tasks = _tasks()
        assert render(tasks, registry.visible_columns(), {}) == render(tasks, registry.visible_columns())

    def test_to_dict(self):
        registry = ColumnRegistry()
        data = render(_tasks(), registry.visible_columns())[1].to_dict()
        assert data["id"] == "todo"
        assert [t["id"] for t in data["tasks"]] == ["A", "C"]


class TestPriorityHelpers:

    def test_priority_enabled(self):
        assert priority_enabled(Priority.LOW, None)
        assert priority_enabled(Priority.LOW, {"low": True})
        assert not priority_enabled(Priority.LOW, {"low": False})

    def test_badge_counts(self):
        assert active_priority_count(default_priority_filter()) == 4
        assert all_priorities_selected(default_priority_filter())

        narrowed = {"low": False, "medium": False}
        assert active_priority_count(narrowed) == 2
        assert not all_priorities_selected(narrowed)

        nothing = {p.value: False for p in Priority}
        assert active_priority_count(nothing) == 0
        assert all_priorities_selected(nothing)


def test_orphaned_tasks():
    """Tasks pointing at unknown columns are reported, never rendered"""
    registry = ColumnRegistry()
    orphans = orphaned_tasks(_tasks(), registry.all_columns())
    assert [t.id for t in orphans] == ["D", "E"]
