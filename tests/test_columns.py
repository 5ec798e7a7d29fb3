"""
Tests for the column registry: visibility, ordering, custom column lifecycle.
"""
import pytest

from conftest import make_task

from taskboard.columns import ColumnRegistry, make_column_id
from taskboard.schema import Column, OccupiedError, PREDEFINED_COLUMN_IDS, ValidationError


def fixed_clock(ms=1700000000000):
    return lambda: ms


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Visibility & ordering
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_all_predefined_visible_by_default():
    """Test a fresh registry shows every predefined column in order"""
    registry = ColumnRegistry()
    assert [c.id for c in registry.visible_columns()] == list(PREDEFINED_COLUMN_IDS)


def test_hiding_predefined_column():
    """Test hidden predefined columns drop out of the visible list"""
    registry = ColumnRegistry()
    assert registry.set_column_visible("review", False)
    ids = [c.id for c in registry.visible_columns()]
    assert "review" not in ids
    # Still registered
    assert registry.has_column("review")
    assert not registry.is_visible("review")

    assert registry.set_column_visible("review", True)
    assert "review" in [c.id for c in registry.visible_columns()]


def test_visibility_toggle_rejects_custom_and_unknown_ids():
    """Test only predefined columns have a visibility flag"""
    registry = ColumnRegistry(clock=fixed_clock())
    col = registry.add_custom_column("Ideas")
    assert not registry.set_column_visible(col.id, False)
    assert not registry.set_column_visible("nope", False)
    assert col in registry.visible_columns()


def test_custom_columns_follow_predefined():
    """Test custom columns come after predefined ones, in creation order"""
    registry = ColumnRegistry(clock=fixed_clock())
    first = registry.add_custom_column("Ideas")
    second = registry.add_custom_column("Parking lot")
    registry.set_column_visible("backlog", False)

    ids = [c.id for c in registry.visible_columns()]
    assert ids[-2:] == [first.id, second.id]
    assert ids[:-2] == [cid for cid in PREDEFINED_COLUMN_IDS if cid != "backlog"]


def test_restore_from_saved_state():
    """Test a registry rebuilt from persisted visibility and columns"""
    registry = ColumnRegistry(
        visibility={"done": False, "bogus": False},
        custom_columns=[Column("custom_ideas_1", "Ideas", is_custom=True)],
    )
    assert not registry.is_visible("done")
    assert "bogus" not in registry.visibility()
    assert registry.get_custom("custom_ideas_1").title == "Ideas"


def test_restore_skips_duplicate_custom_ids():
    registry = ColumnRegistry(custom_columns=[
        Column("custom_a_1", "A", True),
        Column("custom_a_1", "A again", True),
        Column("done", "Shadow", True),
    ])
    assert [c.id for c in registry.custom_columns()] == ["custom_a_1"]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Custom column lifecycle
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_column_id_format():
    assert make_column_id("Future  Ideas", 42) == "custom_future_ideas_42"


def test_add_custom_column():
    """Test a custom column gets a slug + timestamp id"""
    registry = ColumnRegistry(clock=fixed_clock(1234))
    col = registry.add_custom_column("  Client Feedback ")
    assert col.id == "custom_client_feedback_1234"
    assert col.title == "Client Feedback"
    assert col.is_custom


def test_add_custom_column_unique_within_session():
    """Test same title at the same instant still yields distinct ids"""
    registry = ColumnRegistry(clock=fixed_clock(1000))
    a = registry.add_custom_column("Ideas")
    b = registry.add_custom_column("Ideas")
    assert a.id != b.id
    assert b.id == "custom_ideas_1001"


@pytest.mark.parametrize("title", ["", "   ", "\t\n", None])
def test_add_custom_column_rejects_empty_title(title):
    """Test empty titles raise and append nothing"""
    registry = ColumnRegistry()
    with pytest.raises(ValidationError):
        registry.add_custom_column(title)
    assert registry.custom_columns() == []


@pytest.mark.parametrize("title", [5, ["Ideas"], {"title": "Ideas"}])
def test_non_text_titles_raise_validation_error(title):
    registry = ColumnRegistry(clock=fixed_clock())
    with pytest.raises(ValidationError):
        registry.add_custom_column(title)
    col = registry.add_custom_column("Ideas")
    with pytest.raises(ValidationError):
        registry.rename_custom_column(col.id, title)
    assert registry.get_custom(col.id).title == "Ideas"


def test_rename_custom_column_keeps_id():
    registry = ColumnRegistry(clock=fixed_clock())
    col = registry.add_custom_column("Ideas")
    assert registry.rename_custom_column(col.id, "Someday")
    renamed = registry.get_custom(col.id)
    assert renamed.title == "Someday"
    assert renamed.id == col.id

    with pytest.raises(ValidationError):
        registry.rename_custom_column(col.id, " ")
    assert not registry.rename_custom_column("backlog", "Nope")


def test_delete_occupied_column_raises():
    """Test deleting a column with tasks raises OccupiedError and keeps it"""
    registry = ColumnRegistry(custom_columns=[Column("custom_x", "X", True)])
    tasks = [make_task("D", status="custom_x"), make_task("E")]

    with pytest.raises(OccupiedError) as exc:
        registry.delete_custom_column("custom_x", tasks)
    assert exc.value.column_id == "custom_x"
    assert exc.value.task_count == 1
    assert [c.id for c in registry.custom_columns()] == ["custom_x"]


def test_delete_empty_column():
    """Test an unoccupied custom column is removed"""
    registry = ColumnRegistry(custom_columns=[Column("custom_x", "X", True)])
    assert registry.delete_custom_column("custom_x", [make_task("E")])
    assert registry.custom_columns() == []
    assert not registry.has_column("custom_x")


def test_delete_non_custom_column_returns_false():
    registry = ColumnRegistry()
    assert not registry.delete_custom_column("done", [])
    assert not registry.delete_custom_column("custom_missing", [])
    assert registry.has_column("done")
