"""Shared fixtures for task board tests."""

import sys
import tempfile
from pathlib import Path

import pytest

# Ensure the repo root is importable without an install
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskboard.schema import Priority, Task
from taskboard.store import BoardStore


def make_task(task_id: str, status: str = "todo", priority: Priority = Priority.MEDIUM) -> Task:
    return Task(id=task_id, title=f"Task {task_id}", status=status, priority=priority)


@pytest.fixture
def db_path():
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as tmp:
        path = tmp.name
    yield path
    for suffix in ("", "-wal", "-shm"):
        Path(path + suffix).unlink(missing_ok=True)


@pytest.fixture
def store(db_path):
    return BoardStore(db_path)
