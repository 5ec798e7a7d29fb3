"""
Reconciliation: commit a drop as a move in the flat task order.

The move is status-agnostic. By the time a drop is committed the hovering
logic has already synced the moving task's status, so this only ever
rearranges positions.
"""
from typing import List, Sequence, TypeVar

T = TypeVar("T")


def array_move(items: Sequence[T], old_index: int, new_index: int) -> List[T]:
    """
    Remove the item at old_index and insert it at new_index.

    Everything between the two indices shifts by one place; everything
    outside them keeps its position. Equal or out-of-range indices return an
    unchanged copy.
    """
    result = list(items)
    size = len(result)
    if old_index == new_index:
        return result
    if not (0 <= old_index < size and 0 <= new_index < size):
        return result
    item = result.pop(old_index)
    result.insert(new_index, item)
    return result
