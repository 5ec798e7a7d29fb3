# Task board engine: column membership, ordering and drag transactions.
#
# Components:
#   schema.py     - Data model (Task, Column, Priority, board errors)
#   tasks.py      - Ordered task store (flat position is the only order)
#   reorder.py    - Array-move reconciliation committed on drop
#   columns.py    - Predefined + custom column registry
#   filters.py    - Pure board rendering with priority filters
#   drag.py       - Drag session reducer (Idle -> Dragging -> Idle)
#   activation.py - Pointer/keyboard drag activation
#   store.py      - SQLite key/value persistence
#   board.py      - Session facade with write-through and events
#   config.py     - YAML/env configuration
