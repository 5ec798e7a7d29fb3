"""
Drag input adapter: decide when raw pointer/keyboard input becomes a drag.

A pointer press only becomes a drag after being held for `delay_ms` without
moving more than `tolerance_px`. Moving further before the delay is up means
the user is clicking through to the task or scrolling, so the gesture is
abandoned. Keyboard pick-up is immediate.
"""
import math
from enum import Enum
from typing import Optional, Tuple


class ActivationState(Enum):
    IDLE = "idle"
    PENDING = "pending"      # Pressed, waiting out the delay
    ACTIVE = "active"        # Recognized as a drag
    ABORTED = "aborted"      # Moved too far too soon; treat as click/scroll


class PointerActivation:
    """Delay + tolerance activation constraint for pointer input."""

    def __init__(self, delay_ms: int = 250, tolerance_px: float = 5.0):
        self.delay_ms = delay_ms
        self.tolerance_px = tolerance_px
        self.state = ActivationState.IDLE
        self._origin: Optional[Tuple[float, float]] = None
        self._pressed_at: float = 0.0

    @property
    def is_active(self) -> bool:
        return self.state is ActivationState.ACTIVE

    def press(self, x: float, y: float, t_ms: float) -> None:
        self.state = ActivationState.PENDING
        self._origin = (x, y)
        self._pressed_at = t_ms

    def poll(self, t_ms: float) -> bool:
        """Advance the clock. Returns True on the call that activates the drag."""
        if self.state is ActivationState.PENDING and t_ms - self._pressed_at >= self.delay_ms:
            self.state = ActivationState.ACTIVE
            return True
        return False

    def move(self, x: float, y: float, t_ms: float) -> bool:
        """Feed a pointer move. Returns True on the call that activates the drag."""
        if self.state is not ActivationState.PENDING:
            return False
        ox, oy = self._origin
        moved = math.hypot(x - ox, y - oy)
        if t_ms - self._pressed_at < self.delay_ms:
            if moved > self.tolerance_px:
                self.state = ActivationState.ABORTED
            return False
        return self.poll(t_ms)

    def release(self) -> bool:
        """Pointer up. Returns True if a drag was in progress (a drop)."""
        was_active = self.is_active
        self.state = ActivationState.IDLE
        self._origin = None
        return was_active


class KeyboardActivation:
    """Space/Enter picks up and drops, Escape cancels."""

    PICKUP_KEYS = ("space", "enter")
    CANCEL_KEYS = ("escape",)

    def __init__(self):
        self.active = False

    def key(self, name: str) -> Optional[str]:
        """
        Feed a key press.

        Returns "start", "drop", "cancel" or None if the key is not a drag key
        in the current state.
        """
        name = name.lower()
        if not self.active:
            if name in self.PICKUP_KEYS:
                self.active = True
                return "start"
            return None
        if name in self.PICKUP_KEYS:
            self.active = False
            return "drop"
        if name in self.CANCEL_KEYS:
            self.active = False
            return "cancel"
        return None
