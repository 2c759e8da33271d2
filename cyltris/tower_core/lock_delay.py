"""
Lock Delay
==========

Grace period between a piece landing and committing to the board.

Two states per active piece:
- Airborne: not supported, no countdown.
- Landed: cannot move down; lock_time_ms counts down from lock_delay_ms.

While landed the piece locks when the countdown reaches zero or when the
player has made moves_max successful moves, whichever comes first.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class FallState:
    """
    Lock-delay state of the active piece.

    lock_time_ms (remaining) and lock_elapsed_ms always sum to lock_delay_ms.
    """
    landed: bool
    lock_time_ms: float
    lock_delay_ms: float
    lock_elapsed_ms: float
    lock_moves_count: int

    @property
    def lock_progress(self) -> float:
        """Fraction of the delay used, 0.0 while airborne."""
        if not self.landed:
            return 0.0
        if self.lock_delay_ms <= 0:
            return 1.0
        return self.lock_elapsed_ms / self.lock_delay_ms


def clamp_to_lock_bounds(value: float, delay_ms: float) -> float:
    """Clamp a timer value into [0, delay_ms]."""
    if delay_ms <= 0 or value < 0:
        return 0.0
    return min(float(value), float(delay_ms))


def airborne_fall_state(lock_delay_ms: float) -> FallState:
    """Initial (non-counting) condition."""
    delay = max(0.0, float(lock_delay_ms))
    return FallState(
        landed=False,
        lock_time_ms=delay,
        lock_delay_ms=delay,
        lock_elapsed_ms=0.0,
        lock_moves_count=0
    )


def land(fall_state: FallState) -> FallState:
    """Enter Landed with a full countdown and no moves counted."""
    return replace(
        airborne_fall_state(fall_state.lock_delay_ms),
        landed=True
    )


def advance_lock_timer(fall_state: FallState, delta_ms: float) -> FallState:
    """Run the countdown while landed. Airborne states are returned unchanged."""
    if not fall_state.landed:
        return fall_state
    delay = fall_state.lock_delay_ms
    elapsed = clamp_to_lock_bounds(fall_state.lock_elapsed_ms + delta_ms, delay)
    return replace(
        fall_state,
        lock_elapsed_ms=elapsed,
        lock_time_ms=clamp_to_lock_bounds(delay - elapsed, delay)
    )


def update_grounded(fall_state: FallState, grounded: bool, delta_ms: float) -> FallState:
    """
    Per-tick controller step.

    A piece found grounded while airborne lands (the countdown starts on the
    following tick). A landed piece that is grounded keeps counting down.
    A landed piece that has been freed returns to airborne.
    """
    if grounded:
        if not fall_state.landed:
            return land(fall_state)
        return advance_lock_timer(fall_state, delta_ms)
    if fall_state.landed:
        return airborne_fall_state(fall_state.lock_delay_ms)
    return fall_state


def register_lock_move(fall_state: FallState) -> FallState:
    """Count one successful player move or rotation made while landed."""
    if not fall_state.landed:
        return fall_state
    return replace(fall_state, lock_moves_count=fall_state.lock_moves_count + 1)


def is_lock_due(fall_state: FallState, moves_max: int) -> bool:
    """True if a landed piece must lock now."""
    if not fall_state.landed:
        return False
    return fall_state.lock_time_ms <= 0 or fall_state.lock_moves_count >= moves_max
