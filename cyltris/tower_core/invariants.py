"""
Invariants
==========

Checks of the structural guarantees every reachable state upholds.
Meant for test harnesses and debug runs, not for control flow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from cyltris.tower_core.board import Board, CellContent, CellCoord
from cyltris.tower_core.pieces import get_world_blocks
from cyltris.tower_core.state import GameState, GameStatus


DOMAIN_INVARIANTS: Dict[str, str] = {
    "no_overlap": "Active piece cells never occupy filled board cells.",
    "within_bounds": "Active piece cells never leave the board vertically.",
    "lock_timer": "Lock timer values stay within [0, lock_delay_ms] and sum to the delay.",
    "clearing_layers": "Rows pending removal exist only while Clearing and are full.",
    "single_piece": "No active piece exists while Clearing or after GameOver.",
}


class InvariantError(AssertionError):
    """Raised by assert_game_state_invariants."""


@dataclass(frozen=True)
class InvariantViolation:
    key: str
    message: str
    cells: Tuple[CellCoord, ...] = ()


def _check_active_piece(state: GameState) -> List[InvariantViolation]:
    violations: List[InvariantViolation] = []
    if state.current_piece is None:
        return violations

    board = state.board
    blocks = get_world_blocks(state.current_piece, board.dimensions)

    out_of_bounds = tuple(c for c in blocks if c.y < 0 or c.y >= board.height)
    if out_of_bounds:
        violations.append(InvariantViolation(
            "within_bounds", DOMAIN_INVARIANTS["within_bounds"], out_of_bounds
        ))

    overlapping = tuple(
        c for c in blocks
        if 0 <= c.y < board.height and board.get_cell(c) != CellContent.EMPTY
    )
    if overlapping:
        violations.append(InvariantViolation(
            "no_overlap", DOMAIN_INVARIANTS["no_overlap"], overlapping
        ))

    if state.game_status in (GameStatus.CLEARING, GameStatus.GAME_OVER):
        violations.append(InvariantViolation(
            "single_piece",
            f"{DOMAIN_INVARIANTS['single_piece']} (status={state.game_status.value})",
            blocks
        ))
    return violations


def _check_lock_timer(state: GameState) -> List[InvariantViolation]:
    fs = state.fall_state
    delay = fs.lock_delay_ms
    in_range = 0 <= fs.lock_time_ms <= delay and 0 <= fs.lock_elapsed_ms <= delay
    if in_range and abs(fs.lock_time_ms + fs.lock_elapsed_ms - delay) < 1e-6:
        return []
    return [InvariantViolation(
        "lock_timer",
        f"{DOMAIN_INVARIANTS['lock_timer']} (remaining={fs.lock_time_ms}, "
        f"elapsed={fs.lock_elapsed_ms}, delay={delay})"
    )]


def _check_clearing_layers(state: GameState) -> List[InvariantViolation]:
    layers = state.clearing_layers
    if not layers:
        if state.game_status == GameStatus.CLEARING:
            return [InvariantViolation(
                "clearing_layers", f"{DOMAIN_INVARIANTS['clearing_layers']} (none pending)"
            )]
        return []

    problems = []
    if state.game_status != GameStatus.CLEARING:
        problems.append(f"status={state.game_status.value}")
    not_full = [
        y for y in layers
        if not 0 <= y < state.board.height or not state.board.is_layer_full(y)
    ]
    if not_full:
        problems.append(f"not full={not_full}")
    if not problems:
        return []
    return [InvariantViolation(
        "clearing_layers",
        f"{DOMAIN_INVARIANTS['clearing_layers']} ({', '.join(problems)})"
    )]


def validate_game_state_invariants(state: GameState) -> List[InvariantViolation]:
    """Every invariant violated by a state (empty when the state is valid)."""
    return (
        _check_active_piece(state)
        + _check_lock_timer(state)
        + _check_clearing_layers(state)
    )


def assert_game_state_invariants(state: GameState) -> None:
    """
    Raise if any invariant is violated.

    Raises:
        InvariantError: Message lists each violated invariant with its cells.
    """
    violations = validate_game_state_invariants(state)
    if violations:
        description = "; ".join(
            f"[{v.key}] {v.message} cells={[tuple(c) for c in v.cells]}"
            for v in violations
        )
        raise InvariantError(f"Domain invariants violated: {description}")


def find_unsupported_blocks(board: Board) -> Tuple[CellCoord, ...]:
    """
    Filled cells above row 0 with an empty cell directly below.

    Overhanging shapes (T, S, Z, J, L) can legitimately leave such cells;
    stacks built from flat-bottomed pieces never do.
    """
    cells = board.cells
    floating = (cells[1:] != CellContent.EMPTY) & (cells[:-1] == CellContent.EMPTY)
    return tuple(
        CellCoord(int(x), int(y) + 1)
        for y, x in zip(*floating.nonzero())
    )
