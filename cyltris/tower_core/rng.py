"""
RNG - Seeded Piece Queue
========================

Provides a deterministic piece sequence through either a shuffle-bag
("bag": every type once per cycle) or independent uniform draws.

The queue is an immutable value. Drawing returns the piece together with
a new queue, so game states that share an older queue never observe the
draw and replaying from any state gives the same sequence.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from cyltris.tower_core.config_loader import GameConfig, PIECE_MODES, get_config
from cyltris.tower_core.pieces import ALL_PIECE_TYPES, PieceType


def _draw(
    rng: random.Random,
    mode: str,
    bag: List[PieceType]
) -> PieceType:
    """Draw one piece, refilling and reshuffling the bag when exhausted."""
    if mode == "uniform":
        return ALL_PIECE_TYPES[rng.randrange(len(ALL_PIECE_TYPES))]

    if not bag:
        refill = list(ALL_PIECE_TYPES)
        rng.shuffle(refill)
        bag.extend(refill)
    return bag.pop(0)


@dataclass(frozen=True)
class PieceQueue:
    """
    Immutable piece queue with a preview window.

    Attributes:
        mode: "bag" or "uniform".
        upcoming: Preview window; upcoming[0] is the next piece to spawn.
        bag: Pieces left in the current bag, in draw order (bag mode only).
        rng_state: Snapshot of the owned generator (random.Random.getstate()).
    """
    mode: str
    upcoming: Tuple[PieceType, ...]
    bag: Tuple[PieceType, ...]
    rng_state: tuple

    @classmethod
    def create(
        cls,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        mode: Optional[str] = None,
        queue_size: Optional[int] = None
    ) -> "PieceQueue":
        """
        Build a fresh queue.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed. Falls back to config.rng.seed; random if both None.
            mode: "bag" or "uniform". Falls back to config.rng.mode.
            queue_size: Preview length. Falls back to config.rng.queue_size.

        Raises:
            ValueError: If the mode is unknown.
        """
        if config is None:
            config = get_config()

        if seed is None:
            seed = config.rng.seed
        if mode is None:
            mode = config.rng.mode
        if mode not in PIECE_MODES:
            raise ValueError(f"Unknown piece mode '{mode}', expected one of {PIECE_MODES}")
        size = max(1, queue_size if queue_size is not None else config.rng.queue_size)

        rng = random.Random(seed)
        bag: List[PieceType] = []
        upcoming = [_draw(rng, mode, bag) for _ in range(size)]

        return cls(
            mode=mode,
            upcoming=tuple(upcoming),
            bag=tuple(bag),
            rng_state=rng.getstate()
        )

    def _restore(self) -> Tuple[random.Random, List[PieceType]]:
        rng = random.Random()
        rng.setstate(self.rng_state)
        return rng, list(self.bag)

    def peek_next_piece(self) -> PieceType:
        """The piece the next spawn will use (non-consuming)."""
        return self.upcoming[0]

    def get_next_piece(self) -> Tuple[PieceType, "PieceQueue"]:
        """
        Consume the next piece.

        Returns:
            (piece, advanced_queue). This queue is left unchanged.
        """
        rng, bag = self._restore()
        refill = _draw(rng, self.mode, bag)
        advanced = PieceQueue(
            mode=self.mode,
            upcoming=self.upcoming[1:] + (refill,),
            bag=tuple(bag),
            rng_state=rng.getstate()
        )
        return self.upcoming[0], advanced

    def peek(self, count: int = 2) -> List[PieceType]:
        """
        Peek at upcoming pieces without consuming, beyond the preview if needed.

        Args:
            count: Number of upcoming pieces to peek.
        """
        result = list(self.upcoming[:count])
        if len(result) < count:
            rng, bag = self._restore()
            while len(result) < count:
                result.append(_draw(rng, self.mode, bag))
        return result

    @property
    def queue_size(self) -> int:
        return len(self.upcoming)

    def __repr__(self) -> str:
        preview = "".join(piece.value for piece in self.upcoming)
        return f"PieceQueue(mode={self.mode}, upcoming={preview})"
