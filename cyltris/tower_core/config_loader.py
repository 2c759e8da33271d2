"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


PIECE_MODES = ("bag", "uniform")


@dataclass(frozen=True)
class BoardConfig:
    """Cylinder geometry."""
    width: int    # Circumference in columns (wraps)
    height: int   # Vertical levels (bounded)


@dataclass(frozen=True)
class FallSpeedConfig:
    """Gravity curve: interval = max(min, floor(base * decay^(level-1)))."""
    base_interval_ms: float
    decay_per_level: float
    min_interval_ms: float


@dataclass(frozen=True)
class LockDelayConfig:
    """Grace period granted to a landed piece."""
    delay_ms: float
    moves_max: int


@dataclass(frozen=True)
class ScoringConfig:
    """Line clear awards."""
    single: int
    double: int
    triple: int
    tetris: int
    combo_bonus: int


@dataclass(frozen=True)
class LevelingConfig:
    """Level progression."""
    initial_level: int
    lines_per_level: int


@dataclass(frozen=True)
class RngConfig:
    """Piece queue parameters."""
    seed: Optional[int]
    mode: str
    queue_size: int


@dataclass(frozen=True)
class SpawnConfig:
    """Spawn placement."""
    column_hint: Optional[int]


@dataclass(frozen=True)
class ClearingConfig:
    """Line clear phase handling."""
    auto_complete_ms: Optional[float]


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable so a config can be shared by every state
    derived from it.
    """
    board: BoardConfig
    fall_speed: FallSpeedConfig
    lock_delay: LockDelayConfig
    scoring: ScoringConfig
    leveling: LevelingConfig
    rng: RngConfig
    spawn: SpawnConfig
    clearing: ClearingConfig


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge overrides into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if config.board.width <= 0 or config.board.height <= 0:
        raise ValueError(
            f"Board dimensions must be positive, got "
            f"{config.board.width}x{config.board.height}"
        )

    fall = config.fall_speed
    if fall.min_interval_ms <= 0:
        raise ValueError(f"min_interval_ms must be positive, got {fall.min_interval_ms}")
    if fall.base_interval_ms < fall.min_interval_ms:
        raise ValueError(
            f"base_interval_ms ({fall.base_interval_ms}) must not be below "
            f"min_interval_ms ({fall.min_interval_ms})"
        )
    if not 0 < fall.decay_per_level <= 1:
        raise ValueError(f"decay_per_level must be in (0, 1], got {fall.decay_per_level}")

    if config.lock_delay.delay_ms < 0:
        raise ValueError(f"lock_delay.delay_ms must be >= 0, got {config.lock_delay.delay_ms}")
    if config.lock_delay.moves_max < 1:
        raise ValueError(f"lock_delay.moves_max must be >= 1, got {config.lock_delay.moves_max}")

    if config.leveling.lines_per_level < 1:
        raise ValueError(
            f"lines_per_level must be >= 1, got {config.leveling.lines_per_level}"
        )

    if config.rng.mode not in PIECE_MODES:
        raise ValueError(f"rng.mode must be one of {PIECE_MODES}, got '{config.rng.mode}'")
    if config.rng.queue_size < 1:
        raise ValueError(f"rng.queue_size must be >= 1, got {config.rng.queue_size}")


def config_from_dict(raw: Dict[str, Any]) -> GameConfig:
    """
    Parse and validate a raw configuration mapping.

    Args:
        raw: Mapping with the same layout as game_config.yaml.

    Returns:
        Validated GameConfig instance.

    Raises:
        ValueError: If config validation fails.
    """
    board_data = raw["board"]
    board = BoardConfig(
        width=int(board_data["width"]),
        height=int(board_data["height"])
    )

    fall_data = raw["fall_speed"]
    fall_speed = FallSpeedConfig(
        base_interval_ms=float(fall_data["base_interval_ms"]),
        decay_per_level=float(fall_data.get("decay_per_level", 0.92)),
        min_interval_ms=float(fall_data.get("min_interval_ms", 50))
    )

    lock_data = raw["lock_delay"]
    lock_delay = LockDelayConfig(
        delay_ms=float(lock_data["delay_ms"]),
        moves_max=int(lock_data.get("moves_max", 15))
    )

    scoring_data = raw["scoring"]
    scoring = ScoringConfig(
        single=int(scoring_data["single"]),
        double=int(scoring_data["double"]),
        triple=int(scoring_data["triple"]),
        tetris=int(scoring_data["tetris"]),
        combo_bonus=int(scoring_data.get("combo_bonus", 0))
    )

    leveling_data = raw.get("leveling", {})
    leveling = LevelingConfig(
        initial_level=int(leveling_data.get("initial_level", 1)),
        lines_per_level=int(leveling_data.get("lines_per_level", 10))
    )

    rng_data = raw.get("rng", {})
    rng = RngConfig(
        seed=_optional_int(rng_data.get("seed")),
        mode=str(rng_data.get("mode", "bag")),
        queue_size=int(rng_data.get("queue_size", 5))
    )

    spawn_data = raw.get("spawn", {})
    spawn = SpawnConfig(
        column_hint=_optional_int(spawn_data.get("column_hint"))
    )

    clearing_data = raw.get("clearing", {})
    clearing = ClearingConfig(
        auto_complete_ms=_optional_float(clearing_data.get("auto_complete_ms"))
    )

    config = GameConfig(
        board=board,
        fall_speed=fall_speed,
        lock_delay=lock_delay,
        scoring=scoring,
        leveling=leveling,
        rng=rng,
        spawn=spawn,
        clearing=clearing
    )

    _validate_config(config)
    return config


def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None
) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.
        overrides: Nested mapping merged over the file contents before parsing,
            e.g. {"board": {"width": 6, "height": 10}, "rng": {"seed": 1}}.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f) or {}

    if overrides:
        raw = _deep_merge(raw, overrides)

    return config_from_dict(raw)


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
