"""
Cyltris Package
===============

Deterministic engine for a falling-block puzzle played on a cylindrical
grid. Columns wrap around the tower; rows are bounded.

- Board storage and wraparound addressing
- Piece shapes, rotation and collision
- Gravity, lock delay and line clearing
- Scoring, leveling and the seeded piece queue

All tunable parameters are in game_config.yaml.
"""
