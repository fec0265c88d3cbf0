"""
Spawn position validation.

A stored position may no longer be legal: the terrain changed, or the player
logged out inside an instance that is gone. The character loader asks a
`SpawnValidator` and falls back to the nearest start position.
"""

import math
from typing import Iterable, Optional, Protocol, Sequence

from mmo_persistence.core.characters import Position
from mmo_persistence.core.config import settings


class SpawnValidator(Protocol):
    def is_valid_spawn(self, position: Position) -> bool: ...

    def nearest_start_position(self, position: Position) -> Position: ...


class BoundedWorld:
    """Accepts any position inside an axis-aligned box."""

    def __init__(
        self,
        bounds_min: Optional[Sequence[float]] = None,
        bounds_max: Optional[Sequence[float]] = None,
        start_positions: Optional[Iterable[Sequence[float]]] = None,
    ):
        self._min = Position.from_tuple(bounds_min or settings.WORLD_BOUNDS_MIN)
        self._max = Position.from_tuple(bounds_max or settings.WORLD_BOUNDS_MAX)
        if start_positions is None:
            start_positions = settings.START_POSITIONS
        self._starts = [Position.from_tuple(p) for p in start_positions]
        if not self._starts:
            raise ValueError("BoundedWorld needs at least one start position")

    def is_valid_spawn(self, position: Position) -> bool:
        values = (position.x, position.y, position.z)
        if not all(math.isfinite(v) for v in values):
            return False
        return (
            self._min.x <= position.x <= self._max.x
            and self._min.y <= position.y <= self._max.y
            and self._min.z <= position.z <= self._max.z
        )

    def nearest_start_position(self, position: Position) -> Position:
        origin = (position.x, position.y, position.z)
        if not all(math.isfinite(v) for v in origin):
            return self._starts[0]
        return min(self._starts, key=lambda s: math.dist((s.x, s.y, s.z), origin))
