from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Dict, Optional

from tokenmold.domain.models.token import SceneGrid

SIZE_TABLE: Dict[str, float] = {
    "tiny": 0.5,
    "sm": 0.8,
    "med": 1,
    "lg": 2,
    "huge": 3,
    "grg": 4,
}

CANONICAL_SQUARE_FEET = 5
MIN_VISUAL_SCALE = 0.2

_FEET_UNITS_RE = re.compile(r"(ft)|eet")


@dataclass(frozen=True)
class Footprint:
    width: int
    height: int
    scale: float

    def as_changes(self) -> Dict[str, float]:
        return {
            "width": self.width,
            "height": self.height,
            "texture.scaleX": self.scale,
            "texture.scaleY": self.scale,
        }


def grid_uses_feet(grid: SceneGrid) -> bool:
    return not grid.is_gridless and _FEET_UNITS_RE.search(str(grid.units or "")) is not None


def size_multiplier(size: str | None, grid: SceneGrid) -> Optional[float]:
    base = SIZE_TABLE.get(str(size or ""))
    if base is None:
        return None
    multiplier = float(base)
    if grid_uses_feet(grid) and grid.distance:
        multiplier *= CANONICAL_SQUARE_FEET / float(grid.distance)
    return multiplier


def compute_footprint(size: str | None, grid: SceneGrid) -> Optional[Footprint]:
    """Footprint for a creature size on a grid, or ``None`` for unknown sizes.

    Creatures smaller than one square keep a 1x1 footprint and shrink
    visually; larger ones take ``floor(multiplier)`` squares a side and the
    remainder is made up by scaling the texture.
    """
    multiplier = size_multiplier(size, grid)
    if multiplier is None:
        return None

    if multiplier < 1:
        scale = max(math.floor(multiplier * 10) / 10, MIN_VISUAL_SCALE)
        return Footprint(width=1, height=1, scale=scale)

    side = math.floor(multiplier)
    return Footprint(width=side, height=side, scale=max(multiplier / side, MIN_VISUAL_SCALE))
