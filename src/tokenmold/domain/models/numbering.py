from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class NumberingType(str, Enum):
    ARABIC = "ar"
    ALPHA_UPPER = "alu"
    ALPHA_LOWER = "all"
    ROMAN = "ro"


@dataclass(frozen=True)
class NumberingConfig:
    use: bool = True
    prefix: str = " ("
    suffix: str = ")"
    type: NumberingType = NumberingType.ARABIC
    range: int = 1

    def wrap(self, token: str) -> str:
        return f"{self.prefix}{token}{self.suffix}"
