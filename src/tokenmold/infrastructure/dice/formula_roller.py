from __future__ import annotations

import random
import re
from typing import List, Tuple

from tokenmold.domain.repositories import DiceRoller, DieTerm, RollResult

_TERM_RE = re.compile(r"([+-]?)(?:(\d*)[dD](\d+)|(\d+))")


class DiceFormulaError(ValueError):
    pass


def parse_formula(formula: str) -> List[Tuple[int, int, int, int]]:
    """Split ``2d8+4-1d4`` into ``(sign, count, faces, constant)`` terms."""
    compact = str(formula or "").replace(" ", "")
    if not compact:
        raise DiceFormulaError("empty dice formula")

    terms = []
    position = 0
    for match in _TERM_RE.finditer(compact):
        if match.start() != position or (position > 0 and not match.group(1)):
            raise DiceFormulaError(f"Cannot parse dice formula: {formula!r}")
        sign = -1 if match.group(1) == "-" else 1
        if match.group(3) is not None:
            count = int(match.group(2) or 1)
            faces = int(match.group(3))
            if faces < 1:
                raise DiceFormulaError(f"Dice need at least one face: {formula!r}")
            terms.append((sign, count, faces, 0))
        else:
            terms.append((sign, 0, 0, int(match.group(4))))
        position = match.end()
    if position != len(compact):
        raise DiceFormulaError(f"Cannot parse dice formula: {formula!r}")
    return terms


class FormulaDiceRoller(DiceRoller):
    """Sums of ``NdM`` dice and integer constants."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def constant(self, formula: str) -> int:
        return sum(sign * constant for sign, count, faces, constant in parse_formula(formula) if not faces)

    def roll(self, formula: str) -> RollResult:
        total = 0
        dice: List[DieTerm] = []
        for sign, count, faces, constant in parse_formula(formula):
            if not faces:
                total += sign * constant
                continue
            results = tuple(self.rng.randint(1, faces) for _ in range(count))
            dice.append(DieTerm(number=count, faces=faces, results=results))
            total += sign * sum(results)
        return RollResult(formula=formula, total=total, dice=dice)
