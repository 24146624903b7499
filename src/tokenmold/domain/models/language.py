from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

TransitionTable = Dict[str, Dict[str, Dict[str, float]]]

TABLE_NAMES = ("beg", "mid", "end", "all")


class LanguageModelError(ValueError):
    pass


def _coerce_weight(value: Any, *, where: str) -> float:
    try:
        weight = float(value)
    except (TypeError, ValueError) as exc:
        raise LanguageModelError(f"Non-numeric weight at {where}: {value!r}") from exc
    if weight < 0:
        raise LanguageModelError(f"Negative weight at {where}: {weight}")
    return weight


def _coerce_transitions(raw: Any, *, name: str) -> TransitionTable:
    if not isinstance(raw, Mapping):
        raise LanguageModelError(f"Table '{name}' must be a mapping")
    table: TransitionTable = {}
    for first, seconds in raw.items():
        if not isinstance(seconds, Mapping):
            raise LanguageModelError(f"Table '{name}' entry '{first}' must be a mapping")
        row: Dict[str, Dict[str, float]] = {}
        for second, nexts in seconds.items():
            if not isinstance(nexts, Mapping):
                raise LanguageModelError(f"Table '{name}' entry '{first}{second}' must be a mapping")
            row[str(second)] = {
                str(letter): _coerce_weight(weight, where=f"{name}.{first}.{second}.{letter}")
                for letter, weight in nexts.items()
            }
        table[str(first)] = row
    return table


@dataclass(frozen=True)
class LanguageModel:
    """Letter-transition tables for one language.

    ``beg`` maps a starting trigram to its frequency. ``mid``, ``end`` and
    ``all`` map a letter pair (nested ``first -> second``) to the weighted
    set of letters that may follow it. ``upper`` and ``lower`` are parallel
    alphabets used to move a generated name into its natural case.
    """

    key: str
    beg: Dict[str, float]
    mid: TransitionTable = field(default_factory=dict)
    end: TransitionTable = field(default_factory=dict)
    all: TransitionTable = field(default_factory=dict)
    upper: str = ""
    lower: str = ""

    def transitions(self, table: TransitionTable, first: str, second: str) -> Dict[str, float]:
        """Return the non-empty candidate set for a pair, or an empty dict."""
        candidates = table.get(first, {}).get(second)
        if candidates:
            return candidates
        return {}

    def next_letters(self, first: str, second: str, *, final: bool) -> Dict[str, float]:
        table = self.end if final else self.mid
        return dict(self.transitions(table, first, second) or self.transitions(self.all, first, second))

    def to_lower_case(self, text: str) -> str:
        return change_case(text, self.upper, self.lower)

    @classmethod
    def from_mapping(cls, key: str, payload: Mapping[str, Any]) -> "LanguageModel":
        if not isinstance(payload, Mapping):
            raise LanguageModelError(f"Language '{key}' payload must be a mapping")
        missing = [name for name in TABLE_NAMES if name not in payload]
        if missing:
            raise LanguageModelError(f"Language '{key}' is missing tables: {', '.join(missing)}")

        raw_beg = payload["beg"]
        if not isinstance(raw_beg, Mapping):
            raise LanguageModelError(f"Language '{key}' table 'beg' must be a mapping")
        beg = {str(trigram): _coerce_weight(weight, where=f"beg.{trigram}") for trigram, weight in raw_beg.items()}
        if not any(weight > 0 for weight in beg.values()):
            raise LanguageModelError(f"Language '{key}' has no usable starting trigrams")

        upper = str(payload.get("upper", "") or "")
        lower = str(payload.get("lower", "") or "")
        if len(upper) != len(lower):
            raise LanguageModelError(f"Language '{key}' case tables differ in length")

        return cls(
            key=str(key),
            beg=beg,
            mid=_coerce_transitions(payload["mid"], name="mid"),
            end=_coerce_transitions(payload["end"], name="end"),
            all=_coerce_transitions(payload["all"], name="all"),
            upper=upper,
            lower=lower,
        )


def change_case(text: str, from_case: str, to_case: str) -> str:
    """Map every character found in ``from_case`` to the same index in ``to_case``."""
    result = []
    for character in text:
        index = from_case.find(character)
        result.append(character if index < 0 else to_case[index])
    return "".join(result)
