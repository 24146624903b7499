"""Train a trigram language dictionary from a word list.

Usage:
    python -m tokenmold.infrastructure.data_tools.build_language_model names.txt --out welsh.json
"""

from __future__ import annotations

import argparse
import json
from collections import defaultdict
from pathlib import Path
from typing import Any, DefaultDict, Dict, Iterable

MIN_WORD_LENGTH = 3


def _nested_counter() -> DefaultDict[str, DefaultDict[str, DefaultDict[str, int]]]:
    return defaultdict(lambda: defaultdict(lambda: defaultdict(int)))


def _plain(table) -> Dict[str, Any]:
    return {first: {second: dict(nexts) for second, nexts in row.items()} for first, row in table.items()}


def normalize_words(words: Iterable[str]) -> list[str]:
    normalized = []
    for raw in words:
        word = "".join(character for character in str(raw).strip().upper() if character.isalpha())
        if len(word) >= MIN_WORD_LENGTH:
            normalized.append(word)
    return normalized


def case_tables(words: Iterable[str]) -> tuple[str, str]:
    letters = sorted({character for word in words for character in word})
    upper = []
    lower = []
    for letter in letters:
        lowered = letter.lower()
        if len(lowered) == 1 and lowered != letter:
            upper.append(letter)
            lower.append(lowered)
    return "".join(upper), "".join(lower)


def train_language_model(words: Iterable[str]) -> Dict[str, Any]:
    """Count starting trigrams and pair -> next-letter transitions.

    The letter at a word's last index feeds ``end``, earlier ones feed
    ``mid``; ``all`` counts both.
    """
    normalized = normalize_words(words)
    beg: DefaultDict[str, int] = defaultdict(int)
    mid = _nested_counter()
    end = _nested_counter()
    every = _nested_counter()

    for word in normalized:
        beg[word[:3]] += 1
        for index in range(3, len(word)):
            first, second, letter = word[index - 2], word[index - 1], word[index]
            table = end if index == len(word) - 1 else mid
            table[first][second][letter] += 1
            every[first][second][letter] += 1

    upper, lower = case_tables(normalized)
    return {
        "beg": dict(beg),
        "mid": _plain(mid),
        "end": _plain(end),
        "all": _plain(every),
        "upper": upper,
        "lower": lower,
    }


def read_word_list(path: Path) -> list[str]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip() and not line.lstrip().startswith("#")]


def build_language_file(wordlist: Path, out: Path) -> Dict[str, Any]:
    payload = train_language_model(read_word_list(wordlist))
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(payload, ensure_ascii=False, sort_keys=True), encoding="utf-8")
    return payload


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Build a name-generation language dictionary from a word list.")
    parser.add_argument("wordlist", type=Path)
    parser.add_argument("--out", type=Path, required=True)
    args = parser.parse_args(argv)

    payload = build_language_file(args.wordlist, args.out)
    print(f"Wrote {len(payload['beg'])} starting trigrams to {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
