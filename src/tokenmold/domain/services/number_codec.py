"""Conversions between counter values and the numeral text shown in names.

Each notation is a matched encode/decode pair. Decoders never raise: they
return ``None`` for text the notation cannot represent, which callers treat
as "no usable number".
"""

from __future__ import annotations

import re
from typing import Optional

from tokenmold.domain.models.numbering import NumberingType

_ALPHA_BASE = {"upper": 64, "lower": 96}
_ALPHA_SPAN = 26

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

_ROMAN_VALIDATOR = re.compile(r"^M*(?:D?C{0,3}|C[MD])(?:L?X{0,3}|X[CL])(?:V?I{0,3}|I[XV])$")
_ROMAN_TOKEN = re.compile(r"[MDLV]|C[MD]?|X[CL]?|I[XV]?")
_ROMAN_VALUES = {
    "M": 1000,
    "CM": 900,
    "D": 500,
    "CD": 400,
    "C": 100,
    "XC": 90,
    "L": 50,
    "XL": 40,
    "X": 10,
    "IX": 9,
    "V": 5,
    "IV": 4,
    "I": 1,
}
_ROMAN_DIGITS = (
    ("", "C", "CC", "CCC", "CD", "D", "DC", "DCC", "DCCC", "CM"),
    ("", "X", "XX", "XXX", "XL", "L", "LX", "LXX", "LXXX", "XC"),
    ("", "I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX"),
)
ROMAN_MAX = 3999


def encode_arabic(number: int) -> str:
    return str(int(number))


def decode_arabic(token: str) -> Optional[int]:
    match = _LEADING_INT_RE.match(str(token or ""))
    if match is None:
        return None
    return int(match.group(1))


def encode_alpha(number: int, letter_case: str = "upper") -> str:
    """Repeat the last letter once per full 26, then add the remainder letter.

    26 -> "Z", 27 -> "ZA", 53 -> "ZZA". Zero (or less) encodes to "".
    """
    base = _ALPHA_BASE[letter_case]
    remaining = int(number)
    if remaining <= 0:
        return ""
    letters = []
    while remaining > _ALPHA_SPAN:
        letters.append(chr(base + _ALPHA_SPAN))
        remaining -= _ALPHA_SPAN
    letters.append(chr(base + remaining))
    return "".join(letters)


def decode_alpha(token: str, letter_case: str = "upper") -> Optional[int]:
    base = _ALPHA_BASE[letter_case]
    text = str(token or "")
    if text == "0":
        return 0
    total = 0
    for character in text:
        offset = ord(character) - base
        if not 1 <= offset <= _ALPHA_SPAN:
            return None
        total += offset
    return total


def encode_roman(number: int) -> Optional[str]:
    value = int(number)
    if not 1 <= value <= ROMAN_MAX:
        return None
    thousands, rest = divmod(value, 1000)
    hundreds, rest = divmod(rest, 100)
    tens, ones = divmod(rest, 10)
    return "M" * thousands + _ROMAN_DIGITS[0][hundreds] + _ROMAN_DIGITS[1][tens] + _ROMAN_DIGITS[2][ones]


def decode_roman(token: str) -> Optional[int]:
    if not isinstance(token, str):
        return None
    text = token.upper()
    if not text or not _ROMAN_VALIDATOR.match(text):
        return None
    return sum(_ROMAN_VALUES[match.group(0)] for match in _ROMAN_TOKEN.finditer(text))


def encode_number(number: int, numbering: NumberingType) -> str:
    if numbering is NumberingType.ALPHA_UPPER:
        return encode_alpha(number, "upper")
    if numbering is NumberingType.ALPHA_LOWER:
        return encode_alpha(number, "lower")
    if numbering is NumberingType.ROMAN:
        return encode_roman(number) or ""
    return encode_arabic(number)


def decode_number(token: str, numbering: NumberingType) -> Optional[int]:
    if numbering is NumberingType.ALPHA_UPPER:
        return decode_alpha(token, "upper")
    if numbering is NumberingType.ALPHA_LOWER:
        return decode_alpha(token, "lower")
    if numbering is NumberingType.ROMAN:
        return decode_roman(token)
    return decode_arabic(token)
