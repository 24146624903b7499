from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple, Union

from tokenmold.domain.models.numbering import NumberingConfig

RANDOM_LANGUAGE = "random"


class ReplaceMode(str, Enum):
    NOTHING = "nothing"
    KEEP = ""
    REMOVE = "remove"
    REPLACE = "replace"

    @property
    def clears_base_name(self) -> bool:
        return self in (ReplaceMode.REMOVE, ReplaceMode.REPLACE)


class AdjectivePosition(str, Enum):
    FRONT = "front"
    BACK = "back"


@dataclass(frozen=True)
class AttributeLanguageRule:
    attribute: str
    languages: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NameOptions:
    default: str = RANDOM_LANGUAGE
    attributes: Tuple[AttributeLanguageRule, ...] = ()
    min: int = 3
    max: int = 9


@dataclass(frozen=True)
class AdjectiveSettings:
    use: bool = True
    position: AdjectivePosition = AdjectivePosition.FRONT
    table: str = "english"


@dataclass(frozen=True)
class NameSettings:
    use: bool = True
    number: NumberingConfig = field(default_factory=NumberingConfig)
    replace: ReplaceMode = ReplaceMode.KEEP
    adjective: AdjectiveSettings = field(default_factory=AdjectiveSettings)
    options: NameOptions = field(default_factory=NameOptions)
    base_name_override: bool = False


@dataclass(frozen=True)
class HpSettings:
    use: bool = True
    to_chat: bool = True


@dataclass(frozen=True)
class SizeSettings:
    use: bool = True


@dataclass(frozen=True)
class FixedValue:
    value: Any


@dataclass(frozen=True)
class RangeMultiplier:
    min: float
    max: float


@dataclass(frozen=True)
class AttributeReference:
    attribute: str


@dataclass(frozen=True)
class CoinFlip:
    pass


ConfigOverwriteRule = Union[FixedValue, RangeMultiplier, AttributeReference, CoinFlip]


@dataclass(frozen=True)
class ConfigFieldRule:
    use: bool
    rule: ConfigOverwriteRule


@dataclass(frozen=True)
class ConfigSettings:
    use: bool = False
    fields: Dict[str, ConfigFieldRule] = field(default_factory=dict)


@dataclass(frozen=True)
class MoldSettings:
    unlinked_only: bool = True
    name: NameSettings = field(default_factory=NameSettings)
    hp: HpSettings = field(default_factory=HpSettings)
    size: SizeSettings = field(default_factory=SizeSettings)
    config: ConfigSettings = field(default_factory=ConfigSettings)
