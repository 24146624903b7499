"""Resolve a settings document into the typed settings tree.

The document keeps the shape the tabletop host stores (``name.prefix`` is the
adjective block, ``config.<field>`` rules carry ``use`` plus one of
``value`` / ``min`` + ``max`` / ``attribute``). Rule shapes are decided here,
once, so the rest of the engine only sees tagged variants.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Mapping

from tokenmold.domain.models.numbering import NumberingConfig, NumberingType
from tokenmold.domain.models.settings import (
    RANDOM_LANGUAGE,
    AdjectivePosition,
    AdjectiveSettings,
    AttributeLanguageRule,
    AttributeReference,
    CoinFlip,
    ConfigFieldRule,
    ConfigOverwriteRule,
    ConfigSettings,
    FixedValue,
    HpSettings,
    MoldSettings,
    NameOptions,
    NameSettings,
    RangeMultiplier,
    ReplaceMode,
    SizeSettings,
)

DEFAULT_ADJECTIVE_TABLE = "english"
SUPPORTED_5E_SKILLS = ("dnd5e", "sw5e")

_logger = logging.getLogger(__name__)


class SettingsError(ValueError):
    pass


def default_settings_document() -> Dict[str, Any]:
    return {
        "unlinkedOnly": True,
        "name": {
            "use": True,
            "number": {
                "use": True,
                "prefix": " (",
                "suffix": ")",
                "type": "ar",
                "range": 1,
            },
            "prefix": {
                "use": True,
                "position": "front",
                "table": DEFAULT_ADJECTIVE_TABLE,
            },
            "replace": "",
            "options": {
                "default": RANDOM_LANGUAGE,
                "attributes": [
                    {
                        "attribute": "",
                        "languages": {"": RANDOM_LANGUAGE},
                    },
                ],
                "min": 3,
                "max": 9,
            },
            "baseNameOverride": False,
        },
        "hp": {
            "use": True,
            "toChat": True,
        },
        "size": {
            "use": True,
        },
        "config": {
            "use": False,
            "vision": {"use": False, "value": True},
            "displayBars": {"use": False, "value": 40},
            "bar1": {"use": False, "attribute": ""},
            "bar2": {"use": False, "attribute": ""},
            "displayName": {"use": False, "value": 40},
            "disposition": {"use": False, "value": 0},
            "rotation": {"use": False, "min": 0, "max": 360},
            "scale": {"use": False, "min": 0.8, "max": 1.2},
        },
    }


DND_DEFAULT_NAME_OPTIONS: Dict[str, Any] = {
    "default": RANDOM_LANGUAGE,
    "attributes": [
        {
            "attribute": "name",
            "languages": {
                "orc": "turkish",
                "goblin": "indonesian",
                "kobold": "norwegian",
            },
        },
        {
            "attribute": "system.details.type",
            "languages": {
                "humanoid": "irish",
                "aberration": "icelandic",
                "beast": "danish",
                "celestial": "albanian",
                "construct": "azeri",
                "dragon": "latvian",
                "elemental": "swedish",
                "fey": "romanian",
                "fiend": "sicilian",
                "giant": "german",
                "monstrosity": "slovenian",
                "ooze": "welsh",
                "plant": "zulu",
                "undead": "french",
            },
        },
    ],
}


def merge_documents(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_documents(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _enum(enum_type, raw: Any, *, label: str):
    try:
        return enum_type(raw)
    except ValueError as exc:
        raise SettingsError(f"Unknown {label}: {raw!r}") from exc


def parse_numbering(raw: Mapping[str, Any]) -> NumberingConfig:
    try:
        step_range = int(raw.get("range", 1) or 1)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"Numbering range must be an integer: {raw.get('range')!r}") from exc
    return NumberingConfig(
        use=bool(raw.get("use", True)),
        prefix=str(raw.get("prefix", "")),
        suffix=str(raw.get("suffix", "")),
        type=_enum(NumberingType, raw.get("type", "ar"), label="numbering type"),
        range=max(step_range, 1),
    )


def parse_name_options(raw: Mapping[str, Any]) -> NameOptions:
    rules = tuple(
        AttributeLanguageRule(
            attribute=str(row.get("attribute", "")),
            languages={str(value).lower(): str(language) for value, language in (row.get("languages") or {}).items()},
        )
        for row in raw.get("attributes") or ()
    )
    min_length = int(raw.get("min") or 6)
    max_length = int(raw.get("max") or 9)
    if min_length < 1 or max_length < min_length:
        raise SettingsError(f"Invalid name length bounds: {min_length}..{max_length}")
    return NameOptions(
        default=str(raw.get("default") or RANDOM_LANGUAGE),
        attributes=rules,
        min=min_length,
        max=max_length,
    )


def parse_config_rule(field_name: str, raw: Mapping[str, Any]) -> ConfigFieldRule:
    has_value = "value" in raw
    has_range = "min" in raw or "max" in raw
    has_attribute = "attribute" in raw

    rule: ConfigOverwriteRule
    if has_value:
        rule = FixedValue(raw["value"])
    elif has_range:
        if "min" not in raw or "max" not in raw:
            raise SettingsError(f"Config rule '{field_name}' needs both min and max")
        rule = RangeMultiplier(min=float(raw["min"]), max=float(raw["max"]))
    elif has_attribute:
        rule = AttributeReference(str(raw["attribute"]))
    else:
        rule = CoinFlip()
    return ConfigFieldRule(use=raw.get("use") is True, rule=rule)


def parse_config(raw: Mapping[str, Any]) -> ConfigSettings:
    fields = {
        key: parse_config_rule(key, value)
        for key, value in raw.items()
        if key != "use" and isinstance(value, Mapping)
    }
    return ConfigSettings(use=bool(raw.get("use", False)), fields=fields)


def _sanitize_replace(replace: ReplaceMode, numbering: NumberingConfig, adjective: AdjectiveSettings) -> ReplaceMode:
    if replace is ReplaceMode.REMOVE and not numbering.use and not adjective.use:
        _logger.warning("Removing the name without numbering or adjective leaves tokens unnamed; keeping names")
        return ReplaceMode.NOTHING
    return replace


def parse_settings(document: Mapping[str, Any] | None = None, *, system_id: str | None = None) -> MoldSettings:
    raw_document = dict(document or {})
    defaults = default_settings_document()
    raw_options = (raw_document.get("name") or {}).get("options")
    if system_id in SUPPORTED_5E_SKILLS and raw_options is None:
        defaults["name"]["options"] = merge_documents(defaults["name"]["options"], DND_DEFAULT_NAME_OPTIONS)
    elif raw_options is not None and raw_options.get("attributes") == []:
        raw_document = merge_documents(raw_document, {"name": {"options": {"attributes": defaults["name"]["options"]["attributes"]}}})

    merged = merge_documents(defaults, raw_document)
    raw_name = merged["name"]
    raw_adjective = merge_documents(raw_name["prefix"], raw_name.get("adjective") or {})

    numbering = parse_numbering(raw_name["number"])
    adjective = AdjectiveSettings(
        use=bool(raw_adjective.get("use", True)),
        position=_enum(AdjectivePosition, raw_adjective.get("position", "front"), label="adjective position"),
        table=str(raw_adjective.get("table") or DEFAULT_ADJECTIVE_TABLE),
    )
    replace = _sanitize_replace(
        _enum(ReplaceMode, raw_name.get("replace") or "", label="replace mode"),
        numbering,
        adjective,
    )

    return MoldSettings(
        unlinked_only=bool(merged.get("unlinkedOnly", True)),
        name=NameSettings(
            use=bool(raw_name.get("use", True)),
            number=numbering,
            replace=replace,
            adjective=adjective,
            options=parse_name_options(raw_name["options"]),
            base_name_override=bool(raw_name.get("baseNameOverride", False)),
        ),
        hp=HpSettings(use=bool(merged["hp"].get("use", True)), to_chat=bool(merged["hp"].get("toChat", True))),
        size=SizeSettings(use=bool(merged["size"].get("use", True))),
        config=parse_config(merged["config"]),
    )
