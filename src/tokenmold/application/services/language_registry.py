from __future__ import annotations

import logging
import random
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from tokenmold.domain.models.language import LanguageModel
from tokenmold.domain.models.settings import RANDOM_LANGUAGE, AttributeLanguageRule
from tokenmold.domain.repositories import LanguageSource
from tokenmold.domain.services.attribute_paths import get_property

KNOWN_LANGUAGES = (
    "afrikaans",
    "albanian",
    "armenian",
    "azeri",
    "croatian",
    "czech",
    "danish",
    "dutch",
    "english",
    "estonian",
    "finnish",
    "french",
    "georgian",
    "german",
    "greek",
    "hungarian",
    "icelandic",
    "indonesian",
    "irish",
    "italian",
    "latvian",
    "lithuanian",
    "norwegian",
    "polish",
    "portuguese",
    "romanian",
    "russian",
    "sicilian",
    "slovak",
    "slovenian",
    "spanish",
    "swedish",
    "turkish",
    "welsh",
    "zulu",
)


class UnknownLanguageError(KeyError):
    pass


class LanguageRegistry:
    """Language key -> LanguageModel, loaded lazily from a source on first use."""

    def __init__(self, source: LanguageSource | None = None, models: Mapping[str, LanguageModel] | None = None) -> None:
        self._source = source
        self._models: Dict[str, LanguageModel] = dict(models or {})
        self._logger = logging.getLogger(__name__)

    def keys(self) -> List[str]:
        keys = set(self._models)
        if self._source is not None:
            keys.update(self._source.available_keys())
        return sorted(keys)

    def __contains__(self, key: str) -> bool:
        return key in self._models or key in self.keys()

    def register(self, model: LanguageModel) -> None:
        self._models[model.key] = model

    def get(self, key: str) -> LanguageModel:
        model = self._models.get(key)
        if model is not None:
            return model
        if self._source is None or key not in self._source.available_keys():
            raise UnknownLanguageError(key)
        model = LanguageModel.from_mapping(key, self._source.load(key))
        self._models[key] = model
        self._logger.info("Loaded language model", extra={"language": key})
        return model

    def preload(self, keys: Iterable[str] | None = None) -> None:
        for key in keys if keys is not None else self.keys():
            self.get(key)


def match_language(rules: Sequence[AttributeLanguageRule], actor_data: Any) -> Optional[str]:
    """First rule whose lower-cased attribute value maps to a language wins."""
    for rule in rules:
        value = get_property(actor_data, rule.attribute)
        if value is None:
            continue
        language = rule.languages.get(str(value).lower())
        if language is not None:
            return language
    return None


def select_language(
    registry: LanguageRegistry,
    rules: Sequence[AttributeLanguageRule],
    default: str,
    actor_data: Any,
    rng: random.Random,
) -> str:
    keys = registry.keys()
    if not keys:
        raise UnknownLanguageError("no languages available")

    language = match_language(rules, actor_data) or default or RANDOM_LANGUAGE
    if language == RANDOM_LANGUAGE:
        return keys[rng.randrange(len(keys))]
    if language not in keys:
        fallback = keys[rng.randrange(len(keys))]
        logging.getLogger(__name__).warning(
            "Language not available, using a random one",
            extra={"language": language, "fallback": fallback},
        )
        return fallback
    return language
