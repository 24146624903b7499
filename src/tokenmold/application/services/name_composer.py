from __future__ import annotations

import logging
import random
from typing import Any, Sequence

from tokenmold.application.services.language_registry import LanguageRegistry, select_language
from tokenmold.application.services.sequence_counter import SequenceCounter
from tokenmold.domain.models.settings import AdjectivePosition, NameSettings, ReplaceMode
from tokenmold.domain.services.markov_name_model import MarkovNameModel


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


class NameComposer:
    """Builds a token name: base or generated name, then adjective, then number."""

    def __init__(
        self,
        counter: SequenceCounter,
        registry: LanguageRegistry,
        name_model: MarkovNameModel | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.counter = counter
        self.registry = registry
        self.rng = rng or random.Random()
        self.name_model = name_model or MarkovNameModel(self.rng)
        self._logger = logging.getLogger(__name__)

    def base_name(self, name: str, settings: NameSettings, modifier_active: bool = False) -> str:
        keep_base = settings.base_name_override and modifier_active
        if settings.replace.clears_base_name and not keep_base:
            return ""
        return name or ""

    def generate_name(self, settings: NameSettings, actor_data: Any) -> str:
        options = settings.options
        language_key = select_language(self.registry, options.attributes, options.default, actor_data, self.rng)
        return self.name_model.generate(self.registry.get(language_key), options.min, options.max)

    def pick_adjective(self, adjectives: Sequence[str]) -> str:
        if not adjectives:
            self._logger.warning("Adjective table is empty; skipping adjective")
            return ""
        return adjectives[self.rng.randrange(len(adjectives))]

    def compose(
        self,
        *,
        scene_id: str,
        actor_id: str,
        name: str,
        actor_data: Any,
        settings: NameSettings,
        adjectives: Sequence[str] = (),
        modifier_active: bool = False,
    ) -> str:
        composed = self.base_name(name, settings, modifier_active)

        if settings.replace is ReplaceMode.REPLACE:
            composed = _join(self.generate_name(settings, actor_data), composed)

        if settings.adjective.use:
            adjective = self.pick_adjective(adjectives)
            if settings.adjective.position is AdjectivePosition.BACK:
                composed = _join(composed, adjective)
            else:
                composed = _join(adjective, composed)

        # Numbered last so a failed generation leaves the counter untouched.
        number_suffix = ""
        if settings.number.use:
            number_suffix = self.counter.next_suffix(scene_id, actor_id, settings.number)

        self._logger.debug(
            "Composed token name",
            extra={"scene_id": scene_id, "actor_id": actor_id, "composed": composed + number_suffix},
        )
        return composed + number_suffix
