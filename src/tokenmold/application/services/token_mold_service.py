from __future__ import annotations

import logging
import random
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from tokenmold.application.mappers.settings_mapper import DEFAULT_ADJECTIVE_TABLE
from tokenmold.application.services.config_overwrite import apply_config_overwrites
from tokenmold.application.services.hp_randomizer import SUPPORTED_CREATURE_SIZE, HpRandomizer
from tokenmold.application.services.name_composer import NameComposer
from tokenmold.application.services.sequence_counter import SequenceCounter
from tokenmold.domain.models.settings import MoldSettings
from tokenmold.domain.models.token import ActorSnapshot, SceneGrid, TokenPatch, TokenPlacement
from tokenmold.domain.repositories import AdjectiveSource, SceneTokenRepository
from tokenmold.domain.services.attribute_paths import get_property
from tokenmold.domain.services.size_scaler import compute_footprint

ACTOR_SIZE_PATH = "system.traits.size"


class TokenMoldService:
    """Per-placement pass: size, name, config overwrites, and hp after creation.

    The host calls ``prepare_token`` before a token is stored and
    ``on_token_created`` once it exists. Calls for the same scene must not
    overlap; the sequence counters are not guarded against concurrent use.
    """

    def __init__(
        self,
        settings: MoldSettings,
        composer: NameComposer,
        hp_randomizer: HpRandomizer,
        adjective_source: AdjectiveSource | None = None,
        token_repo: SceneTokenRepository | None = None,
        system_id: str = "dnd5e",
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings
        self.composer = composer
        self.hp_randomizer = hp_randomizer
        self.adjective_source = adjective_source
        self.token_repo = token_repo
        self.system_id = system_id
        self.rng = rng or random.Random()
        self._adjectives: Dict[str, List[str]] = {}
        self._logger = logging.getLogger(__name__)

    @property
    def counter(self) -> SequenceCounter:
        return self.composer.counter

    def update_settings(self, settings: MoldSettings) -> None:
        self.settings = settings
        self._adjectives.clear()

    def adjectives(self) -> List[str]:
        table = self.settings.name.adjective.table
        if table in self._adjectives:
            return self._adjectives[table]
        if self.adjective_source is None:
            return []
        resolved = table
        if table not in self.adjective_source.list_tables():
            self._logger.warning(
                "Adjective table not found, using default",
                extra={"table": table, "default_table": DEFAULT_ADJECTIVE_TABLE},
            )
            resolved = DEFAULT_ADJECTIVE_TABLE
        words = self.adjective_source.words(resolved)
        self._adjectives[table] = words
        return words

    def _skips(self, placement: TokenPlacement, actor: Optional[ActorSnapshot]) -> bool:
        return actor is None or (placement.actor_link and self.settings.unlinked_only)

    def prepare_token(
        self,
        scene_id: str,
        grid: SceneGrid,
        placement: TokenPlacement,
        actor: Optional[ActorSnapshot],
        *,
        modifier_active: bool = False,
    ) -> TokenPatch:
        patch = TokenPatch(token_id=placement.id)
        if self._skips(placement, actor):
            return patch

        if self.settings.size.use and self.system_id in SUPPORTED_CREATURE_SIZE:
            footprint = compute_footprint(get_property(actor.data, ACTOR_SIZE_PATH), grid)
            if footprint is not None:
                patch.changes.update(footprint.as_changes())

        self.counter.state.ensure_scene(scene_id)

        if self.settings.name.use:
            patch.set(
                "name",
                self.composer.compose(
                    scene_id=scene_id,
                    actor_id=placement.actor_id,
                    name=placement.name,
                    actor_data=actor.data,
                    settings=self.settings.name,
                    adjectives=self.adjectives() if self.settings.name.adjective.use else (),
                    modifier_active=modifier_active,
                ),
            )

        if self.settings.config.use:
            apply_config_overwrites(self.settings.config, patch, placement.fields, actor.data, self.rng)

        self._logger.debug("Prepared token", extra={"scene_id": scene_id, "token_id": placement.id, "changes": patch.changes})
        return patch

    def _hp_value(self, actor: ActorSnapshot, token_name: str):
        if not (self.settings.hp.use and self.hp_randomizer.supported):
            return None
        return self.hp_randomizer.roll_hp(actor.data, token_name=token_name, to_chat=self.settings.hp.to_chat)

    def on_token_created(
        self,
        scene_id: str,
        placement: TokenPlacement,
        actor: Optional[ActorSnapshot],
        *,
        created_by_current_user: bool = True,
    ) -> TokenPatch:
        """Record the token for history recovery and roll its hp; returns the actor hp patch."""
        patch = TokenPatch(token_id=placement.id)
        if self.token_repo is not None:
            self.token_repo.add(scene_id, placement.actor_id, placement.id, placement.name)
        if not created_by_current_user or self._skips(placement, actor):
            return patch

        value = self._hp_value(actor, placement.name)
        if value is not None:
            patch.set("system.attributes.hp.value", value)
            patch.set("system.attributes.hp.max", value)
        return patch

    def refresh_tokens(
        self,
        scene_id: str,
        grid: SceneGrid,
        tokens: Iterable[Tuple[TokenPlacement, Optional[ActorSnapshot]]],
    ) -> List[TokenPatch]:
        """Re-apply everything to existing tokens as if they were placed again."""
        patches = []
        for placement, actor in tokens:
            patch = self.prepare_token(scene_id, grid, placement, actor)
            if not self._skips(placement, actor):
                value = self._hp_value(actor, placement.name)
                if value is not None:
                    patch.set("delta.system.attributes.hp.value", value)
                    patch.set("delta.system.attributes.hp.max", value)
            patches.append(patch)
        return patches

    def reset_scene(
        self,
        scene_id: str,
        reseed_actor_ids: Sequence[str] | None = None,
        *,
        reseed_from_history: bool = False,
    ) -> None:
        """Clear the scene's counters.

        ``reseed_from_history`` restarts every actor already on the scene at 0
        instead of only the listed ones.
        """
        if reseed_from_history:
            self.counter.reset_scene_from_history(scene_id)
        else:
            self.counter.reset_scene(scene_id, reseed_actor_ids=reseed_actor_ids)
