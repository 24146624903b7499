from __future__ import annotations

import logging
import random
from typing import Dict, Iterable, Optional

from tokenmold.domain.models.numbering import NumberingConfig
from tokenmold.domain.repositories import SceneTokenRepository
from tokenmold.domain.services.number_codec import decode_number, encode_number


class CounterState:
    """Last assigned number per scene and actor, for the life of the process.

    Not safe for concurrent writers: placements for one scene must be
    processed one at a time.
    """

    def __init__(self) -> None:
        self._values: Dict[str, Dict[str, int]] = {}

    def get(self, scene_id: str, actor_id: str) -> Optional[int]:
        return self._values.get(scene_id, {}).get(actor_id)

    def set(self, scene_id: str, actor_id: str, value: int) -> None:
        self._values.setdefault(scene_id, {})[actor_id] = int(value)

    def ensure_scene(self, scene_id: str) -> None:
        self._values.setdefault(scene_id, {})

    def clear_scene(self, scene_id: str) -> None:
        self._values[scene_id] = {}

    def snapshot(self) -> Dict[str, Dict[str, int]]:
        return {scene: dict(actors) for scene, actors in self._values.items()}


def extract_numeral(name: str, prefix: str, suffix: str) -> str:
    """Cut the numeral out of ``<base><prefix><numeral><suffix>``."""
    tail = name.split(prefix)[-1] if prefix else name
    if tail and suffix:
        tail = tail.split(suffix)[0]
    return tail


class SequenceCounter:
    def __init__(
        self,
        state: CounterState | None = None,
        token_repo: SceneTokenRepository | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.state = state or CounterState()
        self.token_repo = token_repo
        self.rng = rng or random.Random()
        self._logger = logging.getLogger(__name__)

    def recover(self, scene_id: str, actor_id: str, numbering: NumberingConfig) -> int:
        if self.token_repo is None:
            return 0
        last_name = self.token_repo.last_name_for_actor(scene_id, actor_id)
        if not last_name:
            return 0
        numeral = extract_numeral(last_name, numbering.prefix, numbering.suffix)
        value = decode_number(numeral, numbering.type)
        self._logger.debug(
            "Recovered counter from token history",
            extra={"scene_id": scene_id, "actor_id": actor_id, "numeral": numeral, "value": value},
        )
        return value or 0

    def step(self, numbering: NumberingConfig) -> int:
        if numbering.range > 1:
            return self.rng.randint(1, int(numbering.range))
        return 1

    def next_value(self, scene_id: str, actor_id: str, numbering: NumberingConfig) -> int:
        current = self.state.get(scene_id, actor_id)
        if current is None:
            current = self.recover(scene_id, actor_id, numbering)
        value = current + self.step(numbering)
        self.state.set(scene_id, actor_id, value)
        return value

    def next_suffix(self, scene_id: str, actor_id: str, numbering: NumberingConfig) -> str:
        value = self.next_value(scene_id, actor_id, numbering)
        return numbering.wrap(encode_number(value, numbering.type))

    def reset_scene(self, scene_id: str, reseed_actor_ids: Iterable[str] | None = None) -> None:
        """Forget the scene's counters; reseeded actors restart at 0 without history recovery."""
        self.state.clear_scene(scene_id)
        for actor_id in reseed_actor_ids or ():
            self.state.set(scene_id, actor_id, 0)
        self._logger.info("Scene counters reset", extra={"scene_id": scene_id})

    def reset_scene_from_history(self, scene_id: str) -> None:
        actor_ids = self.token_repo.list_actor_ids(scene_id) if self.token_repo is not None else []
        self.reset_scene(scene_id, reseed_actor_ids=actor_ids)
