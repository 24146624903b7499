from __future__ import annotations

from typing import Dict, List, Tuple

from tokenmold.domain.repositories import SceneTokenRepository


class InMemorySceneTokenRepository(SceneTokenRepository):
    def __init__(self, tokens: Dict[str, List[Tuple[str, str, str]]] | None = None) -> None:
        # scene_id -> [(token_id, actor_id, name)] in creation order
        self._tokens: Dict[str, List[Tuple[str, str, str]]] = {scene: list(rows) for scene, rows in (tokens or {}).items()}

    def list_names_for_actor(self, scene_id: str, actor_id: str) -> List[str]:
        return [name for _, token_actor_id, name in self._tokens.get(scene_id, []) if token_actor_id == actor_id]

    def add(self, scene_id: str, actor_id: str, token_id: str, name: str) -> None:
        rows = self._tokens.setdefault(scene_id, [])
        for index, (existing_id, _, _) in enumerate(rows):
            if existing_id == token_id:
                rows[index] = (token_id, actor_id, name)
                return
        rows.append((token_id, actor_id, name))

    def list_actor_ids(self, scene_id: str) -> List[str]:
        seen: List[str] = []
        for _, actor_id, _ in self._tokens.get(scene_id, []):
            if actor_id not in seen:
                seen.append(actor_id)
        return seen
