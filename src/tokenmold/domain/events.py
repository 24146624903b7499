from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from tokenmold.domain.models.token import ActorSnapshot, SceneGrid, TokenPlacement


@dataclass
class TokenPlacementRequested:
    scene_id: str
    grid: SceneGrid
    placement: TokenPlacement
    actor: Optional[ActorSnapshot]
    modifier_active: bool = False
    patch: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TokenCreated:
    scene_id: str
    placement: TokenPlacement
    actor: Optional[ActorSnapshot]
    created_by_current_user: bool = True
    patch: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SceneCountersReset:
    scene_id: str
    reseed_actor_ids: tuple = ()
    reseed_from_history: bool = False
