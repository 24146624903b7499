from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class SceneGrid:
    type: int = 1
    units: str = "ft"
    distance: float = 5.0

    @property
    def is_gridless(self) -> bool:
        return not self.type


@dataclass(frozen=True)
class ActorSnapshot:
    """Read-only view of the actor a token is placed from.

    ``data`` is the actor document as a nested mapping (for example
    ``{"name": "Goblin", "system": {"traits": {"size": "sm"}}}``); rules
    address it with dotted paths.
    """

    id: str
    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class TokenPlacement:
    id: str
    actor_id: str
    name: str = ""
    actor_link: bool = False
    fields: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TokenPatch:
    """Partial token update: only the keys this engine decided to set."""

    token_id: str
    changes: Dict[str, Any] = field(default_factory=dict)

    def set(self, key: str, value: Any) -> None:
        self.changes[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.changes.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self.changes

    def to_dict(self) -> Dict[str, Any]:
        return {"_id": self.token_id, **self.changes}
