from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Mapping


class SceneTokenRepository(ABC):
    @abstractmethod
    def list_names_for_actor(self, scene_id: str, actor_id: str) -> List[str]:
        """Names of the actor's tokens in the scene, oldest first."""
        raise NotImplementedError

    @abstractmethod
    def add(self, scene_id: str, actor_id: str, token_id: str, name: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_actor_ids(self, scene_id: str) -> List[str]:
        raise NotImplementedError

    def last_name_for_actor(self, scene_id: str, actor_id: str) -> str | None:
        names = self.list_names_for_actor(scene_id, actor_id)
        return names[-1] if names else None


class LanguageSource(ABC):
    @abstractmethod
    def available_keys(self) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    def load(self, key: str) -> Mapping[str, Any]:
        """Return the raw ``{beg, mid, end, all, upper, lower}`` dictionary."""
        raise NotImplementedError


class AdjectiveSource(ABC):
    @abstractmethod
    def list_tables(self) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    def words(self, table_id: str) -> List[str]:
        raise NotImplementedError


@dataclass(frozen=True)
class DieTerm:
    number: int
    faces: int
    results: tuple = ()


@dataclass(frozen=True)
class RollResult:
    formula: str
    total: int
    dice: List[DieTerm] = field(default_factory=list)

    @property
    def dice_count(self) -> int:
        return self.dice[0].number if self.dice else 0


class DiceRoller(ABC):
    @abstractmethod
    def roll(self, formula: str) -> RollResult:
        raise NotImplementedError

    @abstractmethod
    def constant(self, formula: str) -> int:
        """Evaluate only the non-random part of ``formula``."""
        raise NotImplementedError
