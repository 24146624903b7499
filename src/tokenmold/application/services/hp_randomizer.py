from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from tokenmold.domain.repositories import DiceRoller, RollResult
from tokenmold.domain.services.attribute_paths import get_property

SUPPORTED_SYSTEMS = ("dnd5e", "pf2e", "sfrpg", "sw5e", "dcc")
SUPPORTED_ROLL_HP = ("dnd5e", "sw5e", "dcc")
SUPPORTED_CREATURE_SIZE = ("dnd5e", "pf2e")

HP_FORMULA_PATHS = {
    "dnd5e": "system.attributes.hp.formula",
    "sw5e": "system.attributes.hp.formula",
    "dcc": "system.attributes.hitDice.value",
}
HP_VALUE_PATH = "system.attributes.hp.value"

MISSING_FORMULA_WARNING = "Can not randomize hp. HP formula is not set."

Notifier = Callable[[str], None]
RollPublisher = Callable[[RollResult, str], None]


def clamp_hp(roll: RollResult, constant: int) -> int:
    """Never below the dice count plus the constant part, and never below 1."""
    minimum = max(roll.dice_count + constant, 1)
    return max(roll.total, minimum)


class HpRandomizer:
    def __init__(
        self,
        roller: DiceRoller,
        system_id: str = "dnd5e",
        notify: Optional[Notifier] = None,
        publish_roll: Optional[RollPublisher] = None,
    ) -> None:
        self.roller = roller
        self.system_id = system_id
        self.notify = notify
        self.publish_roll = publish_roll
        self._logger = logging.getLogger(__name__)

    @property
    def supported(self) -> bool:
        return self.system_id in SUPPORTED_ROLL_HP

    def formula_for(self, actor_data: Any) -> str | None:
        path = HP_FORMULA_PATHS.get(self.system_id)
        if path is None:
            return None
        formula = get_property(actor_data, path)
        return str(formula) if formula else None

    def roll_hp(self, actor_data: Any, *, token_name: str = "", to_chat: bool = False) -> Any:
        formula = self.formula_for(actor_data)
        if not formula:
            self._logger.warning(MISSING_FORMULA_WARNING, extra={"system_id": self.system_id})
            if self.notify is not None:
                self.notify(MISSING_FORMULA_WARNING)
            return get_property(actor_data, HP_VALUE_PATH)

        compact = formula.replace(" ", "")
        constant = self.roller.constant(compact)
        roll = self.roller.roll(compact)
        if to_chat and self.publish_roll is not None:
            self.publish_roll(roll, f"{token_name} rolls for hp!")

        value = clamp_hp(roll, constant)
        self._logger.debug(
            "Rolled hp",
            extra={"formula": compact, "constant": constant, "total": roll.total, "hp": value},
        )
        return value
