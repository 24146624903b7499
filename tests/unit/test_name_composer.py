import random
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tokenmold.application.services.language_registry import LanguageRegistry, UnknownLanguageError
from tokenmold.application.services.name_composer import NameComposer
from tokenmold.application.services.sequence_counter import SequenceCounter
from tokenmold.domain.models.language import LanguageModel
from tokenmold.domain.models.numbering import NumberingConfig, NumberingType
from tokenmold.domain.models.settings import (
    AdjectivePosition,
    AdjectiveSettings,
    NameOptions,
    NameSettings,
    ReplaceMode,
)


def _fixed_language() -> LanguageModel:
    return LanguageModel.from_mapping(
        "stub",
        {"beg": {"ZED": 1}, "mid": {}, "end": {}, "all": {}, "upper": "ZED", "lower": "zed"},
    )


class NameComposerTests(unittest.TestCase):
    def setUp(self) -> None:
        rng = random.Random(8)
        registry = LanguageRegistry(models={"stub": _fixed_language()})
        self.composer = NameComposer(SequenceCounter(rng=rng), registry, rng=rng)

    def _compose(self, settings: NameSettings, *, name: str = "Goblin", adjectives=("Angry",), modifier_active=False) -> str:
        return self.composer.compose(
            scene_id="s1",
            actor_id="goblin",
            name=name,
            actor_data={"name": name},
            settings=settings,
            adjectives=adjectives,
            modifier_active=modifier_active,
        )

    def test_default_settings_prefix_adjective_and_append_number(self) -> None:
        self.assertEqual("Angry Goblin (1)", self._compose(NameSettings()))
        self.assertEqual("Angry Goblin (2)", self._compose(NameSettings()))

    def test_adjective_at_back(self) -> None:
        settings = NameSettings(adjective=AdjectiveSettings(position=AdjectivePosition.BACK))
        self.assertEqual("Goblin Angry (1)", self._compose(settings))

    def test_remove_drops_base_name(self) -> None:
        self.assertEqual("Angry (1)", self._compose(NameSettings(replace=ReplaceMode.REMOVE)))

    def test_replace_uses_generated_name(self) -> None:
        settings = NameSettings(
            replace=ReplaceMode.REPLACE,
            adjective=AdjectiveSettings(use=False),
            number=NumberingConfig(use=False),
            options=NameOptions(default="stub", min=3, max=3),
        )
        self.assertEqual("Zed", self._compose(settings))

    def test_modifier_keeps_base_name_when_override_enabled(self) -> None:
        settings = NameSettings(
            replace=ReplaceMode.REPLACE,
            base_name_override=True,
            adjective=AdjectiveSettings(use=False),
            number=NumberingConfig(prefix=" ", suffix="", type=NumberingType.ROMAN),
            options=NameOptions(default="stub", min=3, max=3),
        )
        self.assertEqual("Zed Goblin I", self._compose(settings, modifier_active=True))
        self.assertEqual("Zed II", self._compose(settings, modifier_active=False))

    def test_failed_generation_does_not_advance_counter(self) -> None:
        counter = SequenceCounter(rng=random.Random(1))
        composer = NameComposer(counter, LanguageRegistry(), rng=random.Random(1))
        settings = NameSettings(replace=ReplaceMode.REPLACE, options=NameOptions(default="stub"))

        with self.assertRaises(UnknownLanguageError):
            composer.compose(scene_id="s", actor_id="a", name="Goblin", actor_data={}, settings=settings)

        self.assertIsNone(counter.state.get("s", "a"))

    def test_empty_adjective_table_leaves_no_stray_spaces(self) -> None:
        self.assertEqual("Goblin (1)", self._compose(NameSettings(), adjectives=()))

    def test_everything_disabled_keeps_name(self) -> None:
        settings = NameSettings(number=NumberingConfig(use=False), adjective=AdjectiveSettings(use=False))
        self.assertEqual("Goblin", self._compose(settings))


if __name__ == "__main__":
    unittest.main()
