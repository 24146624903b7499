import random
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tokenmold.application.services.sequence_counter import CounterState, SequenceCounter, extract_numeral
from tokenmold.domain.models.numbering import NumberingConfig, NumberingType
from tokenmold.infrastructure.inmemory.inmemory_scene_token_repo import InMemorySceneTokenRepository


class SequenceCounterTests(unittest.TestCase):
    def test_fresh_scene_counts_from_one(self) -> None:
        counter = SequenceCounter(rng=random.Random(1))
        numbering = NumberingConfig()
        suffixes = [counter.next_suffix("s1", "goblin", numbering) for _ in range(3)]
        self.assertEqual([" (1)", " (2)", " (3)"], suffixes)

    def test_counters_are_independent_per_actor_and_scene(self) -> None:
        counter = SequenceCounter(rng=random.Random(1))
        numbering = NumberingConfig()
        counter.next_value("s1", "goblin", numbering)
        counter.next_value("s1", "goblin", numbering)
        self.assertEqual(1, counter.next_value("s1", "orc", numbering))
        self.assertEqual(1, counter.next_value("s2", "goblin", numbering))

    def test_random_step_stays_within_range(self) -> None:
        counter = SequenceCounter(rng=random.Random(42))
        numbering = NumberingConfig(range=3)
        previous = 0
        for _ in range(100):
            value = counter.next_value("s1", "goblin", numbering)
            self.assertIn(value - previous, (1, 2, 3))
            previous = value

    def test_recovers_from_latest_token_name(self) -> None:
        repo = InMemorySceneTokenRepository(
            {"s1": [("t1", "goblin", "Angry Goblin (3)"), ("t2", "goblin", "Goblin (7)"), ("t3", "orc", "Orc (9)")]}
        )
        counter = SequenceCounter(token_repo=repo, rng=random.Random(1))
        self.assertEqual(" (8)", counter.next_suffix("s1", "goblin", NumberingConfig()))

    def test_recovers_roman_history(self) -> None:
        repo = InMemorySceneTokenRepository({"s1": [("t1", "goblin", "Goblin [XIV]")]})
        counter = SequenceCounter(token_repo=repo, rng=random.Random(1))
        numbering = NumberingConfig(prefix=" [", suffix="]", type=NumberingType.ROMAN)
        self.assertEqual(" [XV]", counter.next_suffix("s1", "goblin", numbering))

    def test_unparseable_history_starts_over(self) -> None:
        repo = InMemorySceneTokenRepository({"s1": [("t1", "goblin", "Goblin")]})
        counter = SequenceCounter(token_repo=repo, rng=random.Random(1))
        self.assertEqual(1, counter.next_value("s1", "goblin", NumberingConfig()))

    def test_reset_reseeds_listed_actors_without_recovery(self) -> None:
        repo = InMemorySceneTokenRepository({"s1": [("t1", "goblin", "Goblin (5)"), ("t2", "orc", "Orc (2)")]})
        counter = SequenceCounter(CounterState(), repo, random.Random(1))
        numbering = NumberingConfig()
        counter.next_value("s1", "goblin", numbering)

        counter.reset_scene("s1", reseed_actor_ids=["goblin"])

        self.assertEqual({"s1": {"goblin": 0}}, counter.state.snapshot())
        self.assertEqual(1, counter.next_value("s1", "goblin", numbering))
        self.assertEqual(3, counter.next_value("s1", "orc", numbering))

    def test_reset_from_history_reseeds_every_actor_in_scene(self) -> None:
        repo = InMemorySceneTokenRepository({"s1": [("t1", "goblin", "Goblin (5)"), ("t2", "orc", "Orc (2)")]})
        counter = SequenceCounter(CounterState(), repo, random.Random(1))
        counter.reset_scene_from_history("s1")
        self.assertEqual({"s1": {"goblin": 0, "orc": 0}}, counter.state.snapshot())


class ExtractNumeralTests(unittest.TestCase):
    def test_uses_last_prefix_and_first_suffix(self) -> None:
        self.assertEqual("12", extract_numeral("Goblin (Elite) (12)", " (", ")"))

    def test_empty_affixes(self) -> None:
        self.assertEqual("Goblin 4", extract_numeral("Goblin 4", "", ""))


if __name__ == "__main__":
    unittest.main()
