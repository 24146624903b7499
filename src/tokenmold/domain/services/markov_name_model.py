from __future__ import annotations

import logging
import random

from tokenmold.domain.models.language import LanguageModel
from tokenmold.domain.services.weighted_sampler import EmptyWeightsError, WeightedSampler

DEFAULT_MIN_LENGTH = 6
DEFAULT_MAX_LENGTH = 9

_logger = logging.getLogger(__name__)


class MarkovNameModel:
    """Trigram-chain name generator.

    A name starts from a weighted starting trigram and grows one letter at a
    time from the two letters before it. The last letter is drawn from the
    language's ``end`` table, the others from ``mid``; either falls back to
    ``all`` when it has nothing for the current pair. A doubled letter is
    never followed by a third copy, and a pair with no candidates ends the
    name early.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()
        self.sampler = WeightedSampler(self.rng)

    def pick_length(self, min_length: int | None, max_length: int | None) -> int:
        low = int(min_length or DEFAULT_MIN_LENGTH)
        high = int(max_length or DEFAULT_MAX_LENGTH)
        if high < low:
            low, high = high, low
        return self.rng.randint(low, high)

    def generate(self, language: LanguageModel, min_length: int | None = None, max_length: int | None = None) -> str:
        target_length = self.pick_length(min_length, max_length)
        name = self.sampler.choose(language.beg)[:target_length]

        for position in range(len(name) + 1, target_length + 1):
            if len(name) < 2:
                break
            first, second = name[-2], name[-1]
            candidates = language.next_letters(first, second, final=position == target_length)
            if first == second:
                candidates.pop(first, None)
            if not candidates:
                break
            try:
                name += self.sampler.choose(candidates)
            except EmptyWeightsError:
                break

        _logger.debug(
            "Generated name",
            extra={"language": language.key, "target_length": target_length, "length": len(name)},
        )
        if not name:
            return ""
        return name[0] + language.to_lower_case(name[1:])
