from __future__ import annotations

import logging
import math
import random
from typing import Any, Mapping

from tokenmold.domain.models.settings import (
    AttributeReference,
    CoinFlip,
    ConfigOverwriteRule,
    ConfigSettings,
    FixedValue,
    RangeMultiplier,
)
from tokenmold.domain.models.token import TokenPatch
from tokenmold.domain.services.attribute_paths import has_property

_logger = logging.getLogger(__name__)


def sample_multiplier(rule: RangeMultiplier, rng: random.Random) -> float:
    """Uniform in ``[min, max)``, truncated to two decimals."""
    return math.floor((rng.random() * (rule.max - rule.min) + rule.min) * 100) / 100


def apply_rule(
    field_name: str,
    rule: ConfigOverwriteRule,
    patch: TokenPatch,
    token_fields: Mapping[str, Any],
    actor_data: Any,
    rng: random.Random,
) -> None:
    if isinstance(rule, FixedValue):
        patch.set(field_name, rule.value)
    elif isinstance(rule, RangeMultiplier):
        # Scales what this placement already wrote, never the stored token value.
        patch.set(field_name, (patch.get(field_name) or 1) * sample_multiplier(rule, rng))
    elif isinstance(rule, AttributeReference):
        # Only bar-style targets carry an ``attribute`` sub-field.
        existing = patch.get(field_name, token_fields.get(field_name))
        if not isinstance(existing, Mapping):
            _logger.debug("Skipping attribute reference on non-bar field", extra={"field": field_name})
            return
        if rule.attribute == "" or has_property(actor_data, rule.attribute):
            patch.set(f"{field_name}.attribute", rule.attribute)
    elif isinstance(rule, CoinFlip):
        patch.set(field_name, bool(round(rng.random())))
    else:
        raise TypeError(f"Unsupported config rule for '{field_name}': {rule!r}")


def apply_config_overwrites(
    config: ConfigSettings,
    patch: TokenPatch,
    token_fields: Mapping[str, Any],
    actor_data: Any,
    rng: random.Random | None = None,
) -> TokenPatch:
    resolved_rng = rng or random.Random()
    for field_name, field_rule in config.fields.items():
        if not field_rule.use:
            continue
        apply_rule(field_name, field_rule.rule, patch, token_fields, actor_data, resolved_rng)
    return patch
