from __future__ import annotations

import random
from dataclasses import dataclass, field

from frostfall.balance.config import BalanceConfig
from frostfall.effects.factory import default_interactions, ensure_default_effects_registered
from frostfall.effects.interactions import EffectInteractions
from frostfall.effects.registry import EffectRegistry


@dataclass(slots=True)
class RulesContext:
    """Shared read-only rules data plus the random source for trigger rolls.

    Owned by the game loop and handed to every core service, so separate
    contexts (for example in parallel tests) never share state.
    """

    registry: EffectRegistry
    interactions: EffectInteractions = field(default_factory=EffectInteractions)
    balance: BalanceConfig = field(default_factory=BalanceConfig)
    rng: random.Random = field(default_factory=random.Random)


def create_rules_context(
    *,
    registry: EffectRegistry | None = None,
    interactions: EffectInteractions | None = None,
    balance: BalanceConfig | None = None,
    rng: random.Random | None = None,
    seed: int | None = None,
) -> RulesContext:
    """Build a context, filling gaps with the default catalog and curves."""
    if registry is None:
        registry = EffectRegistry()
        ensure_default_effects_registered(registry)
        if interactions is None:
            interactions = default_interactions()
    interactions = interactions or EffectInteractions()
    interactions.validate(registry)
    return RulesContext(
        registry=registry,
        interactions=interactions,
        balance=balance or BalanceConfig(),
        rng=rng or random.Random(seed),
    )
