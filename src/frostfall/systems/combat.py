"""Final combat values: floor scaling first, effect modifiers on top.

Percentage modifiers must see the scaled numbers, so every helper here asks
the balance engine before the resolver, never the other way round.
"""
from __future__ import annotations

import math
from dataclasses import replace

from esper import World

from frostfall.balance.engine import BalanceCurveEngine
from frostfall.balance.stats import BossStats, EnemyStats, PlayerStats, ScaledBossStats, ScaledStats
from frostfall.components.vitals import Vitals
from frostfall.effects.registry import TriggerEvent
from frostfall.infra import get_logger
from frostfall.systems.effect_resolver import EffectResolver

log = get_logger(__name__)

LOW_HEALTH_RATIO = 0.3
LOW_WARMTH_RATIO = 0.3


class CombatCalculator:
    def __init__(self, world: World, resolver: EffectResolver, engine: BalanceCurveEngine) -> None:
        self.world = world
        self.resolver = resolver
        self.engine = engine

    def effective_stat(self, entity: int, stat: str, base: float) -> float:
        return self.resolver.get_net_modifier(entity, stat).apply(base)

    def enemy_stats(self, entity: int, floor: int, base: EnemyStats) -> ScaledStats:
        scaled = self.engine.scale_enemy_stats(floor, base)
        return replace(
            scaled,
            damage=self._whole(entity, "damage", scaled.damage),
            max_hp=self._whole(entity, "max_hp", scaled.max_hp),
            accuracy=self.effective_stat(entity, "accuracy", scaled.accuracy),
            speed=self._whole(entity, "speed", scaled.speed),
            defense=self._whole(entity, "defense", scaled.defense),
        )

    def boss_stats(self, entity: int, floor: int, base: BossStats) -> ScaledBossStats:
        scaled = self.engine.scale_boss_stats(floor, base)
        return replace(
            scaled,
            damage=self._whole(entity, "damage", scaled.damage),
            max_hp=self._whole(entity, "max_hp", scaled.max_hp),
            defense=self._whole(entity, "defense", scaled.defense),
        )

    def player_snapshot(self, entity: int) -> PlayerStats | None:
        try:
            vitals = self.world.component_for_entity(entity, Vitals)
        except KeyError:
            log.warning("Entity %s has no vitals; cannot build a player snapshot", entity)
            return None
        return PlayerStats(
            current_hp=vitals.current_hp,
            max_hp=self.effective_stat(entity, "max_hp", vitals.max_hp),
            current_warmth=vitals.current_warmth,
            max_warmth=self.effective_stat(entity, "max_warmth", vitals.max_warmth),
            total_damage=self.effective_stat(entity, "damage", vitals.total_damage),
            total_defense=self.effective_stat(entity, "defense", vitals.total_defense),
        )

    def incoming_damage(self, entity: int, amount: float, damage_type: str = "physical_damage") -> int:
        return math.floor(amount * self.resolver.damage_taken_multiplier(entity, damage_type))

    def death_probability(self, entity: int, floor: int) -> float | None:
        snapshot = self.player_snapshot(entity)
        if snapshot is None:
            return None
        return self.engine.death_probability(snapshot, floor)

    def _whole(self, entity: int, stat: str, base: float) -> int:
        return math.floor(self.effective_stat(entity, stat, base))


def threshold_triggers(stats: PlayerStats) -> tuple[TriggerEvent, ...]:
    """Trigger events implied by low health or warmth in a snapshot."""
    events: list[TriggerEvent] = []
    if stats.max_hp > 0 and stats.current_hp < stats.max_hp * LOW_HEALTH_RATIO:
        events.append(TriggerEvent.ON_LOW_HEALTH)
    if stats.max_warmth > 0 and stats.current_warmth < stats.max_warmth * LOW_WARMTH_RATIO:
        events.append(TriggerEvent.ON_LOW_WARMTH)
    return tuple(events)


def condition_flags(stats: PlayerStats) -> frozenset[str]:
    """Flags usable as action conditions in a ``TriggerContext``."""
    names = {
        TriggerEvent.ON_LOW_HEALTH: "low_health",
        TriggerEvent.ON_LOW_WARMTH: "low_warmth",
    }
    return frozenset(names[event] for event in threshold_triggers(stats))
