"""Floor-scaled combat numbers derived from a handful of base curves.

Every function here is pure: it reads the immutable ``BalanceConfig`` and
never touches condition state. Enemy damage and health grow exponentially
with depth while requirements grow linearly, so pressure on the player keeps
rising the deeper they go.
"""
from __future__ import annotations

import math
from bisect import bisect_right

from frostfall.balance.config import BalanceConfig
from frostfall.balance.stats import (
    ArmorAdvice,
    BossStats,
    ConsumableAdvice,
    DifficultyReport,
    EnemyStats,
    ItemStats,
    Loadout,
    PlayerStats,
    Requirements,
    ScaledBossStats,
    ScaledStats,
    WeaponAdvice,
)

ITEM_WEIGHTS = {"damage": 40, "defense": 25, "warmth": 35}
COLD_RESIST_WARMTH_FACTOR = 2

BASE_DEATH_RISK = 0.10
MAX_DEATH_RISK = 0.95
DEATH_RISK_PER_FLOOR = 0.05
DAMAGE_DEFICIT_RISK = 0.30
DEFENSE_DEFICIT_RISK = 0.25
WARMTH_DEFICIT_RISK = 0.40
LOW_HP_RISK = 0.20
LOW_WARMTH_RISK = 0.30
LOW_HP_RATIO = 0.5
LOW_WARMTH_RATIO = 0.3

BOSS_HP_GROWTH_PER_FLOOR = 0.3
BOSS_DAMAGE_GROWTH_PER_FLOOR = 0.25
BOSS_DEFENSE_PER_FLOOR = 0.5
BOSS_ABILITY_UNLOCKS = ((10, "aoe_attack"), (15, "summon_minions"), (20, "status_effects"))

HAZARD_GROWTH_PER_FLOOR = 0.15
UNKNOWN_HAZARD_DAMAGE = 5
WARMTH_DECAY_PER_FLOOR = 0.2

# (warmth ratio ceiling, cold damage), checked in order.
COLD_DAMAGE_BANDS = ((0.1, 8), (0.25, 5), (0.5, 2))


class BalanceCurveEngine:
    def __init__(self, config: BalanceConfig | None = None) -> None:
        self.config = config or BalanceConfig()
        self._floors = self.config.checkpoint_floors

    def scale_enemy_stats(self, floor: int, base: EnemyStats) -> ScaledStats:
        scaling = self.config.enemy_scaling
        depth = floor / 10
        return ScaledStats(
            floor=floor,
            damage=math.floor(base.damage * scaling.damage_per_floor ** depth),
            max_hp=math.floor(base.max_hp * scaling.health_per_floor ** depth),
            accuracy=base.accuracy + floor * scaling.accuracy_per_floor,
            speed=base.speed + (floor // scaling.speed_interval_floors) * scaling.speed_bonus_per_interval,
            defense=base.defense,
        )

    def required_stats_for_floor(self, floor: int) -> Requirements:
        """Requirements at the greatest checkpoint <= ``floor``.

        Floors before the first checkpoint use the first one; floors past the
        last checkpoint are extrapolated with per-stat growth coefficients.
        """
        index = bisect_right(self._floors, floor) - 1
        checkpoint = self.config.checkpoints[max(index, 0)]
        last_floor = self._floors[-1]
        if floor <= last_floor:
            return checkpoint.requirements

        rule = self.config.extrapolation
        steps = (floor - last_floor) / rule.floors_per_step
        reqs = checkpoint.requirements
        return Requirements(
            min_damage=math.floor(reqs.min_damage * (1 + steps * rule.damage)),
            min_defense=math.floor(reqs.min_defense * (1 + steps * rule.defense)),
            min_warmth=math.floor(reqs.min_warmth * (1 + steps * rule.warmth)),
            min_hp=math.floor(reqs.min_hp * (1 + steps * rule.hp)),
        )

    def item_value(self, item: ItemStats, floor: int) -> float:
        reqs = self.required_stats_for_floor(floor)
        warmth = item.warmth + item.cold_resist * COLD_RESIST_WARMTH_FACTOR
        dimensions = (
            (item.damage, reqs.min_damage, ITEM_WEIGHTS["damage"]),
            (item.defense, reqs.min_defense, ITEM_WEIGHTS["defense"]),
            (warmth, reqs.min_warmth, ITEM_WEIGHTS["warmth"]),
        )
        value = 0.0
        for stat_value, requirement, weight in dimensions:
            # An absent stat or an unrequired dimension adds nothing.
            if not stat_value or requirement <= 0:
                continue
            value += (stat_value / requirement) * weight
        return value

    def failed_checks(self, player: PlayerStats, floor: int) -> int:
        reqs = self.required_stats_for_floor(floor)
        checks = (
            player.total_damage < reqs.min_damage,
            player.total_defense < reqs.min_defense,
            player.max_warmth < reqs.min_warmth,
            player.max_hp < reqs.min_hp,
        )
        return sum(checks)

    def is_underpowered(self, player: PlayerStats, floor: int) -> bool:
        return self.failed_checks(player, floor) >= 2

    def death_probability(self, player: PlayerStats, floor: int) -> float:
        reqs = self.required_stats_for_floor(floor)
        risk = BASE_DEATH_RISK
        if player.total_damage < reqs.min_damage:
            risk += DAMAGE_DEFICIT_RISK
        if player.total_defense < reqs.min_defense:
            risk += DEFENSE_DEFICIT_RISK
        if player.max_warmth < reqs.min_warmth:
            risk += WARMTH_DEFICIT_RISK
        if player.current_hp < player.max_hp * LOW_HP_RATIO:
            risk += LOW_HP_RISK
        if player.current_warmth < player.max_warmth * LOW_WARMTH_RATIO:
            risk += LOW_WARMTH_RISK
        risk += floor * DEATH_RISK_PER_FLOOR
        return max(BASE_DEATH_RISK, min(MAX_DEATH_RISK, risk))

    def scale_boss_stats(self, floor: int, base: BossStats) -> ScaledBossStats:
        multiplier = self.config.difficulty.boss_health_multiplier
        abilities = list(base.special_abilities)
        for threshold, ability in BOSS_ABILITY_UNLOCKS:
            if floor >= threshold and ability not in abilities:
                abilities.append(ability)
        return ScaledBossStats(
            floor=floor,
            max_hp=math.floor(base.max_hp * multiplier * (1 + floor * BOSS_HP_GROWTH_PER_FLOOR)),
            damage=math.floor(base.damage * (1 + floor * BOSS_DAMAGE_GROWTH_PER_FLOOR)),
            defense=base.defense + math.floor(floor * BOSS_DEFENSE_PER_FLOOR),
            special_abilities=tuple(abilities),
        )

    def recommended_loadout(self, floor: int) -> Loadout:
        reqs = self.required_stats_for_floor(floor)
        return Loadout(
            weapon=WeaponAdvice(min_tier=max(1, floor // 4), required_damage=reqs.min_damage),
            armor=ArmorAdvice(
                min_tier=max(1, floor // 5),
                required_defense=reqs.min_defense,
                required_warmth=reqs.min_warmth,
            ),
            consumables=ConsumableAdvice(
                min_healing_potions=max(2, floor // 3),
                min_warmth_items=max(3, floor // 2),
                min_scrolls=max(1, floor // 4),
            ),
            artifacts_recommended=floor >= 8,
        )

    def environmental_damage(self, floor: int, hazard: str) -> int:
        base = self.config.hazard_damage.get(hazard, UNKNOWN_HAZARD_DAMAGE)
        return math.floor(base * (1 + floor * HAZARD_GROWTH_PER_FLOOR))

    def warmth_decay_for_floor(self, floor: int) -> float:
        return self.config.difficulty.warmth_decay_rate + floor * WARMTH_DECAY_PER_FLOOR

    @staticmethod
    def cold_damage_for_warmth(warmth: float, max_warmth: float) -> int:
        ratio = warmth / max_warmth if max_warmth > 0 else 0.0
        for ceiling, damage in COLD_DAMAGE_BANDS:
            if ratio <= ceiling:
                return damage
        return 0

    def check_victory(self, player: PlayerStats, floor: int) -> bool:
        victory = self.config.victory
        return (
            floor >= victory.reach_floor
            and player.total_damage >= victory.min_damage
            and player.total_defense >= victory.min_defense
            and player.max_warmth >= victory.min_warmth
            and player.max_hp >= victory.min_hp
        )

    def difficulty_analysis(self, player: PlayerStats, floor: int) -> DifficultyReport:
        probability = self.death_probability(player, floor)
        return DifficultyReport(
            floor=floor,
            death_probability=probability,
            underpowered=self.is_underpowered(player, floor),
            requirements=self.required_stats_for_floor(floor),
            player=player,
            risk_band=risk_band(probability),
        )


def risk_band(probability: float) -> str:
    if probability > 0.7:
        return "EXTREMELY DANGEROUS - Immediate upgrades needed!"
    if probability > 0.5:
        return "VERY RISKY - Consider retreating or finding better gear"
    if probability > 0.3:
        return "MODERATE RISK - Play carefully"
    return "Manageable difficulty level"
