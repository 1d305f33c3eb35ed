import pytest

from frostfall.balance.stats import BossStats, EnemyStats, PlayerStats
from frostfall.components.condition_track import ConditionTrack
from frostfall.components.vitals import Vitals
from frostfall.effects.registry import TriggerEvent
from frostfall.systems.combat import condition_flags, threshold_triggers


@pytest.fixture
def combat(runtime):
    return runtime.combat


@pytest.fixture
def enemy(runtime):
    return runtime.spawn(Vitals(current_hp=100, max_hp=100))


def test_modifiers_apply_after_floor_scaling(combat, resolver, enemy):
    base = EnemyStats(damage=10, max_hp=100, accuracy=80, speed=2)
    plain = combat.enemy_stats(enemy, 10, base)
    assert (plain.damage, plain.max_hp, plain.speed) == (18, 160, 4)

    resolver.apply(enemy, "hasted")
    resolver.apply(enemy, "berserker_rage")
    boosted = combat.enemy_stats(enemy, 10, base)

    # Speed 2 scales to 4 first, then the 1.5x haste lands on the scaled value.
    assert boosted.speed == 6
    assert boosted.damage == 36
    assert boosted.max_hp == 160


def test_boss_stats_scale_then_modify(combat, resolver, enemy):
    resolver.apply(enemy, "berserker_rage")
    boss = combat.boss_stats(enemy, 10, BossStats(damage=20, max_hp=200))
    assert boss.damage == 140
    assert boss.special_abilities == ("aoe_attack",)


def test_player_snapshot_reads_vitals_and_effects(combat, resolver, hero):
    snapshot = combat.player_snapshot(hero)
    assert snapshot == PlayerStats(
        current_hp=80, max_hp=100, current_warmth=60, max_warmth=100, total_damage=12, total_defense=6
    )

    resolver.apply(hero, "berserker_rage")
    assert combat.player_snapshot(hero).total_damage == pytest.approx(24)


def test_player_snapshot_without_vitals(runtime, combat):
    bare = runtime.world.create_entity(ConditionTrack())
    assert combat.player_snapshot(bare) is None
    assert combat.death_probability(bare, 5) is None


def test_death_probability_for_entity(combat, hero):
    assert combat.death_probability(hero, 5) == pytest.approx(0.35)


def test_incoming_damage_respects_resistances(combat, resolver, hero):
    assert combat.incoming_damage(hero, 20, "cold_damage") == 20
    resolver.apply(hero, "wet")
    assert combat.incoming_damage(hero, 20, "cold_damage") == 25
    assert combat.incoming_damage(hero, 20, "fire_damage") == 10


def test_threshold_triggers_and_flags():
    healthy = PlayerStats(100, 100, 100, 100, 10, 10)
    assert threshold_triggers(healthy) == ()
    assert condition_flags(healthy) == frozenset()

    struggling = PlayerStats(20, 100, 10, 100, 10, 10)
    assert threshold_triggers(struggling) == (TriggerEvent.ON_LOW_HEALTH, TriggerEvent.ON_LOW_WARMTH)
    assert condition_flags(struggling) == frozenset({"low_health", "low_warmth"})
