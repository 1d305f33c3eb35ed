import itertools

import pytest

from frostfall.balance.config import BalanceConfig, Checkpoint, checkpoints_from_mapping
from frostfall.balance.engine import BalanceCurveEngine, risk_band
from frostfall.balance.stats import BossStats, EnemyStats, ItemStats, PlayerStats, Requirements


@pytest.fixture
def engine():
    return BalanceCurveEngine()


def _player(**overrides):
    stats = dict(
        current_hp=100,
        max_hp=100,
        current_warmth=200,
        max_warmth=200,
        total_damage=30,
        total_defense=20,
    )
    stats.update(overrides)
    return PlayerStats(**stats)


def test_enemy_scaling_at_floor_ten(engine):
    scaled = engine.scale_enemy_stats(10, EnemyStats(damage=10, max_hp=100, accuracy=80, speed=0))
    assert scaled.floor == 10
    assert scaled.damage == 18
    assert scaled.max_hp == 160
    assert scaled.accuracy == pytest.approx(100)
    assert scaled.speed == 2


def test_enemy_scaling_at_floor_zero_is_identity(engine):
    base = EnemyStats(damage=7, max_hp=33, accuracy=60, speed=1, defense=2)
    scaled = engine.scale_enemy_stats(0, base)
    assert (scaled.damage, scaled.max_hp, scaled.accuracy, scaled.speed, scaled.defense) == (7, 33, 60, 1, 2)


def test_enemy_scaling_is_monotonic(engine):
    base = EnemyStats(damage=10, max_hp=100, accuracy=50, speed=1)
    previous = engine.scale_enemy_stats(0, base)
    for floor in range(1, 31):
        current = engine.scale_enemy_stats(floor, base)
        assert current.damage >= previous.damage
        assert current.max_hp >= previous.max_hp
        assert current.speed >= previous.speed
        previous = current


def test_requirements_past_last_checkpoint_extrapolate():
    config = BalanceConfig(checkpoints=checkpoints_from_mapping({5: {"minDamage": 6}, 10: {"minDamage": 10}}))
    engine = BalanceCurveEngine(config)
    assert engine.required_stats_for_floor(20).min_damage == 20


@pytest.mark.parametrize(
    "floor, checkpoint_floor",
    [(1, 5), (5, 5), (9, 5), (10, 10), (14, 10), (15, 15), (19, 15), (20, 20)],
)
def test_requirements_use_greatest_checkpoint_at_or_below(engine, floor, checkpoint_floor):
    expected = {cp.floor: cp.requirements for cp in engine.config.checkpoints}[checkpoint_floor]
    assert engine.required_stats_for_floor(floor) == expected


def test_default_requirements_extrapolate_damage(engine):
    assert engine.required_stats_for_floor(25).min_damage == 33
    assert engine.required_stats_for_floor(30).min_damage == 44


def test_item_value_weights_each_dimension(engine):
    # Floor 10 requires 10 damage, 7 defense and 100 warmth.
    assert engine.item_value(ItemStats(damage=5), 10) == pytest.approx(20)
    assert engine.item_value(ItemStats(defense=7), 10) == pytest.approx(25)
    assert engine.item_value(ItemStats(warmth=20, cold_resist=15), 10) == pytest.approx(17.5)
    assert engine.item_value(ItemStats(), 10) == 0


def test_item_value_skips_unrequired_dimensions():
    config = BalanceConfig(checkpoints=(Checkpoint(1, Requirements(min_damage=10)),))
    engine = BalanceCurveEngine(config)
    assert engine.item_value(ItemStats(damage=10, defense=50, warmth=50), 1) == pytest.approx(40)


def test_underpowered_needs_two_failed_checks(engine):
    one_short = _player(total_damage=12, total_defense=8, max_warmth=120, max_hp=40)
    two_short = _player(total_damage=12, total_defense=8, max_warmth=90, max_hp=40)
    assert engine.failed_checks(one_short, 10) == 1
    assert not engine.is_underpowered(one_short, 10)
    assert engine.is_underpowered(two_short, 10)


def test_death_probability_baseline_and_ceiling(engine):
    assert engine.death_probability(_player(), 0) == pytest.approx(0.10)
    assert engine.death_probability(_player(), 5) == pytest.approx(0.35)
    weak = _player(current_hp=5, current_warmth=10, total_damage=1, total_defense=0, max_warmth=20)
    assert engine.death_probability(weak, 20) == pytest.approx(0.95)


def test_death_probability_stays_in_bounds(engine):
    players = [
        _player(),
        _player(current_hp=10, current_warmth=5),
        _player(total_damage=0, total_defense=0, max_warmth=0, current_warmth=0),
    ]
    for player, floor in itertools.product(players, range(0, 41, 4)):
        probability = engine.death_probability(player, floor)
        assert 0.10 <= probability <= 0.95


def test_death_probability_grows_with_depth(engine):
    player = _player()
    risks = [engine.death_probability(player, floor) for floor in range(0, 30)]
    assert risks == sorted(risks)


def test_boss_scaling_unlocks_abilities(engine):
    boss = BossStats(damage=20, max_hp=200, defense=5, special_abilities=("charge",))

    early = engine.scale_boss_stats(5, boss)
    assert early.special_abilities == ("charge",)

    scaled = engine.scale_boss_stats(15, boss)
    assert scaled.max_hp == 2200
    assert scaled.damage == 95
    assert scaled.defense == 12
    assert scaled.special_abilities == ("charge", "aoe_attack", "summon_minions")

    deep = engine.scale_boss_stats(20, BossStats(damage=20, max_hp=200, special_abilities=("aoe_attack",)))
    assert deep.special_abilities == ("aoe_attack", "summon_minions", "status_effects")


def test_recommended_loadout(engine):
    loadout = engine.recommended_loadout(12)
    assert loadout.weapon.min_tier == 3
    assert loadout.weapon.required_damage == 10
    assert loadout.armor.min_tier == 2
    assert loadout.armor.required_warmth == 100
    assert loadout.consumables.min_healing_potions == 4
    assert loadout.consumables.min_warmth_items == 6
    assert loadout.consumables.min_scrolls == 3
    assert loadout.artifacts_recommended
    assert not engine.recommended_loadout(2).artifacts_recommended
    assert engine.recommended_loadout(2).consumables.min_healing_potions == 2


def test_environmental_damage(engine):
    assert engine.environmental_damage(0, "falling_icicle") == 8
    assert engine.environmental_damage(10, "trap_spike") == 30
    assert engine.environmental_damage(10, "avalanche") == 12


def test_warmth_decay_grows_with_floor(engine):
    assert engine.warmth_decay_for_floor(0) == pytest.approx(2.5)
    assert engine.warmth_decay_for_floor(5) == pytest.approx(3.5)


@pytest.mark.parametrize(
    "warmth, max_warmth, expected",
    [(5, 100, 8), (10, 100, 8), (20, 100, 5), (50, 100, 2), (80, 100, 0), (10, 0, 8)],
)
def test_cold_damage_bands(warmth, max_warmth, expected):
    assert BalanceCurveEngine.cold_damage_for_warmth(warmth, max_warmth) == expected


def test_victory_requires_depth_and_stats(engine):
    champion = _player(total_damage=25, total_defense=18, max_warmth=180, max_hp=100)
    assert engine.check_victory(champion, 25)
    assert not engine.check_victory(champion, 24)
    assert not engine.check_victory(_player(total_defense=17), 30)


def test_difficulty_analysis_report(engine):
    player = _player(total_damage=5, total_defense=3, max_warmth=50, current_warmth=50)
    report = engine.difficulty_analysis(player, 10)
    assert report.underpowered
    assert report.requirements == engine.required_stats_for_floor(10)
    assert report.risk_band == risk_band(report.death_probability)
    assert report.render() == "\n".join(
        [
            "Floor 10 Difficulty Analysis:",
            "Death Probability: 95%",
            "Player is UNDERPOWERED",
            "",
            "Required Stats vs Player Stats:",
            "Damage: 10 (have: 5)",
            "Defense: 7 (have: 3)",
            "Warmth: 100 (have: 50)",
            "HP: 50 (have: 100)",
            "",
            "⚠️  EXTREMELY DANGEROUS - Immediate upgrades needed!",
        ]
    )


def test_difficulty_analysis_for_well_equipped_player(engine):
    text = engine.difficulty_analysis(_player(), 0).render()
    assert text.splitlines()[1:3] == ["Death Probability: 10%", "Player is adequately equipped"]
    assert "Damage: 6 (have: 30)" in text
    assert text.endswith("\n\n✓ Manageable difficulty level")


@pytest.mark.parametrize(
    "probability, prefix",
    [(0.9, "EXTREMELY"), (0.6, "VERY RISKY"), (0.4, "MODERATE"), (0.3, "Manageable"), (0.1, "Manageable")],
)
def test_risk_bands(probability, prefix):
    assert risk_band(probability).startswith(prefix)
