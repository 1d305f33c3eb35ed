"""Curve coefficients and checkpoint tables for the balance engine.

Values are loaded once at startup (``load_balance_config``) and never mutated.
Keys missing from the JSON document fall back to the dataclass defaults.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from frostfall.balance.stats import Requirements
from frostfall.exceptions import InvalidDefinitionError
from frostfall.infra import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class EnemyScaling:
    damage_per_floor: float = 1.8
    health_per_floor: float = 1.6
    accuracy_per_floor: float = 2.0
    speed_bonus_per_interval: int = 1
    speed_interval_floors: int = 5


@dataclass(frozen=True, slots=True)
class DifficultySettings:
    warmth_decay_rate: float = 2.5
    boss_health_multiplier: float = 2.0


@dataclass(frozen=True, slots=True)
class Extrapolation:
    """Growth applied past the last authored checkpoint, per block of floors."""

    floors_per_step: int = 5
    damage: float = 0.5
    defense: float = 0.4
    warmth: float = 0.3
    hp: float = 0.4


@dataclass(frozen=True, slots=True)
class Checkpoint:
    floor: int
    requirements: Requirements


@dataclass(frozen=True, slots=True)
class VictoryConditions:
    reach_floor: int = 25
    min_damage: int = 25
    min_defense: int = 18
    min_warmth: int = 180
    min_hp: int = 100


DEFAULT_CHECKPOINTS: tuple[Checkpoint, ...] = (
    Checkpoint(5, Requirements(min_damage=6, min_defense=4, min_warmth=80, min_hp=35)),
    Checkpoint(10, Requirements(min_damage=10, min_defense=7, min_warmth=100, min_hp=50)),
    Checkpoint(15, Requirements(min_damage=15, min_defense=10, min_warmth=120, min_hp=70)),
    Checkpoint(20, Requirements(min_damage=22, min_defense=15, min_warmth=150, min_hp=90)),
)

DEFAULT_HAZARD_DAMAGE: Mapping[str, int] = {
    "yellow_snow": 3,
    "falling_icicle": 8,
    "trap_spike": 12,
    "cold_damage": 2,
}


@dataclass(frozen=True, slots=True)
class BalanceConfig:
    enemy_scaling: EnemyScaling = field(default_factory=EnemyScaling)
    difficulty: DifficultySettings = field(default_factory=DifficultySettings)
    checkpoints: tuple[Checkpoint, ...] = DEFAULT_CHECKPOINTS
    extrapolation: Extrapolation = field(default_factory=Extrapolation)
    victory: VictoryConditions = field(default_factory=VictoryConditions)
    hazard_damage: Mapping[str, int] = field(default_factory=lambda: dict(DEFAULT_HAZARD_DAMAGE))

    def __post_init__(self) -> None:
        if not self.checkpoints:
            raise InvalidDefinitionError("At least one requirement checkpoint is needed")
        floors = [checkpoint.floor for checkpoint in self.checkpoints]
        if floors != sorted(set(floors)):
            raise InvalidDefinitionError(f"Checkpoint floors must be strictly ascending, got {floors}")
        if self.extrapolation.floors_per_step <= 0:
            raise InvalidDefinitionError("Extrapolation step must be a positive number of floors")
        if self.enemy_scaling.speed_interval_floors <= 0:
            raise InvalidDefinitionError("Speed bonus interval must be a positive number of floors")

    @property
    def checkpoint_floors(self) -> tuple[int, ...]:
        return tuple(checkpoint.floor for checkpoint in self.checkpoints)


def _requirements_from_mapping(data: Mapping[str, Any]) -> Requirements:
    return Requirements(
        min_damage=int(data.get("minDamage", 0)),
        min_defense=int(data.get("minDefense", 0)),
        min_warmth=int(data.get("minWarmth", 0)),
        min_hp=int(data.get("minHP", 0)),
    )


def checkpoints_from_mapping(table: Mapping[Any, Mapping[str, Any]]) -> tuple[Checkpoint, ...]:
    """Turn a sparse ``{floor: {minDamage, ...}}`` table into sorted checkpoints."""
    checkpoints = [Checkpoint(int(floor), _requirements_from_mapping(reqs)) for floor, reqs in table.items()]
    checkpoints.sort(key=lambda checkpoint: checkpoint.floor)
    return tuple(checkpoints)


def balance_config_from_mapping(data: Mapping[str, Any]) -> BalanceConfig:
    try:
        scaling = data.get("enemy_scaling", {})
        difficulty = data.get("difficulty", {})
        extrapolation = data.get("extrapolation", {})
        victory = data.get("victory", {})
        defaults = BalanceConfig()
        return BalanceConfig(
            enemy_scaling=EnemyScaling(
                damage_per_floor=float(scaling.get("damagePerFloor", defaults.enemy_scaling.damage_per_floor)),
                health_per_floor=float(scaling.get("healthPerFloor", defaults.enemy_scaling.health_per_floor)),
                accuracy_per_floor=float(scaling.get("accuracyPerFloor", defaults.enemy_scaling.accuracy_per_floor)),
                speed_bonus_per_interval=int(
                    scaling.get("speedBonusPerInterval", defaults.enemy_scaling.speed_bonus_per_interval)
                ),
                speed_interval_floors=int(
                    scaling.get("speedIntervalFloors", defaults.enemy_scaling.speed_interval_floors)
                ),
            ),
            difficulty=DifficultySettings(
                warmth_decay_rate=float(difficulty.get("warmthDecayRate", defaults.difficulty.warmth_decay_rate)),
                boss_health_multiplier=float(
                    difficulty.get("bossHealthMultiplier", defaults.difficulty.boss_health_multiplier)
                ),
            ),
            checkpoints=(
                checkpoints_from_mapping(data["stat_requirements"])
                if "stat_requirements" in data
                else defaults.checkpoints
            ),
            extrapolation=Extrapolation(
                floors_per_step=int(extrapolation.get("floorsPerStep", defaults.extrapolation.floors_per_step)),
                damage=float(extrapolation.get("damage", defaults.extrapolation.damage)),
                defense=float(extrapolation.get("defense", defaults.extrapolation.defense)),
                warmth=float(extrapolation.get("warmth", defaults.extrapolation.warmth)),
                hp=float(extrapolation.get("hp", defaults.extrapolation.hp)),
            ),
            victory=VictoryConditions(
                reach_floor=int(victory.get("reachFloor", defaults.victory.reach_floor)),
                min_damage=int(victory.get("damage", defaults.victory.min_damage)),
                min_defense=int(victory.get("defense", defaults.victory.min_defense)),
                min_warmth=int(victory.get("warmth", defaults.victory.min_warmth)),
                min_hp=int(victory.get("hp", defaults.victory.min_hp)),
            ),
            hazard_damage={
                str(name): int(value)
                for name, value in data.get("hazard_damage", defaults.hazard_damage).items()
            },
        )
    except (AttributeError, TypeError, ValueError) as exc:
        if isinstance(exc, InvalidDefinitionError):
            raise
        raise InvalidDefinitionError(f"Balance configuration is malformed: {exc}") from exc


def load_balance_config(path: Path | str) -> BalanceConfig:
    config_path = Path(path)
    with config_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    config = balance_config_from_mapping(payload)
    log.debug("Loaded balance config from %s with checkpoints %s", config_path, config.checkpoint_floors)
    return config
