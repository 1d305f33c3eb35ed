"""Typed stat bundles consumed and produced by the balance engine."""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class EnemyStats:
    damage: int
    max_hp: int
    accuracy: float = 0.0
    speed: int = 0
    defense: int = 0


@dataclass(frozen=True, slots=True)
class ScaledStats:
    """Enemy stats after floor scaling."""

    floor: int
    damage: int
    max_hp: int
    accuracy: float
    speed: int
    defense: int = 0


@dataclass(frozen=True, slots=True)
class BossStats:
    damage: int
    max_hp: int
    defense: int = 0
    special_abilities: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ScaledBossStats:
    floor: int
    damage: int
    max_hp: int
    defense: int
    special_abilities: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PlayerStats:
    current_hp: float
    max_hp: float
    current_warmth: float
    max_warmth: float
    total_damage: float
    total_defense: float


@dataclass(frozen=True, slots=True)
class ItemStats:
    damage: float = 0
    defense: float = 0
    warmth: float = 0
    cold_resist: float = 0


@dataclass(frozen=True, slots=True)
class Requirements:
    min_damage: int = 0
    min_defense: int = 0
    min_warmth: int = 0
    min_hp: int = 0


@dataclass(frozen=True, slots=True)
class WeaponAdvice:
    min_tier: int
    required_damage: int
    preferred_enchantments: tuple[str, ...] = ("sharpness", "frost")


@dataclass(frozen=True, slots=True)
class ArmorAdvice:
    min_tier: int
    required_defense: int
    required_warmth: int
    preferred_enchantments: tuple[str, ...] = ("protection", "warmth", "regeneration")


@dataclass(frozen=True, slots=True)
class ConsumableAdvice:
    min_healing_potions: int
    min_warmth_items: int
    min_scrolls: int


@dataclass(frozen=True, slots=True)
class Loadout:
    weapon: WeaponAdvice
    armor: ArmorAdvice
    consumables: ConsumableAdvice
    artifacts_recommended: bool
    preferred_artifact_types: tuple[str, ...] = field(default=("warmth", "survival", "combat"))


@dataclass(frozen=True, slots=True)
class DifficultyReport:
    floor: int
    death_probability: float
    underpowered: bool
    requirements: Requirements
    player: PlayerStats
    risk_band: str

    def render(self) -> str:
        """Multi-line summary for debug overlays and balance logs."""
        marker = "⚠️  " if self.death_probability > 0.3 else "✓ "
        lines = [
            f"Floor {self.floor} Difficulty Analysis:",
            f"Death Probability: {round(self.death_probability * 100)}%",
            f"Player is {'UNDERPOWERED' if self.underpowered else 'adequately equipped'}",
            "",
            "Required Stats vs Player Stats:",
            f"Damage: {self.requirements.min_damage} (have: {self.player.total_damage:g})",
            f"Defense: {self.requirements.min_defense} (have: {self.player.total_defense:g})",
            f"Warmth: {self.requirements.min_warmth} (have: {self.player.max_warmth:g})",
            f"HP: {self.requirements.min_hp} (have: {self.player.max_hp:g})",
            "",
            marker + self.risk_band,
        ]
        return "\n".join(lines)
