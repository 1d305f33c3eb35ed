from __future__ import annotations

from frostfall.effects.interactions import EffectInteractions, Synergy
from frostfall.effects.registry import (
    ActionTarget,
    EffectAction,
    EffectCategory,
    EffectDefinition,
    EffectKind,
    EffectModifier,
    EffectRegistry,
    ModifierKind,
    StackingRule,
    StackPolicy,
    TriggerEvent,
)

STAT = ModifierKind.STAT
RESISTANCE = ModifierKind.RESISTANCE
IMMUNITY = ModifierKind.IMMUNITY
VULNERABILITY = ModifierKind.VULNERABILITY

_STACK_THREE = StackingRule(stackable=True, max_stacks=3, policy=StackPolicy.EFFECT_STACK)
_REFRESH = StackingRule(stackable=True, max_stacks=1, policy=StackPolicy.DURATION_REFRESH)


def ensure_default_effects_registered(registry: EffectRegistry) -> None:
    """Register core effect definitions if they are not already present."""

    def _register(definition: EffectDefinition) -> None:
        if registry.has(definition.slug):
            return
        registry.register(definition)

    # Attribute boosts
    for stat in ("strength", "dexterity", "intelligence"):
        _register(
            EffectDefinition(
                slug=f"{stat}_boost",
                display_name=f"{stat.title()} Boost",
                kind=EffectKind.BUFF,
                description=f"+5 {stat.title()}",
                duration=10,
                modifiers=(EffectModifier(STAT, stat, 5),),
                stacking=_STACK_THREE,
                dispellable=True,
                tags=("buff", "temporary"),
                category=EffectCategory.BUFF,
            )
        )

    # Percentage boosts; these compound per stack (see default_interactions)
    for slug, stat, factor in (
        ("speed_boost", "speed", 1.2),
        ("damage_boost", "damage", 1.25),
        ("defense_boost", "defense", 1.1),
    ):
        _register(
            EffectDefinition(
                slug=slug,
                display_name=f"{stat.title()} Boost",
                kind=EffectKind.BUFF,
                description=f"+{round((factor - 1) * 100)}% {stat.title()}",
                duration=10,
                modifiers=(EffectModifier(STAT, stat, factor, is_multiplier=True),),
                stacking=_STACK_THREE,
                dispellable=True,
                tags=("buff", "temporary"),
                category=EffectCategory.BUFF,
            )
        )

    # Status conditions
    _register(
        EffectDefinition(
            slug="frozen",
            display_name="Frozen",
            kind=EffectKind.DEBUFF,
            description="Unable to move or act.",
            duration=3,
            modifiers=(
                EffectModifier(STAT, "speed", 0),
                EffectModifier(IMMUNITY, "fire_damage", -50),
                EffectModifier(VULNERABILITY, "physical_damage", 25),
            ),
            dispellable=True,
            tags=("debuff", "immobilize", "ice"),
            category=EffectCategory.DEBUFF,
        )
    )
    _register(
        EffectDefinition(
            slug="burning",
            display_name="Burning",
            kind=EffectKind.OVER_TIME,
            description="Taking fire damage over time.",
            duration=5,
            tick_interval=1,
            actions=(EffectAction("damage", 3),),
            modifiers=(
                EffectModifier(VULNERABILITY, "fire_damage", 50),
                EffectModifier(IMMUNITY, "ice_damage", -30),
            ),
            dispellable=True,
            tags=("debuff", "damage_over_time", "fire"),
            category=EffectCategory.DEBUFF,
        )
    )
    _register(
        EffectDefinition(
            slug="poisoned",
            display_name="Poisoned",
            kind=EffectKind.OVER_TIME,
            description="Taking poison damage and reduced healing.",
            duration=8,
            tick_interval=2,
            actions=(EffectAction("damage", 2),),
            modifiers=(EffectModifier(STAT, "healing_received", 0.5, is_multiplier=True),),
            dispellable=True,
            tags=("debuff", "damage_over_time", "poison"),
            category=EffectCategory.DEBUFF,
        )
    )
    _register(
        EffectDefinition(
            slug="slowed",
            display_name="Slowed",
            kind=EffectKind.DEBUFF,
            description="Movement and action speed reduced.",
            duration=5,
            modifiers=(
                EffectModifier(STAT, "speed", 0.7, is_multiplier=True),
                EffectModifier(STAT, "action_speed", 0.8, is_multiplier=True),
            ),
            dispellable=True,
            tags=("debuff", "movement", "speed"),
            category=EffectCategory.DEBUFF,
        )
    )
    _register(
        EffectDefinition(
            slug="hasted",
            display_name="Hasted",
            kind=EffectKind.BUFF,
            description="Movement and action speed increased.",
            duration=5,
            modifiers=(
                EffectModifier(STAT, "speed", 1.5, is_multiplier=True),
                EffectModifier(STAT, "action_speed", 1.25, is_multiplier=True),
            ),
            stacking=_REFRESH,
            dispellable=True,
            tags=("buff", "movement", "speed"),
            category=EffectCategory.BUFF,
        )
    )
    _register(
        EffectDefinition(
            slug="weakened",
            display_name="Weakened",
            kind=EffectKind.DEBUFF,
            description="-5 Strength",
            duration=6,
            modifiers=(EffectModifier(STAT, "strength", -5),),
            dispellable=True,
            tags=("debuff", "combat"),
            category=EffectCategory.DEBUFF,
        )
    )

    # Holiday-themed effects
    _register(
        EffectDefinition(
            slug="christmas_spirit",
            display_name="Christmas Spirit",
            kind=EffectKind.BUFF,
            description="Feeling festive! All stats increased.",
            duration=15,
            modifiers=(
                EffectModifier(STAT, "strength", 3),
                EffectModifier(STAT, "dexterity", 3),
                EffectModifier(STAT, "intelligence", 3),
                EffectModifier(STAT, "luck", 5),
            ),
            tags=("buff", "festive", "all_stats", "temporary"),
            category=EffectCategory.BUFF,
        )
    )
    _register(
        EffectDefinition(
            slug="warmth_aura",
            display_name="Warmth Aura",
            kind=EffectKind.AURA,
            description="Radiating comforting warmth to nearby allies.",
            duration=10,
            actions=(EffectAction("warmth_restore", 2, ActionTarget.NEARBY_ALLIES, range=3),),
            modifiers=(
                EffectModifier(IMMUNITY, "cold_damage", 100),
                EffectModifier(RESISTANCE, "ice_damage", 50),
            ),
            dispellable=True,
            tags=("buff", "aura", "warmth", "support"),
            category=EffectCategory.BUFF,
        )
    )
    _register(
        EffectDefinition(
            slug="naughty_list",
            display_name="Naughty List",
            kind=EffectKind.DEBUFF,
            description="Santa knows what you did... Krampus hunts you.",
            duration=0,
            actions=(EffectAction("increase_krampus_aggro", 100),),
            modifiers=(EffectModifier(STAT, "luck", -10),),
            tags=("curse", "permanent", "krampus", "unlucky"),
            category=EffectCategory.DEBUFF,
        )
    )

    # Triggered effects
    _register(
        EffectDefinition(
            slug="berserker_rage",
            display_name="Berserker Rage",
            kind=EffectKind.TRIGGERED,
            description="When health is low, gain a massive damage bonus.",
            duration=5,
            triggers=frozenset({TriggerEvent.ON_LOW_HEALTH}),
            trigger_chance=100,
            modifiers=(
                EffectModifier(STAT, "damage", 2.0, is_multiplier=True),
                EffectModifier(VULNERABILITY, "all_damage", 50),
            ),
            tags=("triggered", "combat", "high_risk"),
            category=EffectCategory.BUFF,
        )
    )
    _register(
        EffectDefinition(
            slug="vampiric_aura",
            display_name="Vampiric Aura",
            kind=EffectKind.TRIGGERED,
            description="Heal for a portion of damage dealt.",
            triggers=frozenset({TriggerEvent.ON_HIT}),
            trigger_chance=100,
            actions=(EffectAction("heal", 0.2, relative=True),),
            tags=("triggered", "lifesteal", "combat"),
        )
    )

    # Environmental effects
    _register(
        EffectDefinition(
            slug="wet",
            display_name="Wet",
            kind=EffectKind.DEBUFF,
            description="Soaked with water.",
            duration=100,
            modifiers=(
                EffectModifier(VULNERABILITY, "cold_damage", 25),
                EffectModifier(RESISTANCE, "fire_damage", 50),
            ),
            stacking=_REFRESH,
            dispellable=True,
            tags=("debuff", "environmental", "water"),
            category=EffectCategory.DEBUFF,
        )
    )
    _register(
        EffectDefinition(
            slug="slippery",
            display_name="Slippery",
            kind=EffectKind.DEBUFF,
            description="Movement is unpredictable on ice.",
            duration=1,
            modifiers=(EffectModifier(STAT, "movement_control", 0.5, is_multiplier=True),),
            stacking=_REFRESH,
            tags=("debuff", "environmental", "ice", "movement"),
            category=EffectCategory.DEBUFF,
        )
    )
    _register(
        EffectDefinition(
            slug="trudging",
            display_name="Trudging",
            kind=EffectKind.DEBUFF,
            description="Moving slowly through deep snow.",
            duration=1,
            modifiers=(EffectModifier(STAT, "speed", 0.6, is_multiplier=True),),
            stacking=_REFRESH,
            tags=("debuff", "environmental", "snow", "movement"),
            category=EffectCategory.DEBUFF,
        )
    )
    _register(
        EffectDefinition(
            slug="warmth",
            display_name="Warmth",
            kind=EffectKind.BUFF,
            description="Feeling warm and cozy.",
            duration=50,
            modifiers=(EffectModifier(RESISTANCE, "cold_damage", 50),),
            actions=(EffectAction("warmth_restore", 5),),
            stacking=_REFRESH,
            tags=("buff", "environmental", "warmth", "comfort"),
            category=EffectCategory.BUFF,
        )
    )

    # Synergy ingredients and results
    _register(
        EffectDefinition(
            slug="oil_coating",
            display_name="Oil Coating",
            kind=EffectKind.DEBUFF,
            description="Slick with flammable oil.",
            duration=6,
            modifiers=(EffectModifier(VULNERABILITY, "fire_damage", 25),),
            stacking=_REFRESH,
            dispellable=True,
            tags=("debuff", "environmental", "flammable"),
            category=EffectCategory.DEBUFF,
        )
    )
    _register(
        EffectDefinition(
            slug="shatter_strike",
            display_name="Shatter Strike",
            kind=EffectKind.DEBUFF,
            description="Struck with a blow that cracks ice.",
            duration=1,
            modifiers=(EffectModifier(VULNERABILITY, "physical_damage", 10),),
            tags=("debuff", "combat"),
            category=EffectCategory.DEBUFF,
        )
    )
    _register(
        EffectDefinition(
            slug="explosive_combustion",
            display_name="Explosive Combustion",
            kind=EffectKind.INSTANT,
            description="Burning oil erupts in a fireball.",
            duration=1,
            actions=(EffectAction("damage", 12, ActionTarget.NEARBY_ENEMIES, range=2),),
            tags=("debuff", "fire", "synergy"),
            category=EffectCategory.DEBUFF,
        )
    )
    _register(
        EffectDefinition(
            slug="ice_explosion",
            display_name="Ice Explosion",
            kind=EffectKind.INSTANT,
            description="Frozen flesh shatters violently.",
            duration=1,
            actions=(EffectAction("damage", 15),),
            tags=("debuff", "ice", "synergy"),
            category=EffectCategory.DEBUFF,
        )
    )


def default_interactions() -> EffectInteractions:
    return EffectInteractions(
        cancellations=(
            ("frozen", "burning"),
            ("slowed", "hasted"),
            ("weakened", "strength_boost"),
        ),
        synergies=(
            Synergy("burning_and_oil", frozenset({"burning", "oil_coating"}), "explosive_combustion"),
            Synergy("frozen_and_shatter", frozenset({"frozen", "shatter_strike"}), "ice_explosion"),
        ),
        multiplicative_stacks=frozenset({"speed_boost", "damage_boost", "defense_boost"}),
    )


def create_default_registry() -> EffectRegistry:
    registry = EffectRegistry()
    ensure_default_effects_registered(registry)
    return registry
