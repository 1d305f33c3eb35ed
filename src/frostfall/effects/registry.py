from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

from frostfall.exceptions import InvalidDefinitionError, UnknownEffectError
from frostfall.infra import get_logger

log = get_logger(__name__)


class EffectKind(Enum):
    INSTANT = "instant"
    OVER_TIME = "over_time"
    BUFF = "buff"
    DEBUFF = "debuff"
    AURA = "aura"
    TRIGGERED = "triggered"
    PASSIVE = "passive"


class TriggerEvent(Enum):
    ON_CAST = "on_cast"
    ON_HIT = "on_hit"
    ON_TAKE_DAMAGE = "on_take_damage"
    ON_KILL = "on_kill"
    ON_TURN_START = "on_turn_start"
    ON_TURN_END = "on_turn_end"
    ON_MOVE = "on_move"
    ON_USE_ITEM = "on_use_item"
    ON_EQUIP = "on_equip"
    ON_UNEQUIP = "on_unequip"
    ON_LOW_HEALTH = "on_low_health"
    ON_LOW_WARMTH = "on_low_warmth"


class ModifierKind(Enum):
    STAT = "stat"
    RESISTANCE = "resistance"
    IMMUNITY = "immunity"
    VULNERABILITY = "vulnerability"


class ActionTarget(Enum):
    SELF = "self"
    CASTER = "caster"
    NEARBY_ALLIES = "nearby_allies"
    NEARBY_ENEMIES = "nearby_enemies"


class StackPolicy(Enum):
    DURATION_REFRESH = "duration_refresh"
    EFFECT_STACK = "effect_stack"
    NO_STACK = "no_stack"


class EffectCategory(Enum):
    BUFF = "buff"
    DEBUFF = "debuff"
    NEUTRAL = "neutral"


@dataclass(frozen=True, slots=True)
class EffectModifier:
    kind: ModifierKind
    target: str
    value: float
    is_multiplier: bool = False


@dataclass(frozen=True, slots=True)
class EffectAction:
    """Side-effecting operation an effect asks the game to perform.

    ``relative`` actions scale ``value`` by the damage carried in the trigger
    context (lifesteal style); the rest use ``value`` as a flat amount.
    """

    type: str
    value: float
    target: ActionTarget = ActionTarget.SELF
    range: int | None = None
    condition: str | None = None
    relative: bool = False


@dataclass(frozen=True, slots=True)
class StackingRule:
    stackable: bool = False
    max_stacks: int = 1
    policy: StackPolicy = StackPolicy.NO_STACK


@dataclass(frozen=True, slots=True)
class EffectDefinition:
    """Static description for an effect type.

    ``duration`` counts turns; zero means the effect stays until something
    removes it explicitly (dispel, unequip, death cleanup).
    """

    slug: str
    display_name: str
    kind: EffectKind
    description: str = ""
    duration: int = 0
    tick_interval: int | None = None
    triggers: frozenset[TriggerEvent] = frozenset()
    trigger_chance: float = 100.0
    modifiers: tuple[EffectModifier, ...] = ()
    actions: tuple[EffectAction, ...] = ()
    stacking: StackingRule = field(default_factory=StackingRule)
    dispellable: bool = False
    tags: tuple[str, ...] = ()
    category: EffectCategory = EffectCategory.NEUTRAL

    def __post_init__(self) -> None:
        if not self.slug:
            raise InvalidDefinitionError("Effect definitions need a slug")
        if self.duration < 0:
            raise InvalidDefinitionError(f"Effect '{self.slug}' has negative duration {self.duration}")
        if self.tick_interval is not None and self.tick_interval < 1:
            raise InvalidDefinitionError(f"Effect '{self.slug}' tick interval must be >= 1")
        if not 0 <= self.trigger_chance <= 100:
            raise InvalidDefinitionError(f"Effect '{self.slug}' trigger chance {self.trigger_chance} outside [0, 100]")
        if self.stacking.max_stacks < 1:
            raise InvalidDefinitionError(f"Effect '{self.slug}' max stacks must be >= 1")

    @property
    def is_permanent(self) -> bool:
        return self.duration == 0

    @property
    def interval(self) -> int:
        return self.tick_interval or 1


class EffectRegistry:
    """In-memory catalog of effect definitions, read-only once the game starts."""

    def __init__(self, definitions: Iterable[EffectDefinition] = ()) -> None:
        self._definitions: dict[str, EffectDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: EffectDefinition) -> None:
        if definition.slug in self._definitions:
            raise InvalidDefinitionError(f"Effect '{definition.slug}' already registered")
        self._definitions[definition.slug] = definition

    def lookup(self, slug: str) -> EffectDefinition:
        try:
            return self._definitions[slug]
        except KeyError:
            log.error("Effect '%s' requested but not registered", slug)
            raise UnknownEffectError(slug) from None

    get = lookup

    def has(self, slug: str) -> bool:
        return slug in self._definitions

    def all(self) -> tuple[EffectDefinition, ...]:
        return tuple(self._definitions.values())

    def load_mapping(self, mapping: Mapping[str, Mapping[str, Any]]) -> None:
        for slug, data in mapping.items():
            self.register(definition_from_mapping(slug, data))

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, slug: object) -> bool:
        return slug in self._definitions

    # Category queries

    def buffs(self) -> tuple[EffectDefinition, ...]:
        return self._filter(lambda d: d.category is EffectCategory.BUFF)

    def debuffs(self) -> tuple[EffectDefinition, ...]:
        return self._filter(lambda d: d.category is EffectCategory.DEBUFF)

    def temporary(self) -> tuple[EffectDefinition, ...]:
        return self._filter(lambda d: not d.is_permanent)

    def permanent(self) -> tuple[EffectDefinition, ...]:
        return self._filter(lambda d: d.is_permanent)

    def dispellable(self) -> tuple[EffectDefinition, ...]:
        return self._filter(lambda d: d.dispellable)

    def by_kind(self, kind: EffectKind) -> tuple[EffectDefinition, ...]:
        return self._filter(lambda d: d.kind is kind)

    def by_tag(self, tag: str) -> tuple[EffectDefinition, ...]:
        return self._filter(lambda d: tag in d.tags)

    def triggered(self) -> tuple[EffectDefinition, ...]:
        return self._filter(lambda d: bool(d.triggers))

    def _filter(self, predicate) -> tuple[EffectDefinition, ...]:
        return tuple(d for d in self._definitions.values() if predicate(d))


def definition_from_mapping(slug: str, data: Mapping[str, Any]) -> EffectDefinition:
    """Build a definition from a plain key/value mapping (JSON-style content)."""

    try:
        kind = EffectKind(data["type"])
        modifiers = tuple(
            EffectModifier(
                kind=ModifierKind(entry["type"]),
                target=str(entry["target"]),
                value=float(entry["value"]),
                is_multiplier=bool(entry.get("isMultiplier", False)),
            )
            for entry in data.get("modifiers", ())
        )
        actions = tuple(
            EffectAction(
                type=str(entry["type"]),
                value=float(entry["value"]),
                target=ActionTarget(entry.get("target", "self")),
                range=entry.get("range"),
                condition=entry.get("condition"),
                relative=bool(entry.get("relative", False)),
            )
            for entry in data.get("actions", ())
        )
        stacking = StackingRule(
            stackable=bool(data.get("stackable", False)),
            max_stacks=int(data.get("maxStacks", 1)),
            policy=StackPolicy(data.get("stackType", "no_stack")),
        )
        return EffectDefinition(
            slug=slug,
            display_name=str(data.get("name", slug)),
            kind=kind,
            description=str(data.get("description", "")),
            duration=int(data.get("duration", 0)),
            tick_interval=int(data["tickInterval"]) if data.get("tickInterval") is not None else None,
            triggers=frozenset(TriggerEvent(t) for t in data.get("triggers", ())),
            trigger_chance=float(data.get("triggerChance", 100)),
            modifiers=modifiers,
            actions=actions,
            stacking=stacking,
            dispellable=bool(data.get("dispellable", False)),
            tags=tuple(data.get("tags", ())),
            category=EffectCategory(data.get("category", "neutral")),
        )
    except (KeyError, TypeError, ValueError) as exc:
        if isinstance(exc, InvalidDefinitionError):
            raise
        raise InvalidDefinitionError(f"Effect '{slug}' is malformed: {exc}") from exc
