from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from esper import World

from frostfall.components.condition_track import ConditionEntry, ConditionTrack
from frostfall.context import RulesContext
from frostfall.effects.registry import (
    ActionTarget,
    EffectDefinition,
    EffectKind,
    ModifierKind,
    StackPolicy,
    TriggerEvent,
)
from frostfall.events.bus import (
    EVENT_EFFECT_ACTION,
    EVENT_EFFECT_APPLIED,
    EVENT_EFFECT_APPLY,
    EVENT_EFFECT_CANCELLED,
    EVENT_EFFECT_DISPEL,
    EVENT_EFFECT_DISPELLED,
    EVENT_EFFECT_EXPIRED,
    EVENT_EFFECT_REFRESHED,
    EVENT_EFFECT_REMOVE,
    EVENT_EFFECT_REMOVED,
    EVENT_EFFECT_STACKED,
    EVENT_EFFECT_SYNERGY,
    EVENT_EFFECT_TRIGGER,
    EVENT_ENTITY_NOT_FOUND,
    EVENT_TURN_ADVANCED,
    EventBus,
)
from frostfall.exceptions import EntityNotFound, InvalidStackState
from frostfall.infra import get_logger

log = get_logger(__name__)

TRIGGERABLE_KINDS = (EffectKind.PASSIVE, EffectKind.TRIGGERED)
DEFENSIVE_KINDS = (ModifierKind.RESISTANCE, ModifierKind.IMMUNITY, ModifierKind.VULNERABILITY)
ALL_DAMAGE = "all_damage"


class Outcome(Enum):
    APPLIED = "applied"
    STACKED = "stacked"
    REFRESHED = "refreshed"
    UNCHANGED = "unchanged"
    CANCELLED = "cancelled"
    ENTITY_NOT_FOUND = "entity_not_found"


@dataclass(frozen=True, slots=True)
class TriggerContext:
    """Who and what caused a trigger; actions resolve their targets against it."""

    actor: int | None = None
    target: int | None = None
    damage: float = 0.0
    nearby_allies: tuple[int, ...] = ()
    nearby_enemies: tuple[int, ...] = ()
    flags: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class TriggeredAction:
    """A side effect the game should perform on behalf of an active effect."""

    effect: str
    type: str
    amount: float
    owner_entity: int
    source_entity: int | None
    targets: tuple[int, ...]
    target_kind: ActionTarget
    range: int | None = None
    turn: int | None = None
    trigger: TriggerEvent | None = None


@dataclass(frozen=True, slots=True)
class ApplyResult:
    outcome: Outcome
    slug: str
    stacks: int = 0
    remaining_duration: int = 0
    cancelled: tuple[str, ...] = ()
    synergies: tuple[str, ...] = ()
    actions: tuple[TriggeredAction, ...] = ()

    @property
    def changed(self) -> bool:
        return self.outcome not in (Outcome.UNCHANGED, Outcome.ENTITY_NOT_FOUND)


@dataclass(frozen=True, slots=True)
class NetModifier:
    additive: float = 0.0
    multiplicative: float = 1.0

    def apply(self, base: float) -> float:
        return (base + self.additive) * self.multiplicative


class EffectResolver:
    """Applies, stacks, ticks, triggers and expires effects on entities.

    Each entity's ``ConditionTrack`` is the only mutable state; modifier
    aggregates are recomputed from it and the catalog on every query.
    Unknown effect ids raise ``UnknownEffectError`` immediately, while stale
    entity ids turn the call into a no-op that is logged and reported.
    """

    def __init__(self, world: World, event_bus: EventBus, context: RulesContext):
        self.world = world
        self.event_bus = event_bus
        self.context = context
        self.registry = context.registry
        self.interactions = context.interactions
        self.event_bus.subscribe(EVENT_EFFECT_APPLY, self.on_effect_apply)
        self.event_bus.subscribe(EVENT_EFFECT_REMOVE, self.on_effect_remove)
        self.event_bus.subscribe(EVENT_EFFECT_DISPEL, self.on_effect_dispel)
        self.event_bus.subscribe(EVENT_EFFECT_TRIGGER, self.on_effect_trigger)
        self.event_bus.subscribe(EVENT_TURN_ADVANCED, self.on_turn_advanced)

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def on_effect_apply(self, sender, **kwargs):
        owner_entity = kwargs.get("owner_entity")
        slug = kwargs.get("slug")
        if owner_entity is None or slug is None:
            return
        self.apply(owner_entity, slug, kwargs.get("source_entity"), turn=kwargs.get("turn"))

    def on_effect_remove(self, sender, **kwargs):
        owner_entity = kwargs.get("owner_entity")
        if owner_entity is None:
            return
        slug = kwargs.get("slug")
        if slug is None:
            self.clear(owner_entity)
        else:
            self.remove(owner_entity, slug)

    def on_effect_dispel(self, sender, **kwargs):
        owner_entity = kwargs.get("owner_entity")
        if owner_entity is None:
            return
        slug = kwargs.get("slug")
        if slug is None:
            self.dispel_all(owner_entity)
        else:
            self.dispel(owner_entity, slug)

    def on_effect_trigger(self, sender, **kwargs):
        owner_entity = kwargs.get("owner_entity")
        trigger = kwargs.get("trigger")
        if owner_entity is None or trigger is None:
            return
        self.evaluate_trigger(owner_entity, TriggerEvent(trigger), kwargs.get("context"))

    def on_turn_advanced(self, sender, **kwargs):
        turn = kwargs.get("turn")
        if turn is None:
            return
        for entity in kwargs.get("entities") or ():
            self.tick(entity, turn)

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def apply(
        self,
        entity: int,
        slug: str,
        source_entity: int | None = None,
        *,
        turn: int | None = None,
    ) -> ApplyResult:
        definition = self.registry.lookup(slug)
        try:
            track = self._ensure_track(entity)
        except EntityNotFound:
            self._report_missing(entity, "apply")
            return ApplyResult(Outcome.ENTITY_NOT_FOUND, slug)

        # Cancelling pairs annihilate: the active partner goes, the incoming effect never lands.
        partners = self.interactions.cancels(slug)
        cancelled = tuple(active for active in track.slugs() if active in partners)
        if cancelled:
            for active in cancelled:
                self._discard(entity, track, active, reason="cancelled")
            log.debug("Entity %s: %s cancelled %s", entity, slug, cancelled)
            self.event_bus.emit(EVENT_EFFECT_CANCELLED, owner_entity=entity, slug=slug, cancelled=cancelled)
            return ApplyResult(Outcome.CANCELLED, slug, cancelled=cancelled)

        entry = track.get(slug)
        if entry is None:
            return self._apply_new(entity, track, definition, source_entity, turn)

        rule = definition.stacking
        if not rule.stackable or rule.policy is StackPolicy.NO_STACK:
            return ApplyResult(Outcome.UNCHANGED, slug, entry.stacks, entry.remaining_duration)

        if source_entity is not None:
            entry.source_entity = source_entity
        entry.remaining_duration = definition.duration
        if rule.policy is StackPolicy.EFFECT_STACK and entry.stacks < rule.max_stacks:
            entry.stacks += 1
            self.event_bus.emit(EVENT_EFFECT_STACKED, owner_entity=entity, slug=slug, stacks=entry.stacks)
            return ApplyResult(Outcome.STACKED, slug, entry.stacks, entry.remaining_duration)

        self.event_bus.emit(
            EVENT_EFFECT_REFRESHED,
            owner_entity=entity,
            slug=slug,
            remaining_turns=entry.remaining_duration,
        )
        return ApplyResult(Outcome.REFRESHED, slug, entry.stacks, entry.remaining_duration)

    def _apply_new(
        self,
        entity: int,
        track: ConditionTrack,
        definition: EffectDefinition,
        source_entity: int | None,
        turn: int | None,
    ) -> ApplyResult:
        entry = ConditionEntry(
            remaining_duration=definition.duration,
            source_entity=source_entity,
            applied_turn=turn,
        )
        track.entries[definition.slug] = entry
        log.debug("Entity %s gained %s (%s turns)", entity, definition.slug, definition.duration or "permanent")
        self.event_bus.emit(
            EVENT_EFFECT_APPLIED,
            owner_entity=entity,
            slug=definition.slug,
            source_entity=source_entity,
        )

        actions: list[TriggeredAction] = []
        if definition.kind is EffectKind.INSTANT:
            actions.extend(self._resolve_actions(entity, definition, entry, TriggerContext(), turn=turn))
            self._emit_actions(actions)

        synergies: list[str] = []
        for synergy in self.interactions.synergies_involving(definition.slug):
            if synergy.result in track or not all(slug in track for slug in synergy.effects):
                continue
            self.event_bus.emit(
                EVENT_EFFECT_SYNERGY,
                owner_entity=entity,
                synergy=synergy.name,
                result=synergy.result,
            )
            outcome = self.apply(entity, synergy.result, source_entity, turn=turn)
            if outcome.outcome is Outcome.APPLIED:
                synergies.append(synergy.result)
                synergies.extend(outcome.synergies)
                actions.extend(outcome.actions)

        return ApplyResult(
            Outcome.APPLIED,
            definition.slug,
            entry.stacks,
            entry.remaining_duration,
            synergies=tuple(synergies),
            actions=tuple(actions),
        )

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    def tick(self, entity: int, current_turn: int) -> list[TriggeredAction]:
        """Advance every effect on ``entity`` by one turn, in application order."""
        try:
            track = self._existing_track(entity)
        except EntityNotFound:
            self._report_missing(entity, "tick")
            return []
        if track is None:
            return []

        actions: list[TriggeredAction] = []
        for slug in track.slugs():
            entry = track.get(slug)
            if entry is None:
                continue
            definition = self.registry.lookup(slug)
            if not self._heal(entity, track, definition, entry):
                continue
            if definition.kind is EffectKind.OVER_TIME and self._interval_due(definition, entry, current_turn):
                entry.last_tick = current_turn
                actions.extend(
                    self._resolve_actions(entity, definition, entry, TriggerContext(), turn=current_turn)
                )
            if definition.is_permanent:
                continue
            entry.remaining_duration -= 1
            if entry.remaining_duration <= 0:
                self._expire(entity, track, slug)

        self._emit_actions(actions)
        return actions

    @staticmethod
    def _interval_due(definition: EffectDefinition, entry: ConditionEntry, current_turn: int) -> bool:
        if entry.last_tick is None:
            return True
        return current_turn - entry.last_tick >= definition.interval

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def evaluate_trigger(
        self,
        entity: int,
        trigger: TriggerEvent,
        context: TriggerContext | None = None,
    ) -> list[TriggeredAction]:
        try:
            track = self._existing_track(entity)
        except EntityNotFound:
            self._report_missing(entity, "evaluate_trigger")
            return []
        if track is None:
            return []

        context = context or TriggerContext()
        actions: list[TriggeredAction] = []
        for slug in track.slugs():
            entry = track.get(slug)
            if entry is None:
                continue
            definition = self.registry.lookup(slug)
            if definition.kind not in TRIGGERABLE_KINDS or trigger not in definition.triggers:
                continue
            roll = self.context.rng.uniform(0, 100)
            if roll >= definition.trigger_chance:
                continue
            actions.extend(self._resolve_actions(entity, definition, entry, context, trigger=trigger))

        self._emit_actions(actions)
        return actions

    def _resolve_actions(
        self,
        entity: int,
        definition: EffectDefinition,
        entry: ConditionEntry,
        context: TriggerContext,
        *,
        turn: int | None = None,
        trigger: TriggerEvent | None = None,
    ) -> list[TriggeredAction]:
        resolved: list[TriggeredAction] = []
        for action in definition.actions:
            if action.condition is not None and action.condition not in context.flags:
                continue
            amount = action.value * (context.damage if action.relative else 1) * entry.stacks
            resolved.append(
                TriggeredAction(
                    effect=definition.slug,
                    type=action.type,
                    amount=amount,
                    owner_entity=entity,
                    source_entity=entry.source_entity,
                    targets=self._action_targets(entity, entry, action.target, context),
                    target_kind=action.target,
                    range=action.range,
                    turn=turn,
                    trigger=trigger,
                )
            )
        return resolved

    @staticmethod
    def _action_targets(
        entity: int,
        entry: ConditionEntry,
        target: ActionTarget,
        context: TriggerContext,
    ) -> tuple[int, ...]:
        if target is ActionTarget.SELF:
            return (entity,)
        if target is ActionTarget.CASTER:
            return () if entry.source_entity is None else (entry.source_entity,)
        if target is ActionTarget.NEARBY_ALLIES:
            return context.nearby_allies
        return context.nearby_enemies

    def _emit_actions(self, actions: Iterable[TriggeredAction]) -> None:
        for action in actions:
            self.event_bus.emit(EVENT_EFFECT_ACTION, action=action)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_net_modifier(
        self,
        entity: int,
        stat_name: str,
        kinds: Iterable[ModifierKind] | None = None,
    ) -> NetModifier:
        """Fold the modifiers of every active effect that target ``stat_name``.

        Additive values sum, scaled by stack count. A multiplier grows its bonus
        linearly per stack (1.5 at two stacks is 2.0) unless the effect is
        listed in ``multiplicative_stacks``, where stacks compound (2.25).
        ``kinds`` narrows the modifier kinds that take part; by default all of
        them do.
        """
        wanted = frozenset(kinds) if kinds is not None else None
        additive = 0.0
        multiplicative = 1.0
        for definition, entry in self._active(entity, "get_net_modifier"):
            compound = self.interactions.stacks_multiplicatively(definition.slug)
            for modifier in definition.modifiers:
                if modifier.target != stat_name:
                    continue
                if wanted is not None and modifier.kind not in wanted:
                    continue
                if not modifier.is_multiplier:
                    additive += modifier.value * entry.stacks
                elif compound:
                    multiplicative *= modifier.value ** entry.stacks
                else:
                    multiplicative *= max(0.0, 1 + (modifier.value - 1) * entry.stacks)
        return NetModifier(additive, multiplicative)

    def damage_taken_multiplier(self, entity: int, damage_type: str) -> float:
        """Incoming damage factor from resistances, immunities and vulnerabilities."""
        vulnerability = 0.0
        protection = 0.0
        for definition, entry in self._active(entity, "damage_taken_multiplier"):
            for modifier in definition.modifiers:
                if modifier.kind not in DEFENSIVE_KINDS:
                    continue
                if modifier.target not in (damage_type, ALL_DAMAGE):
                    continue
                if modifier.kind is ModifierKind.VULNERABILITY:
                    vulnerability += modifier.value * entry.stacks
                else:
                    protection += modifier.value * entry.stacks
        return max(0.0, 1 + (vulnerability - protection) / 100)

    def active_effects(self, entity: int) -> tuple[str, ...]:
        try:
            track = self._existing_track(entity)
        except EntityNotFound:
            self._report_missing(entity, "active_effects")
            return ()
        return track.slugs() if track is not None else ()

    def has_effect(self, entity: int, slug: str) -> bool:
        return slug in self.active_effects(entity)

    def entry(self, entity: int, slug: str) -> ConditionEntry | None:
        try:
            track = self._existing_track(entity)
        except EntityNotFound:
            self._report_missing(entity, "entry")
            return None
        return track.get(slug) if track is not None else None

    def stacks(self, entity: int, slug: str) -> int:
        found = self.entry(entity, slug)
        return found.stacks if found is not None else 0

    def _active(self, entity: int, operation: str) -> list[tuple[EffectDefinition, ConditionEntry]]:
        try:
            track = self._existing_track(entity)
        except EntityNotFound:
            self._report_missing(entity, operation)
            return []
        if track is None:
            return []
        active: list[tuple[EffectDefinition, ConditionEntry]] = []
        for slug in track.slugs():
            entry = track.get(slug)
            if entry is None:
                continue
            definition = self.registry.lookup(slug)
            if self._heal(entity, track, definition, entry):
                active.append((definition, entry))
        return active

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def remove(self, entity: int, slug: str) -> bool:
        """Unconditional removal, used for unequip and death cleanup."""
        self.registry.lookup(slug)
        try:
            track = self._existing_track(entity)
        except EntityNotFound:
            self._report_missing(entity, "remove")
            return False
        if track is None or slug not in track:
            return False
        self._discard(entity, track, slug)
        return True

    def dispel(self, entity: int, slug: str) -> bool:
        """Cleanse-style removal; refused for effects that are not dispellable."""
        definition = self.registry.lookup(slug)
        try:
            track = self._existing_track(entity)
        except EntityNotFound:
            self._report_missing(entity, "dispel")
            return False
        if not definition.dispellable or track is None or slug not in track:
            return False
        del track.entries[slug]
        log.debug("Entity %s: %s dispelled", entity, slug)
        self.event_bus.emit(EVENT_EFFECT_DISPELLED, owner_entity=entity, slug=slug)
        return True

    def dispel_all(self, entity: int) -> list[str]:
        dispelled: list[str] = []
        for slug in self.active_effects(entity):
            if self.dispel(entity, slug):
                dispelled.append(slug)
        return dispelled

    def clear(self, entity: int) -> list[str]:
        removed: list[str] = []
        for slug in self.active_effects(entity):
            if self.remove(entity, slug):
                removed.append(slug)
        return removed

    def _discard(self, entity: int, track: ConditionTrack, slug: str, reason: str = "removed") -> None:
        track.entries.pop(slug, None)
        self.event_bus.emit(EVENT_EFFECT_REMOVED, owner_entity=entity, slug=slug, reason=reason)

    def _expire(self, entity: int, track: ConditionTrack, slug: str, reason: str = "duration") -> None:
        track.entries.pop(slug, None)
        log.debug("Entity %s: %s expired (%s)", entity, slug, reason)
        self.event_bus.emit(EVENT_EFFECT_EXPIRED, owner_entity=entity, slug=slug, reason=reason)

    # ------------------------------------------------------------------
    # Track bookkeeping
    # ------------------------------------------------------------------

    def _heal(
        self,
        entity: int,
        track: ConditionTrack,
        definition: EffectDefinition,
        entry: ConditionEntry,
    ) -> bool:
        """Repair a corrupt entry in place; returns False when it had to be purged."""
        stale = entry.remaining_duration < 0 or (not definition.is_permanent and entry.remaining_duration == 0)
        if stale:
            problem = InvalidStackState(entity, definition.slug, f"remaining duration {entry.remaining_duration}")
            log.warning("%s; purging", problem)
            self._expire(entity, track, definition.slug, reason="invalid_state")
            return False
        max_stacks = definition.stacking.max_stacks
        if not 1 <= entry.stacks <= max_stacks:
            problem = InvalidStackState(entity, definition.slug, f"{entry.stacks} stacks (max {max_stacks})")
            log.warning("%s; clamping", problem)
            entry.stacks = max(1, min(entry.stacks, max_stacks))
        return True

    def _existing_track(self, entity: int) -> ConditionTrack | None:
        if not self.world.entity_exists(entity):
            raise EntityNotFound(entity)
        try:
            return self.world.component_for_entity(entity, ConditionTrack)
        except KeyError:
            return None

    def _ensure_track(self, entity: int) -> ConditionTrack:
        track = self._existing_track(entity)
        if track is None:
            track = ConditionTrack()
            self.world.add_component(entity, track)
        return track

    def _report_missing(self, entity: int, operation: str) -> None:
        log.warning("Entity %s not found during %s; skipping", entity, operation)
        self.event_bus.emit(EVENT_ENTITY_NOT_FOUND, entity=entity, operation=operation)
