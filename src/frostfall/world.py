from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from esper import World

from frostfall.balance.engine import BalanceCurveEngine
from frostfall.components.condition_track import ConditionTrack
from frostfall.components.vitals import Vitals
from frostfall.context import RulesContext, create_rules_context
from frostfall.events.bus import EVENT_TURN_ADVANCED, EventBus
from frostfall.systems.combat import CombatCalculator
from frostfall.systems.effect_resolver import EffectResolver


@dataclass(slots=True)
class RulesRuntime:
    """Everything a game loop owns to drive the rules core for one session."""

    world: World
    event_bus: EventBus
    context: RulesContext
    resolver: EffectResolver
    engine: BalanceCurveEngine
    combat: CombatCalculator
    turn: int = 0

    def spawn(self, vitals: Vitals, *components) -> int:
        return self.world.create_entity(vitals, *components)

    def advance_turn(self, entities: Iterable[int] | None = None) -> int:
        """Tick effects for ``entities`` (default: every tracked entity) and move the clock on."""
        if entities is None:
            # Lazily deleted entities linger in component queries until World.process().
            entities = [
                entity
                for entity, _ in self.world.get_component(ConditionTrack)
                if self.world.entity_exists(entity)
            ]
        self.event_bus.emit(EVENT_TURN_ADVANCED, entities=list(entities), turn=self.turn)
        self.turn += 1
        return self.turn


def create_world(
    event_bus: EventBus | None = None,
    *,
    context: RulesContext | None = None,
    seed: int | None = None,
) -> RulesRuntime:
    bus = event_bus or EventBus()
    rules = context or create_rules_context(seed=seed)
    world = World()
    resolver = EffectResolver(world, bus, rules)
    engine = BalanceCurveEngine(rules.balance)
    return RulesRuntime(
        world=world,
        event_bus=bus,
        context=rules,
        resolver=resolver,
        engine=engine,
        combat=CombatCalculator(world, resolver, engine),
    )
