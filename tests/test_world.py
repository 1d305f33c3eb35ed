from frostfall.components.condition_track import ConditionTrack
from frostfall.components.vitals import Vitals
from frostfall.context import create_rules_context
from frostfall.events.bus import EVENT_ENTITY_NOT_FOUND, EVENT_TURN_ADVANCED, EventBus
from frostfall.world import create_world


def test_advance_turn_ticks_tracked_entities(runtime, hero, villain):
    runtime.resolver.apply(hero, "slippery")
    runtime.resolver.apply(villain, "strength_boost")

    assert runtime.advance_turn() == 1
    assert not runtime.resolver.has_effect(hero, "slippery")
    assert runtime.resolver.entry(villain, "strength_boost").remaining_duration == 9


def test_advance_turn_limited_to_given_entities(runtime, hero, villain):
    runtime.resolver.apply(hero, "slippery")
    runtime.resolver.apply(villain, "slippery")

    runtime.advance_turn([villain])

    assert runtime.resolver.has_effect(hero, "slippery")
    assert not runtime.resolver.has_effect(villain, "slippery")


def test_advance_turn_skips_lazily_deleted_entities(runtime, hero, villain):
    missing = []
    runtime.event_bus.subscribe(EVENT_ENTITY_NOT_FOUND, lambda sender, **kwargs: missing.append(kwargs["entity"]))
    runtime.resolver.apply(hero, "wet")
    runtime.resolver.apply(villain, "wet")

    runtime.world.delete_entity(hero)
    for _ in range(3):
        runtime.advance_turn()

    assert missing == []
    assert runtime.resolver.entry(villain, "wet").remaining_duration == 97


def test_create_world_shares_the_given_bus():
    bus = EventBus()
    seen = []
    bus.subscribe(EVENT_TURN_ADVANCED, lambda sender, **kwargs: seen.append(kwargs["turn"]))

    runtime = create_world(bus)
    runtime.advance_turn()
    runtime.advance_turn()

    assert runtime.event_bus is bus
    assert seen == [0, 1]


def test_condition_track_attached_on_first_application(runtime):
    entity = runtime.spawn(Vitals(current_hp=5, max_hp=5))
    assert not runtime.world.has_component(entity, ConditionTrack)
    runtime.resolver.apply(entity, "wet")
    track = runtime.world.component_for_entity(entity, ConditionTrack)
    assert track.slugs() == ("wet",)


def test_separate_contexts_do_not_share_state():
    first = create_world(context=create_rules_context(seed=5))
    second = create_world(context=create_rules_context(seed=5))
    assert first.context.registry is not second.context.registry
    assert first.context.rng is not second.context.rng
    assert first.context.rng.random() == second.context.rng.random()


def test_vitals_clamp():
    vitals = Vitals(current_hp=140, max_hp=100, current_warmth=-3, max_warmth=50)
    vitals.clamp()
    assert (vitals.current_hp, vitals.current_warmth) == (100, 0.0)
    assert vitals.is_alive()
