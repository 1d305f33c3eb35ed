from frostfall.events.bus import EVENT_EFFECT_APPLIED, EventBus


def test_event_bus_emit_subscribe():
    bus = EventBus()
    received = {}

    def handler(sender, **kwargs):
        received.update(kwargs)

    bus.subscribe(EVENT_EFFECT_APPLIED, handler)
    bus.emit(EVENT_EFFECT_APPLIED, owner_entity=3, slug="wet")

    assert received == {"owner_entity": 3, "slug": "wet"}


def test_unsubscribed_handler_stops_receiving():
    bus = EventBus()
    received = []

    def handler(sender, **kwargs):
        received.append(kwargs["slug"])

    bus.subscribe(EVENT_EFFECT_APPLIED, handler)
    bus.emit(EVENT_EFFECT_APPLIED, slug="wet")
    bus.unsubscribe(EVENT_EFFECT_APPLIED, handler)
    bus.emit(EVENT_EFFECT_APPLIED, slug="frozen")

    assert received == ["wet"]


def test_emit_without_subscribers_is_silent():
    bus = EventBus()
    bus.unsubscribe("never_subscribed", lambda sender, **kwargs: None)
    bus.emit("never_subscribed", value=1)
