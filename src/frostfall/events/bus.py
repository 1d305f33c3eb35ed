from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # weak=False keeps bound methods of systems that are not stored elsewhere alive.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# TURN SYSTEM
# ============================================================================
EVENT_TURN_ADVANCED = "turn_advanced"      # payload: entities=list[int], turn=int


# ============================================================================
# EFFECT REQUESTS (inbound)
# ============================================================================
EVENT_EFFECT_APPLY = "effect_apply"        # payload: owner_entity=int, slug=str, source_entity=int|None, turn=int|None
EVENT_EFFECT_REMOVE = "effect_remove"      # payload: owner_entity=int, slug=str|None (None clears every effect)
EVENT_EFFECT_DISPEL = "effect_dispel"      # payload: owner_entity=int, slug=str|None (None cleanses all dispellable)
EVENT_EFFECT_TRIGGER = "effect_trigger"    # payload: owner_entity=int, trigger=TriggerEvent, context=TriggerContext|None


# ============================================================================
# EFFECT LIFECYCLE (outbound)
# ============================================================================
EVENT_EFFECT_APPLIED = "effect_applied"        # payload: owner_entity=int, slug=str, source_entity=int|None
EVENT_EFFECT_REFRESHED = "effect_refreshed"    # payload: owner_entity=int, slug=str, remaining_turns=int
EVENT_EFFECT_STACKED = "effect_stacked"        # payload: owner_entity=int, slug=str, stacks=int
EVENT_EFFECT_CANCELLED = "effect_cancelled"    # payload: owner_entity=int, slug=str, cancelled=tuple[str, ...]
EVENT_EFFECT_SYNERGY = "effect_synergy"        # payload: owner_entity=int, synergy=str, result=str
EVENT_EFFECT_EXPIRED = "effect_expired"        # payload: owner_entity=int, slug=str, reason=str
EVENT_EFFECT_REMOVED = "effect_removed"        # payload: owner_entity=int, slug=str, reason=str
EVENT_EFFECT_DISPELLED = "effect_dispelled"    # payload: owner_entity=int, slug=str
EVENT_EFFECT_ACTION = "effect_action"          # payload: action=TriggeredAction


# ============================================================================
# DIAGNOSTICS
# ============================================================================
EVENT_ENTITY_NOT_FOUND = "entity_not_found"    # payload: entity=int, operation=str
