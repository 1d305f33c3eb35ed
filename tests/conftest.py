import sys, os

# Ensure src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)

import pytest

from frostfall.components.vitals import Vitals
from frostfall.world import create_world


@pytest.fixture
def runtime():
    return create_world(seed=7)


@pytest.fixture
def resolver(runtime):
    return runtime.resolver


@pytest.fixture
def hero(runtime):
    return runtime.spawn(
        Vitals(current_hp=80, max_hp=100, current_warmth=60, max_warmth=100, total_damage=12, total_defense=6)
    )


@pytest.fixture
def villain(runtime):
    return runtime.spawn(Vitals(current_hp=50, max_hp=50))


@pytest.fixture
def recorder(runtime):
    """Subscribe to bus events and collect their payloads by event name."""

    captured: dict[str, list[dict]] = {}

    def _listen(*names: str) -> dict[str, list[dict]]:
        for name in names:
            bucket = captured.setdefault(name, [])
            runtime.event_bus.subscribe(name, lambda sender, _bucket=bucket, **payload: _bucket.append(payload))
        return captured

    return _listen
