from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from frostfall.effects.registry import EffectRegistry
from frostfall.exceptions import InvalidDefinitionError


@dataclass(frozen=True, slots=True)
class Synergy:
    """When every effect in ``effects`` is active together, ``result`` is applied."""

    name: str
    effects: frozenset[str]
    result: str


@dataclass(frozen=True, slots=True)
class EffectInteractions:
    """Cross-effect rules: cancelling pairs, synergies and compounding stacks."""

    cancellations: tuple[tuple[str, str], ...] = ()
    synergies: tuple[Synergy, ...] = ()
    multiplicative_stacks: frozenset[str] = frozenset()
    _partners: dict[str, frozenset[str]] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        partners: dict[str, set[str]] = {}
        for first, second in self.cancellations:
            if first == second:
                raise InvalidDefinitionError(f"Effect '{first}' cannot cancel itself")
            partners.setdefault(first, set()).add(second)
            partners.setdefault(second, set()).add(first)
        self._partners.update({slug: frozenset(others) for slug, others in partners.items()})

    def cancels(self, slug: str) -> frozenset[str]:
        return self._partners.get(slug, frozenset())

    def stacks_multiplicatively(self, slug: str) -> bool:
        return slug in self.multiplicative_stacks

    def synergies_involving(self, slug: str) -> tuple[Synergy, ...]:
        return tuple(synergy for synergy in self.synergies if slug in synergy.effects)

    def validate(self, registry: EffectRegistry) -> None:
        """Fail fast if any interaction names an effect the catalog lacks."""
        for slug in self._referenced():
            registry.lookup(slug)

    def _referenced(self) -> Iterable[str]:
        for pair in self.cancellations:
            yield from pair
        for synergy in self.synergies:
            yield from synergy.effects
            yield synergy.result
        yield from self.multiplicative_stacks
