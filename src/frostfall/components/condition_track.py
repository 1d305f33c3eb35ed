from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class ConditionEntry:
    """Live record of one effect currently affecting the owner."""

    remaining_duration: int
    stacks: int = 1
    last_tick: int | None = None
    source_entity: int | None = None
    applied_turn: int | None = None


@dataclass(slots=True)
class ConditionTrack:
    """Insertion-ordered ledger of the effects applied to a single entity.

    Attached to the affected entity on its first application and deleted with
    it. Iteration order is application order, which keeps tick and expiry
    sequences reproducible.
    """

    entries: dict[str, ConditionEntry] = field(default_factory=dict)

    def __contains__(self, slug: object) -> bool:
        return slug in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, slug: str) -> ConditionEntry | None:
        return self.entries.get(slug)

    def slugs(self) -> tuple[str, ...]:
        return tuple(self.entries)
