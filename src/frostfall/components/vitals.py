from dataclasses import dataclass


@dataclass(slots=True)
class Vitals:
    """Read-side stat provider for an entity, maintained by the surrounding game."""

    current_hp: int
    max_hp: int
    current_warmth: float = 0.0
    max_warmth: float = 0.0
    total_damage: int = 0
    total_defense: int = 0

    def clamp(self) -> None:
        self.current_hp = max(0, min(self.current_hp, self.max_hp))
        self.current_warmth = max(0.0, min(self.current_warmth, self.max_warmth))

    def is_alive(self) -> bool:
        return self.current_hp > 0
