"""Military unit instances and their immutable combat snapshots."""

from dataclasses import dataclass, field
from typing import Optional

from ..core.game_enums import SpecialAbility, UnitKind
from ..core.game_info import COMBAT_MECHANICS
from .unit_templates import UnitType


@dataclass
class MilitaryUnit:
    """A unit on the map.

    A unit is owned by the territory it occupies; the unit manager moves it
    between territory collections, it is never shared.
    """
    id: str
    type_id: str
    strength: int
    moves_left: int
    position: str
    health: int = 100
    experience: int = 0
    level: int = 1
    specializations: set[str] = field(default_factory=set)

    @classmethod
    def from_type(cls, unit_id: str, unit_type: UnitType, position: str, moves_left: Optional[int] = None) -> "MilitaryUnit":
        """Create a fresh unit at full health."""
        return cls(
            id=unit_id,
            type_id=unit_type.id,
            strength=unit_type.strength,
            moves_left=unit_type.movement_range if moves_left is None else moves_left,
            position=position,
        )

    @property
    def is_veteran(self) -> bool:
        return self.level > 1

    def take_damage(self, damage: int) -> int:
        """Apply damage without ever killing the unit. Returns the new health."""
        self.health = max(1, self.health - damage)
        return self.health

    def gain_experience(self, amount: int) -> int:
        """Add experience, levelling up each time it reaches a full level.

        Returns:
            Number of levels gained
        """
        per_level = COMBAT_MECHANICS["EXPERIENCE_PER_LEVEL"]
        self.experience += amount
        levels = 0
        while self.experience >= per_level:
            self.experience -= per_level
            self.level += 1
            levels += 1
        return levels


@dataclass(frozen=True)
class UnitSnapshot:
    """Immutable copy of a unit taken when combat starts.

    Bonuses are resolved at snapshot time against the opposing group and the
    territory, so later changes to the live unit never affect scoring.
    """
    unit_id: str
    type_id: str
    kind: UnitKind
    strength: int
    health: int
    level: int
    special_ability: Optional[SpecialAbility] = None
    terrain_bonus: float = 0.0
    ability_bonus: float = 0.0

    @property
    def base_effective_strength(self) -> float:
        """Strength scaled by health and level, before flat bonuses."""
        level_factor = 1 + COMBAT_MECHANICS["LEVEL_STRENGTH_BONUS"] * (self.level - 1)
        return self.strength * (self.health / 100) * level_factor

    @property
    def effective_strength(self) -> float:
        return self.base_effective_strength + self.terrain_bonus + self.ability_bonus
