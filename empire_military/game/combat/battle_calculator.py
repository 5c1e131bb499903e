"""
Battle calculation for unit groups.

This module turns live units into immutable combat snapshots (resolving
terrain and ability bonuses against the opposing group), sums effective
strength for round scoring and estimates attack odds for the AI. Group sums
are vectorized with numpy.
"""
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from ...core.data_structures import TerritoryData
from ...core.game_enums import CombatSide, SpecialAbility, UnitKind
from ...core.game_info import (
    ABILITY_BONUS, COMBAT_MECHANICS, MIN_WIN_PROBABILITY, WIN_PROBABILITY_TABLE, get_terrain_info
)
from ..doctrines import NEUTRAL_MODIFIERS, DoctrineModifiers
from ..unit import MilitaryUnit, UnitSnapshot
from ..unit_templates import UnitCatalog


@dataclass(frozen=True)
class AttackAssessment:
    """Estimated odds of attacking one territory from another."""
    attack_strength: float
    defense_strength: float
    strength_ratio: float
    win_probability: float


def win_probability_for_ratio(ratio: float) -> float:
    """Map an attack/defense strength ratio to a win probability."""
    for threshold, probability in WIN_PROBABILITY_TABLE:
        if ratio >= threshold:
            return probability
    return MIN_WIN_PROBABILITY


class BattleCalculator:
    """Strength and odds calculations over unit groups."""

    def __init__(self, unit_catalog: UnitCatalog):
        self.unit_catalog = unit_catalog

    # ============== Snapshots ==============

    def ability_bonus(
        self,
        ability: Optional[SpecialAbility],
        side: CombatSide,
        same_type_count: int,
        opponent_has_cavalry: bool,
        defender_territory: Optional[TerritoryData]
    ) -> float:
        """Flat strength bonus a unit's special ability grants in this combat."""
        if ability is SpecialAbility.ANTI_CAVALRY and opponent_has_cavalry:
            return ABILITY_BONUS["antiCavalry"]
        if ability is SpecialAbility.FORMATION_FIGHTING:
            return ABILITY_BONUS["formationFighting"] * max(0, same_type_count - 1)
        if ability is SpecialAbility.CHARGE and side is CombatSide.ATTACKER:
            return ABILITY_BONUS["charge"]
        if ability is SpecialAbility.VOLLEY_FIRE and side is CombatSide.DEFENDER:
            return ABILITY_BONUS["volleyFire"]
        if (ability is SpecialAbility.FORTIFICATION_DAMAGE and side is CombatSide.ATTACKER
                and defender_territory is not None and defender_territory.defensive_buildings):
            return ABILITY_BONUS["fortificationDamage"]
        return 0

    def snapshot_group(
        self,
        units: Sequence[MilitaryUnit],
        side: CombatSide,
        own_territory: Optional[TerritoryData],
        opposing_units: Sequence[MilitaryUnit],
        defender_territory: Optional[TerritoryData]
    ) -> tuple[UnitSnapshot, ...]:
        """Freeze a unit group for combat.

        Terrain bonuses use the side's own territory; ability bonuses are
        resolved against the opposing group as it stands right now.
        """
        type_counts = Counter(u.type_id for u in units)
        opponent_has_cavalry = any(
            self.unit_catalog.get(u.type_id).kind is UnitKind.CAVALRY for u in opposing_units
        )
        terrain_type = own_territory.type if own_territory else None

        snapshots = []
        for unit in units:
            unit_type = self.unit_catalog.get(unit.type_id)
            snapshots.append(UnitSnapshot(
                unit_id=unit.id,
                type_id=unit.type_id,
                kind=unit_type.kind,
                strength=unit.strength,
                health=unit.health,
                level=unit.level,
                special_ability=unit_type.special_ability,
                terrain_bonus=unit_type.terrain_bonus(terrain_type) if terrain_type else 0,
                ability_bonus=self.ability_bonus(
                    unit_type.special_ability, side, type_counts[unit.type_id],
                    opponent_has_cavalry, defender_territory
                ),
            ))
        return tuple(snapshots)

    # ============== Round scoring ==============

    @staticmethod
    def group_contribution(
        snapshots: Sequence[UnitSnapshot],
        side: CombatSide,
        modifiers: DoctrineModifiers = NEUTRAL_MODIFIERS
    ) -> float:
        """Unit-strength contribution of a side to its round score.

        Sum of effective strength divided by the strength divisor, scaled by
        the side's doctrine: terrain bonuses by (1 + terrain) and the whole
        contribution by (1 + attack or defense + strength).
        """
        if not snapshots:
            return 0.0

        strength = np.array([s.strength for s in snapshots], dtype=np.float64)
        health = np.array([s.health for s in snapshots], dtype=np.float64)
        level = np.array([s.level for s in snapshots], dtype=np.float64)
        terrain = np.array([s.terrain_bonus for s in snapshots], dtype=np.float64)
        ability = np.array([s.ability_bonus for s in snapshots], dtype=np.float64)

        base = strength * (health / 100) * (1 + COMBAT_MECHANICS["LEVEL_STRENGTH_BONUS"] * (level - 1))
        effective = base + terrain * (1 + modifiers.terrain) + ability

        role = modifiers.attack if side is CombatSide.ATTACKER else modifiers.defense
        scale = 1 + role + modifiers.strength
        return float(effective.sum()) / COMBAT_MECHANICS["UNIT_STRENGTH_DIVISOR"] * scale

    # ============== Attack assessment ==============

    def assessed_strength(self, units: Iterable[MilitaryUnit]) -> float:
        """Raw group strength used for attack odds."""
        units = list(units)
        if not units:
            return 0.0
        strength = np.array([u.strength for u in units], dtype=np.float64)
        health = np.array([u.health for u in units], dtype=np.float64)
        level = np.array([u.level for u in units], dtype=np.float64)
        level_factor = 1 + COMBAT_MECHANICS["ASSESSMENT_LEVEL_BONUS"] * (level - 1)
        return float(np.sum(strength * (health / 100) * level_factor))

    def unit_advantage(self, own_units: Iterable[MilitaryUnit], enemy_units: Iterable[MilitaryUnit]) -> float:
        """Bonus for unit-type matchups favouring the first group."""
        own_counts = Counter(u.type_id for u in own_units)
        enemy_counts = Counter(u.type_id for u in enemy_units)

        matchups = 0
        for own_id, own_count in own_counts.items():
            own_type = self.unit_catalog.get(own_id)
            for enemy_id, enemy_count in enemy_counts.items():
                enemy_type = self.unit_catalog.get(enemy_id)
                if enemy_id in own_type.advantage_against or own_id in enemy_type.vulnerable_to:
                    matchups += own_count * enemy_count
        return COMBAT_MECHANICS["UNIT_ADVANTAGE_BONUS"] * matchups

    def assess_attack(
        self,
        attacker_units: Sequence[MilitaryUnit],
        defender_units: Sequence[MilitaryUnit],
        defender_territory: TerritoryData
    ) -> AttackAssessment:
        """Estimate the odds of attacking a territory with a unit group."""
        terrain = get_terrain_info(defender_territory.type)

        attack = (self.assessed_strength(attacker_units)
                  + self.unit_advantage(attacker_units, defender_units)
                  + terrain.attack_modifier)
        defense = (self.assessed_strength(defender_units)
                   + self.unit_advantage(defender_units, attacker_units)
                   + terrain.defense_modifier)
        if defender_territory.owner is not None:
            defense += COMBAT_MECHANICS["HOME_TERRITORY_DEFENSE_BONUS"]

        ratio = attack / defense if defense > 0 else float("inf")
        return AttackAssessment(
            attack_strength=attack,
            defense_strength=defense,
            strength_ratio=ratio,
            win_probability=win_probability_for_ratio(ratio),
        )
