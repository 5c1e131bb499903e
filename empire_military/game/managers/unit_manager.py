"""
Unit lifecycle management.

This module owns every military unit instance, indexed by the territory that
holds it. It creates units (training), relocates them (movement), changes
their type (upgrades), applies combat results and computes upkeep. Resource
payment and worker conversion belong to external collaborators and are
passed in as callables.
"""
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ...core.data_structures import CostMap, merge_costs
from ...core.events import LogMessage, UnitDamaged, UnitLeveledUp, UnitMoved, UnitTrained, UnitUpgraded
from ...core.game_info import COMBAT_MECHANICS
from ..doctrines import NEUTRAL_MODIFIERS
from ..unit import MilitaryUnit

if TYPE_CHECKING:
    from ...core.event_manager import EventManager
    from ...core.interfaces import CanAfford, ConvertWorker, HasWorker, PayResources, RestoreWorker, WorldView
    from ..doctrines import DoctrineModifiers, DoctrineRegistry
    from ..unit_templates import UnitCatalog, UnitType


@dataclass(frozen=True)
class UnitChange:
    """Health and experience change applied to one unit after combat."""
    unit_id: str
    territory_id: str
    health_before: int
    health_after: int
    experience_gained: int
    levels_gained: int = 0
    new_specialization: Optional[str] = None


class UnitLifecycleManager:
    """Creates, moves, upgrades and damages unit instances."""

    def __init__(
        self,
        unit_catalog: "UnitCatalog",
        world: "WorldView",
        event_manager: "EventManager",
        doctrines: Optional["DoctrineRegistry"] = None
    ):
        self.unit_catalog = unit_catalog
        self.world = world
        self.event_manager = event_manager
        self.doctrines = doctrines

        self._units_by_territory: dict[str, list[MilitaryUnit]] = {}
        self._territory_of_unit: dict[str, str] = {}
        self._next_unit_number = 1

    # ============== Helpers ==============

    def _modifiers(self) -> "DoctrineModifiers":
        return self.doctrines.current_modifiers() if self.doctrines is not None else NEUTRAL_MODIFIERS

    def _new_unit_id(self, unit_type_id: str) -> str:
        unit_id = f"{unit_type_id}_{self._next_unit_number}"
        self._next_unit_number += 1
        return unit_id

    def max_moves(self, unit_type: "UnitType") -> int:
        """Moves per turn for a type under the current doctrine (never below 1)."""
        return max(1, unit_type.movement_range + self._modifiers().movement)

    def training_cost(self, unit_type: "UnitType") -> CostMap:
        """Full cost of training a type: discounted production plus required resources."""
        discount = self._modifiers().production_discount
        production = math.floor(unit_type.production_cost * (1 - discount))
        return merge_costs({"production": production}, unit_type.required_resources)

    def _emit_log(self, message: str, category: str = "TRAINING", level: str = "INFO") -> None:
        """Emit a log message event."""
        self.event_manager.publish(
            LogMessage(message=message, category=category, level=level, source="UnitLifecycleManager"),
            source="UnitLifecycleManager"
        )

    # ============== Queries ==============

    def units_in_territory(self, territory_id: str) -> list[MilitaryUnit]:
        """Units in a territory (a copy of the list; the units are live)."""
        return list(self._units_by_territory.get(territory_id, []))

    def get_unit(self, unit_id: str) -> Optional[MilitaryUnit]:
        territory_id = self._territory_of_unit.get(unit_id)
        if territory_id is None:
            return None
        for unit in self._units_by_territory[territory_id]:
            if unit.id == unit_id:
                return unit
        return None

    def all_units(self) -> list[MilitaryUnit]:
        return [unit for units in self._units_by_territory.values() for unit in units]

    def find_territory_of(self, unit_id: str) -> Optional[str]:
        return self._territory_of_unit.get(unit_id)

    def territory_ids(self) -> list[str]:
        """Territories currently holding at least one unit."""
        return [tid for tid, units in self._units_by_territory.items() if units]

    def count_by_type(self, territory_ids: Optional[list[str]] = None) -> dict[str, int]:
        """Number of units of each type, optionally limited to some territories."""
        counts: dict[str, int] = {}
        ids = territory_ids if territory_ids is not None else list(self._units_by_territory)
        for tid in ids:
            for unit in self._units_by_territory.get(tid, []):
                counts[unit.type_id] = counts.get(unit.type_id, 0) + 1
        return counts

    # ============== Placement ==============

    def add_unit(self, unit: MilitaryUnit, territory_id: Optional[str] = None) -> MilitaryUnit:
        """Place an existing unit in a territory (scenario setup)."""
        if unit.id in self._territory_of_unit:
            raise ValueError(f"Unit {unit.id!r} is already placed")
        territory_id = territory_id or unit.position
        unit.position = territory_id
        self._units_by_territory.setdefault(territory_id, []).append(unit)
        self._territory_of_unit[unit.id] = territory_id
        return unit

    def spawn(self, territory_id: str, unit_type_id: str) -> MilitaryUnit:
        """Create a unit without paying for it (scenario setup)."""
        unit_type = self.unit_catalog.get(unit_type_id)
        unit = MilitaryUnit.from_type(self._new_unit_id(unit_type_id), unit_type, territory_id, self.max_moves(unit_type))
        return self.add_unit(unit)

    def remove_unit(self, unit_id: str) -> Optional[MilitaryUnit]:
        territory_id = self._territory_of_unit.pop(unit_id, None)
        if territory_id is None:
            return None
        units = self._units_by_territory[territory_id]
        for index, unit in enumerate(units):
            if unit.id == unit_id:
                return units.pop(index)
        return None

    # ============== Lifecycle ==============

    def train(
        self,
        territory_id: str,
        unit_type_id: str,
        pay_resources: "PayResources",
        convert_worker: "ConvertWorker",
        *,
        can_afford: "CanAfford",
        has_worker: Optional["HasWorker"] = None,
        restore_worker: Optional["RestoreWorker"] = None
    ) -> Optional[MilitaryUnit]:
        """Train a new unit in a territory.

        Affordability, and worker availability when has_worker is given, are
        checked before any side effect. If payment still fails after workers
        were converted, the workers are restored and training fails.

        Args:
            territory_id: Territory the unit is trained in
            unit_type_id: Catalog id of the unit type
            pay_resources: Deducts a cost map, returns success
            convert_worker: Turns one worker of the territory into a soldier
            can_afford: Affordability check run before committing anything
            has_worker: Optional worker availability check run before committing
            restore_worker: Optional undo for convert_worker

        Returns:
            The new unit, or None if training failed

        Raises:
            NotFoundError: If the unit type is not in the catalog
        """
        unit_type = self.unit_catalog.get(unit_type_id)
        cost = self.training_cost(unit_type)

        if not can_afford(cost):
            self._emit_log(f"Cannot afford {unit_type.name} in {territory_id}", level="DEBUG")
            return None
        if has_worker is not None and not has_worker(territory_id):
            self._emit_log(f"No worker available for {unit_type.name} in {territory_id}", level="DEBUG")
            return None

        converted = 0
        for _ in range(unit_type.required_workers):
            if not convert_worker(territory_id):
                self._restore_workers(territory_id, converted, restore_worker)
                self._emit_log(f"Worker conversion failed for {unit_type.name} in {territory_id}", level="DEBUG")
                return None
            converted += 1

        if not pay_resources(cost):
            self._restore_workers(territory_id, converted, restore_worker)
            self._emit_log(f"Payment failed for {unit_type.name} in {territory_id}", level="WARNING")
            return None

        unit = self.spawn(territory_id, unit_type_id)
        self.event_manager.publish(
            UnitTrained(unit_id=unit.id, unit_type_id=unit_type_id, territory_id=territory_id),
            source="UnitLifecycleManager"
        )
        self._emit_log(f"Trained {unit_type.name} ({unit.id}) in {territory_id}")
        return unit

    def _restore_workers(self, territory_id: str, count: int, restore_worker: Optional["RestoreWorker"]) -> None:
        if count and restore_worker is None:
            self._emit_log(f"{count} converted worker(s) in {territory_id} could not be restored", level="WARNING")
            return
        for _ in range(count):
            restore_worker(territory_id)

    def move(self, unit_id: str, from_territory_id: str, to_territory_id: str) -> bool:
        """Move a unit to an adjacent territory, spending one move."""
        unit = self.get_unit(unit_id)
        if unit is None or self._territory_of_unit[unit_id] != from_territory_id:
            return False
        if unit.moves_left <= 0:
            return False
        if to_territory_id not in self.world.get_neighbors(from_territory_id):
            return False

        self._units_by_territory[from_territory_id].remove(unit)
        self._units_by_territory.setdefault(to_territory_id, []).append(unit)
        self._territory_of_unit[unit_id] = to_territory_id
        unit.position = to_territory_id
        unit.moves_left -= 1

        self.event_manager.publish(
            UnitMoved(
                unit_id=unit_id,
                from_territory_id=from_territory_id,
                to_territory_id=to_territory_id,
                moves_left=unit.moves_left
            ),
            source="UnitLifecycleManager"
        )
        self._emit_log(f"{unit_id} moved {from_territory_id} -> {to_territory_id}", "MOVEMENT")
        return True

    def reset_movement(self) -> None:
        """Restore every unit's moves for a new turn."""
        for unit in self.all_units():
            unit.moves_left = self.max_moves(self.unit_catalog.get(unit.type_id))

    def upgrade(self, unit_id: str, territory_id: str, pay_resources: "PayResources") -> bool:
        """Upgrade a unit to its type's upgrade target.

        Health, experience, level and specializations are preserved; type,
        strength and movement come from the target type.
        """
        unit = self.get_unit(unit_id)
        if unit is None or self._territory_of_unit[unit_id] != territory_id:
            return False

        current_type = self.unit_catalog.get(unit.type_id)
        if not current_type.upgrade_to:
            return False
        target_type = self.unit_catalog.get(current_type.upgrade_to)

        cost = {"production": math.floor(target_type.production_cost * COMBAT_MECHANICS["UPGRADE_COST_FRACTION"])}
        if not pay_resources(cost):
            return False

        unit.type_id = target_type.id
        unit.strength = target_type.strength
        unit.moves_left = min(unit.moves_left, self.max_moves(target_type))

        self.event_manager.publish(
            UnitUpgraded(unit_id=unit_id, from_type_id=current_type.id, to_type_id=target_type.id),
            source="UnitLifecycleManager"
        )
        self._emit_log(f"{unit_id} upgraded from {current_type.name} to {target_type.name}")
        return True

    def calculate_maintenance(self) -> CostMap:
        """Total upkeep of all units, with the doctrine's gold adjustment."""
        total = merge_costs(*(self.unit_catalog.get(u.type_id).maintenance_cost for u in self.all_units()))

        modifier = self._modifiers().maintenance
        if "gold" in total and modifier:
            if modifier > 0:
                total["gold"] = math.ceil(total["gold"] * (1 + modifier))
            else:
                total["gold"] = math.floor(total["gold"] * (1 + modifier))
        return total

    def apply_combat_result(
        self,
        territory_id: str,
        casualty_percent: float,
        experience_gain: int,
        terrain_type: Optional[str] = None
    ) -> list[UnitChange]:
        """Damage and train every unit in a territory after combat.

        Units never die from combat damage; health bottoms out at 1.
        """
        per_full = COMBAT_MECHANICS["DAMAGE_PER_FULL_CASUALTIES"]
        damage = math.floor(per_full * casualty_percent / 100)

        changes = []
        for unit in self._units_by_territory.get(territory_id, []):
            health_before = unit.health
            unit.take_damage(damage)
            levels = unit.gain_experience(experience_gain)

            specialization = None
            if levels and terrain_type:
                specialization = f"{terrain_type}_veteran"
                unit.specializations.add(specialization)

            changes.append(UnitChange(
                unit_id=unit.id,
                territory_id=territory_id,
                health_before=health_before,
                health_after=unit.health,
                experience_gained=experience_gain,
                levels_gained=levels,
                new_specialization=specialization
            ))
            self.event_manager.publish(
                UnitDamaged(
                    unit_id=unit.id,
                    territory_id=territory_id,
                    health_before=health_before,
                    health_after=unit.health,
                    experience_gained=experience_gain
                ),
                source="UnitLifecycleManager"
            )
            if levels:
                self.event_manager.publish(
                    UnitLeveledUp(unit_id=unit.id, new_level=unit.level, specialization=specialization),
                    source="UnitLifecycleManager"
                )
                self._emit_log(f"{unit.id} reached level {unit.level}", "BATTLE")

        return changes
