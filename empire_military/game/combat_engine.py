"""
Military engine facade.

CombatEngine is the explicit owner of all military state: the catalogs,
the current doctrine, every unit, the player's cards and the one combat
session. The turn orchestrator talks to this object only; nothing in the
engine is global.

Events are queued on the engine's EventManager while a command runs and
delivered when the command returns.
"""
from typing import Iterable, Optional

import numpy as np

from ..core.data_structures import CostMap, TerritoryData
from ..core.event_manager import EventManager
from ..core.events import DoctrineChanged, LogMessage
from ..core.game_enums import CombatSide, Difficulty
from ..core.interfaces import (
    AIActions, CanAfford, ConvertWorker, HasWorker, PayResources, RestoreWorker, TerritoryControlCallback, WorldView
)
from .ai.ai_controller import AITurnResult, MilitaryAI
from .combat.combat_session import RoundRecord, SessionSnapshot
from .doctrines import DoctrineRegistry, MilitaryDoctrine
from .log_manager import LogManager
from .managers.combat_manager import CombatManager, CombatOutcome
from .managers.unit_manager import UnitLifecycleManager
from .tactical_cards import CardCatalog, CardInventory
from .territory_map import TerritoryMap
from .unit import MilitaryUnit
from .unit_templates import UnitCatalog


class CombatEngine:
    """Single entry point to units, doctrines, combat and the AI."""

    def __init__(
        self,
        world: Optional[WorldView] = None,
        unit_catalog: Optional[UnitCatalog] = None,
        card_catalog: Optional[CardCatalog] = None,
        doctrines: Optional[DoctrineRegistry] = None,
        difficulty: Difficulty = Difficulty.NORMAL,
        seed: Optional[int] = None,
        event_manager: Optional[EventManager] = None,
        inventory: Optional[CardInventory] = None
    ):
        """Build an engine, loading the bundled data for anything not supplied.

        Args:
            world: Territory collaborator (an empty TerritoryMap by default)
            unit_catalog: Unit types
            card_catalog: Tactical cards
            doctrines: Doctrine registry
            difficulty: AI difficulty
            seed: Seed for the engine's random generator
            event_manager: Event bus to publish on
            inventory: The player's cards (the starter deck by default)
        """
        self.rng = np.random.default_rng(seed)
        self.event_manager = event_manager or EventManager()
        self.log_manager = LogManager(self.event_manager)

        self.world = world if world is not None else TerritoryMap()
        self.unit_catalog = unit_catalog if unit_catalog is not None else UnitCatalog.from_yaml()
        self.card_catalog = card_catalog if card_catalog is not None else CardCatalog.from_yaml()
        self.doctrines = doctrines if doctrines is not None else DoctrineRegistry.from_yaml()
        self.inventory = inventory if inventory is not None else CardInventory.starter(self.card_catalog)

        self.units = UnitLifecycleManager(self.unit_catalog, self.world, self.event_manager, self.doctrines)
        self.ai = MilitaryAI(self.unit_catalog, self.card_catalog, difficulty, self.rng, self.event_manager)
        self.combat = CombatManager(
            self.units, self.world, self.card_catalog, self.event_manager, self.rng,
            ai=self.ai, inventory=self.inventory, doctrines=self.doctrines
        )

        self._emit_log(
            f"Engine ready: {len(self.unit_catalog)} unit types, {len(self.card_catalog)} cards, "
            f"{len(self.doctrines)} doctrines"
        )
        self._flush()

    def _emit_log(self, message: str, category: str = "SYSTEM", level: str = "INFO") -> None:
        """Emit a log message event."""
        self.event_manager.publish(
            LogMessage(message=message, category=category, level=level, source="CombatEngine"),
            source="CombatEngine"
        )

    def _flush(self) -> None:
        self.event_manager.process_events()

    # ============== Combat ==============

    def start_combat(self, attacker_id: str, defender_id: str, player_side: CombatSide = CombatSide.ATTACKER) -> bool:
        started = self.combat.start_combat(attacker_id, defender_id, player_side)
        self._flush()
        return started

    def select_card(self, card_id: str, side: Optional[CombatSide] = None) -> bool:
        """Select a card; the side defaults to the player's."""
        if side is None:
            side = self.combat.snapshot().player_side
        selected = self.combat.select_card(card_id, side)
        self._flush()
        return selected

    def next_combat_round(self) -> Optional[RoundRecord]:
        record = self.combat.next_combat_round()
        self._flush()
        return record

    def end_combat(self, update_territory_control: Optional[TerritoryControlCallback] = None) -> Optional[CombatOutcome]:
        """Apply the resolved combat.

        Without an explicit callback, territory control goes to the world
        collaborator when it knows how to record it.
        """
        if update_territory_control is None:
            update_territory_control = getattr(self.world, "update_territory_control", None)
        outcome = self.combat.end_combat(update_territory_control)
        self._flush()
        return outcome

    def snapshot(self) -> SessionSnapshot:
        return self.combat.snapshot()

    def reset_combat(self) -> None:
        self.combat.reset()
        self._flush()

    # ============== Units ==============

    def train(
        self,
        territory_id: str,
        unit_type_id: str,
        pay_resources: PayResources,
        convert_worker: ConvertWorker,
        *,
        can_afford: CanAfford,
        has_worker: Optional[HasWorker] = None,
        restore_worker: Optional[RestoreWorker] = None
    ) -> Optional[MilitaryUnit]:
        unit = self.units.train(
            territory_id, unit_type_id, pay_resources, convert_worker,
            can_afford=can_afford, has_worker=has_worker, restore_worker=restore_worker
        )
        self._flush()
        return unit

    def move(self, unit_id: str, from_id: str, to_id: str) -> bool:
        moved = self.units.move(unit_id, from_id, to_id)
        self._flush()
        return moved

    def upgrade(self, unit_id: str, territory_id: str, pay_resources: PayResources) -> bool:
        upgraded = self.units.upgrade(unit_id, territory_id, pay_resources)
        self._flush()
        return upgraded

    def reset_movement(self) -> None:
        self.units.reset_movement()

    def calculate_maintenance(self) -> CostMap:
        return self.units.calculate_maintenance()

    # ============== Doctrines ==============

    def adopt_doctrine(self, doctrine_id: str) -> MilitaryDoctrine:
        """Make a doctrine current and grant its unlocked cards.

        Unlocked unit types are announced on the DoctrineChanged event for
        whichever system gates training.

        Raises:
            NotFoundError: If the doctrine does not exist
        """
        doctrine = self.doctrines.set_current(doctrine_id)
        granted = tuple(
            card_id for card_id in doctrine.unlocked_cards
            if self.card_catalog.has(card_id) and self.inventory.add(card_id)
        )
        self.event_manager.publish(
            DoctrineChanged(doctrine_id=doctrine_id, granted_cards=granted, unlocked_units=doctrine.unlocked_units),
            source="CombatEngine"
        )
        self._emit_log(f"Adopted doctrine {doctrine.name}", "DOCTRINE")
        if doctrine.unlocked_units:
            self._emit_log(f"Unit types unlocked: {', '.join(doctrine.unlocked_units)}", "DOCTRINE")
        self._flush()
        return doctrine

    def clear_doctrine(self) -> None:
        self.doctrines.clear_current()
        self.event_manager.publish(DoctrineChanged(doctrine_id=None), source="CombatEngine")
        self._flush()

    # ============== AI ==============

    def perform_ai_turn(
        self,
        ai_owner: str,
        actions: AIActions,
        available_production: int = 0,
        available_resources: Optional[dict[str, int]] = None,
        player_owner: Optional[str] = None,
        territories: Optional[Iterable[TerritoryData]] = None
    ) -> AITurnResult:
        """Run a military turn for an AI-owned set of territories.

        The territories default to the whole map when the world is a
        TerritoryMap; other worlds must pass them in.
        """
        if territories is None:
            if not isinstance(self.world, TerritoryMap):
                raise TypeError("perform_ai_turn needs the territories when the world cannot list them")
            territories = list(self.world)
        territories = list(territories)
        ai_ids = [t.id for t in territories if t.owner == ai_owner]
        player_territories = [t for t in territories if player_owner is not None and t.owner == player_owner]
        units_by_territory = {tid: self.units.units_in_territory(tid) for tid in self.units.territory_ids()}

        result = self.ai.perform_military_turn(
            ai_ids,
            self.world,
            units_by_territory,
            actions,
            available_production=available_production,
            available_resources=available_resources,
            available_cards=list(self.card_catalog),
            player_territories=player_territories,
            combat=self.combat,
        )
        self._flush()
        return result
