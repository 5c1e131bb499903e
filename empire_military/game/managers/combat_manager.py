"""
Combat session management.

This module runs the combat state machine: Idle -> Active (rounds 1..3) ->
Resolved -> Idle. It snapshots both sides when combat starts, validates card
selections, has the AI pre-select its cards, scores each round, resolves the
combat after the last round and finally applies the outcome to the live
units and to territory control.

Misuse (starting a second combat, selecting cards while idle, ending an
unresolved combat) is never an exception: the call returns False or None.
"""
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np

from ...core.events import CardSelected, CombatEnded, CombatInitiated, CombatResolved, LogMessage, RoundResolved
from ...core.game_enums import CombatPhase, CombatResult, CombatSide
from ...core.game_info import COMBAT_MECHANICS
from ..combat.battle_calculator import BattleCalculator
from ..combat.combat_resolver import CombatResolver
from ..combat.combat_session import IDLE_SNAPSHOT, CombatSession, RoundRecord, SessionSnapshot
from ..combat.round_resolver import RoundResolver
from ..doctrines import NEUTRAL_MODIFIERS
from .unit_manager import UnitChange

if TYPE_CHECKING:
    from ...core.event_manager import EventManager
    from ...core.interfaces import TerritoryControlCallback, WorldView
    from ..ai.ai_controller import MilitaryAI
    from ..doctrines import DoctrineModifiers, DoctrineRegistry
    from ..tactical_cards import CardCatalog, CardInventory
    from .unit_manager import UnitLifecycleManager


@dataclass(frozen=True)
class CombatOutcome:
    """What end_combat applied."""
    attacker_territory_id: str
    defender_territory_id: str
    result: CombatResult
    message: str
    territory_control: int
    full_conquest: bool
    attacker_casualties: float
    defender_casualties: float
    unit_changes: tuple[UnitChange, ...] = ()


class CombatManager:
    """Owns the single combat session and its transitions."""

    def __init__(
        self,
        unit_manager: "UnitLifecycleManager",
        world: "WorldView",
        card_catalog: "CardCatalog",
        event_manager: "EventManager",
        rng: np.random.Generator,
        ai: Optional["MilitaryAI"] = None,
        inventory: Optional["CardInventory"] = None,
        doctrines: Optional["DoctrineRegistry"] = None
    ):
        self.unit_manager = unit_manager
        self.world = world
        self.card_catalog = card_catalog
        self.event_manager = event_manager
        self.ai = ai
        self.inventory = inventory
        self.doctrines = doctrines

        self.calculator = BattleCalculator(unit_manager.unit_catalog)
        self.round_resolver = RoundResolver(card_catalog, rng)
        self.combat_resolver = CombatResolver()

        self.session: Optional[CombatSession] = None

    # ============== State ==============

    @property
    def phase(self) -> CombatPhase:
        return self.session.phase if self.session else CombatPhase.IDLE

    @property
    def is_active(self) -> bool:
        return self.phase is CombatPhase.ACTIVE

    def snapshot(self) -> SessionSnapshot:
        """Read-only copy of the current session (an idle snapshot when none)."""
        return self.session.snapshot() if self.session else IDLE_SNAPSHOT

    def reset(self) -> None:
        """Abandon any session and return to Idle."""
        if self.session is not None:
            self._emit_log(
                f"Combat {self.session.attacker_territory_id} -> {self.session.defender_territory_id} abandoned",
                level="DEBUG"
            )
        self.session = None

    def _emit_log(self, message: str, category: str = "BATTLE", level: str = "INFO") -> None:
        """Emit a log message event."""
        self.event_manager.publish(
            LogMessage(message=message, category=category, level=level, source="CombatManager"),
            source="CombatManager"
        )

    def _modifiers_for(self, side: CombatSide) -> "DoctrineModifiers":
        """Doctrine modifiers apply to the player's side only."""
        if self.session is None or side is not self.session.player_side or self.doctrines is None:
            return NEUTRAL_MODIFIERS
        return self.doctrines.current_modifiers()

    def _unit_type_ids(self, side: CombatSide) -> list[str]:
        return [u.type_id for u in self.session.units_for(side)]

    # ============== Transitions ==============

    def start_combat(
        self,
        attacker_territory_id: str,
        defender_territory_id: str,
        player_side: CombatSide = CombatSide.ATTACKER
    ) -> bool:
        """Start a combat between two territories.

        Returns:
            False if a session already exists, a territory is unknown or the
            attacking territory has no units
        """
        if self.session is not None:
            self._emit_log("Cannot start combat: another combat is in progress", level="WARNING")
            return False

        attacker_territory = self.world.get_territory(attacker_territory_id)
        defender_territory = self.world.get_territory(defender_territory_id)
        if attacker_territory is None or defender_territory is None:
            self._emit_log("Cannot start combat: unknown territory", level="WARNING")
            return False

        attacker_units = self.unit_manager.units_in_territory(attacker_territory_id)
        if not attacker_units:
            self._emit_log(f"Cannot start combat: no units in {attacker_territory_id}", level="WARNING")
            return False
        defender_units = self.unit_manager.units_in_territory(defender_territory_id)

        self.session = CombatSession(
            attacker_territory=attacker_territory,
            defender_territory=defender_territory,
            attacker_units=self.calculator.snapshot_group(
                attacker_units, CombatSide.ATTACKER, attacker_territory, defender_units, defender_territory
            ),
            defender_units=self.calculator.snapshot_group(
                defender_units, CombatSide.DEFENDER, defender_territory, attacker_units, defender_territory
            ),
            player_side=player_side,
        )

        self.event_manager.publish(
            CombatInitiated(
                attacker_territory_id=attacker_territory_id,
                defender_territory_id=defender_territory_id,
                attacker_unit_count=len(attacker_units),
                defender_unit_count=len(defender_units)
            ),
            source="CombatManager"
        )
        self._emit_log(
            f"Combat started: {attacker_territory_id} ({len(attacker_units)} units) attacks "
            f"{defender_territory_id} ({len(defender_units)} units)"
        )

        self._ai_preselect(opponent_card_id=None)
        return True

    def select_card(self, card_id: str, side: CombatSide) -> bool:
        """Commit a card for the current round.

        The player's card must be in the inventory; either side's card must
        have its unit requirement met by that side's units.
        """
        if not self.is_active:
            return False

        card = self.card_catalog.find(card_id)
        if card is None:
            self._emit_log(f"Unknown card {card_id!r}", level="WARNING")
            return False

        if side is self.session.player_side and self.inventory is not None and self.inventory.count(card_id) <= 0:
            self._emit_log(f"No {card.name} cards left", level="DEBUG")
            return False
        if not card.requirement_met(self._unit_type_ids(side)):
            self._emit_log(f"{card.name} requires one of {', '.join(card.unit_requirement)}", level="DEBUG")
            return False

        self.session.select(self.session.current_round, side, card_id)
        self.event_manager.publish(
            CardSelected(card_id=card_id, side=side.value, combat_round=self.session.current_round),
            source="CombatManager"
        )
        return True

    def _ai_preselect(self, opponent_card_id: Optional[str]) -> None:
        """Let the AI choose its card for the current round."""
        if self.ai is None or not self.is_active:
            return
        session = self.session
        ai_side = session.ai_side

        available = self.card_catalog.filter_by_requirement(self._unit_type_ids(ai_side))
        card_id = self.ai.select_best_tactical_card(
            available,
            opponent_card_id=opponent_card_id,
            own_unit_type_ids=self._unit_type_ids(ai_side),
            territory=session.territory_for(ai_side),
            is_defender=ai_side is CombatSide.DEFENDER,
        )
        if card_id is not None:
            self.select_card(card_id, ai_side)

    def next_combat_round(self) -> Optional[RoundRecord]:
        """Resolve the current round.

        Before the last round this advances to the next round and has the AI
        pick its next card, assuming the player repeats their last one. The
        last round also resolves the combat and moves the session to
        Resolved; current_round never exceeds the round count.

        Returns:
            The round record, or None if no combat is active
        """
        if not self.is_active:
            return None
        session = self.session
        combat_round = session.current_round

        record = self.round_resolver.resolve(
            session.card_for(combat_round, CombatSide.ATTACKER),
            session.card_for(combat_round, CombatSide.DEFENDER),
            session.attacker_units,
            session.defender_units,
            session.attacker_territory,
            session.defender_territory,
            combat_round,
            session.total_rounds,
            attacker_modifiers=self._modifiers_for(CombatSide.ATTACKER),
            defender_modifiers=self._modifiers_for(CombatSide.DEFENDER),
        )
        session.record_round(record)

        self.event_manager.publish(
            RoundResolved(
                combat_round=combat_round,
                winner=record.winner.value,
                attacker_score=record.attacker_score,
                defender_score=record.defender_score,
                attacker_casualties=record.attacker_casualties,
                defender_casualties=record.defender_casualties
            ),
            source="CombatManager"
        )
        self._emit_log(record.message)

        if combat_round < session.total_rounds:
            session.current_round += 1
            self._ai_preselect(opponent_card_id=session.last_card_of(session.player_side))
        else:
            self._resolve_combat()
        return record

    def _resolve_combat(self) -> None:
        session = self.session
        resolution = self.combat_resolver.resolve(session.battle_log)

        session.phase = CombatPhase.RESOLVED
        session.result = resolution.result
        session.territory_control = resolution.territory_control
        session.attacker_casualties = resolution.attacker_casualties
        session.defender_casualties = resolution.defender_casualties
        session.final_message = resolution.message

        self.event_manager.publish(
            CombatResolved(
                result=resolution.result.value,
                territory_control=resolution.territory_control,
                attacker_casualties=resolution.attacker_casualties,
                defender_casualties=resolution.defender_casualties
            ),
            source="CombatManager"
        )
        self._emit_log(resolution.message)

    def _experience_for(self, side: CombatSide, result: CombatResult) -> int:
        won = ((side is CombatSide.ATTACKER and result is CombatResult.VICTORY)
               or (side is CombatSide.DEFENDER and result is CombatResult.DEFEAT))
        experience = COMBAT_MECHANICS["WINNER_EXPERIENCE"] if won else COMBAT_MECHANICS["LOSER_EXPERIENCE"]
        if side is self.session.player_side:
            experience = math.floor(experience * (1 + self._modifiers_for(side).experience_gain))
        return experience

    def end_combat(self, update_territory_control: Optional["TerritoryControlCallback"] = None) -> Optional[CombatOutcome]:
        """Apply a resolved combat and return to Idle.

        Both sides' live units take damage and gain experience. The
        territory-control callback receives a full conquest when control
        reached the threshold on a victory, a partial control delta on a
        lesser victory or a draw, and nothing on a defeat.

        Returns:
            The applied outcome, or None if the combat is not resolved
        """
        if self.phase is not CombatPhase.RESOLVED:
            return None
        session = self.session
        result = session.result
        battlefield = session.defender_territory.type

        changes = []
        for side, casualties in (
            (CombatSide.ATTACKER, session.attacker_casualties),
            (CombatSide.DEFENDER, session.defender_casualties),
        ):
            changes.extend(self.unit_manager.apply_combat_result(
                session.territory_for(side).id, casualties, self._experience_for(side, result), battlefield
            ))

        control = session.territory_control
        full_conquest = result is CombatResult.VICTORY and control >= COMBAT_MECHANICS["FULL_CONQUEST_THRESHOLD"]
        if update_territory_control is not None:
            if full_conquest:
                update_territory_control(session.defender_territory_id, session.attacker_territory_id, True)
            elif result is not CombatResult.DEFEAT and control > 0:
                update_territory_control(session.defender_territory_id, session.attacker_territory_id, False, control)

        outcome = CombatOutcome(
            attacker_territory_id=session.attacker_territory_id,
            defender_territory_id=session.defender_territory_id,
            result=result,
            message=session.final_message or "",
            territory_control=control,
            full_conquest=full_conquest,
            attacker_casualties=session.attacker_casualties,
            defender_casualties=session.defender_casualties,
            unit_changes=tuple(changes),
        )

        self.event_manager.publish(
            CombatEnded(
                attacker_territory_id=session.attacker_territory_id,
                defender_territory_id=session.defender_territory_id,
                result=result.value,
                full_conquest=full_conquest
            ),
            source="CombatManager"
        )
        self.session = None
        return outcome
