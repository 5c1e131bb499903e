"""
Military AI strategist.

This module provides the AI opponent's military decision making: which
territory to attack, which tactical card to play and which unit to train,
plus a full military turn that issues those decisions through the turn
orchestrator's action port.

Design Principles:
- Heuristics never mutate their inputs; decisions are applied by the caller
- Difficulty only adjusts scores and picks (see ai_behaviors)
- Missing or incomplete inputs mean "no action", never an exception
- All randomness comes from an injected numpy Generator
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Mapping, Optional, Sequence

import numpy as np

from ...core.data_structures import TerritoryData
from ...core.events import LogMessage
from ...core.game_enums import Difficulty, ResourceCategory, classify_resource
from ...core.game_info import COMBAT_MECHANICS, TERRITORY_VALUE, get_terrain_info
from ..combat.battle_calculator import AttackAssessment, BattleCalculator
from ..unit_templates import NotFoundError
from .ai_behaviors import AIBehavior, create_ai_behavior

if TYPE_CHECKING:
    from ...core.event_manager import EventManager
    from ...core.interfaces import AIActions, WorldView
    from ..managers.combat_manager import CombatManager
    from ..tactical_cards import CardCatalog, TacticalCardType
    from ..unit import MilitaryUnit
    from ..unit_templates import UnitCatalog

# Card scoring weights
CARD_STRENGTH_WEIGHT = 10
CARD_COUNTER_SCORE = 30
CARD_TERRAIN_SCORE = 25
CARD_ROLE_SCORE = 15
CARD_TIER_SCORE = {"advanced": 10, "intermediate": 5}

# Training scoring weights
TRAINING_BASE_SCORE = 50
TRAINING_STRENGTH_WEIGHT = 2
TRAINING_MOVEMENT_WEIGHT = 10
TRAINING_DUPLICATE_PENALTY = 5
TRAINING_EXCLUDED_SCORE = -1000

_RESOURCE_VALUE = {
    ResourceCategory.STRATEGIC: TERRITORY_VALUE["STRATEGIC_RESOURCE"],
    ResourceCategory.LUXURY: TERRITORY_VALUE["LUXURY_RESOURCE"],
    ResourceCategory.COMMON: TERRITORY_VALUE["COMMON_RESOURCE"],
}


@dataclass(frozen=True)
class AttackPlan:
    """A scored attack option."""
    source_id: str
    target_id: str
    attacking_units: int
    defending_units: int
    win_probability: float
    strategic_value: int
    attack_score: float
    assessment: AttackAssessment


@dataclass
class AITurnResult:
    """What a full AI military turn did."""
    units_trained: list[tuple[str, str]] = field(default_factory=list)   # (territory id, unit type id)
    attacks_executed: list[AttackPlan] = field(default_factory=list)
    card_played: Optional[str] = None


class MilitaryAI:
    """Difficulty-parameterized military strategist."""

    def __init__(
        self,
        unit_catalog: "UnitCatalog",
        card_catalog: "CardCatalog",
        difficulty: Difficulty = Difficulty.NORMAL,
        rng: Optional[np.random.Generator] = None,
        event_manager: Optional["EventManager"] = None
    ):
        self.unit_catalog = unit_catalog
        self.card_catalog = card_catalog
        self.difficulty = difficulty
        self.rng = rng if rng is not None else np.random.default_rng()
        self.event_manager = event_manager
        self.behavior: AIBehavior = create_ai_behavior(difficulty, self.rng)
        self.calculator = BattleCalculator(unit_catalog)

    def _emit_log(self, message: str, level: str = "DEBUG") -> None:
        """Emit a log message event."""
        if self.event_manager is None:
            return
        self.event_manager.publish(
            LogMessage(message=message, category="AI", level=level, source="MilitaryAI"),
            source="MilitaryAI"
        )

    # ============== Territory value ==============

    def calculate_territory_value(
        self,
        territory: Optional[TerritoryData],
        player_territories: Sequence[TerritoryData] = (),
        world: Optional["WorldView"] = None
    ) -> int:
        """Strategic value of a territory as an attack target.

        Proximity to the player is measured by the world's hex_distance when
        a world is given, otherwise from the territories' own coordinates.
        """
        if territory is None:
            return 0

        value = TERRITORY_VALUE["BASE"]
        if territory.resource:
            value += _RESOURCE_VALUE[classify_resource(territory.resource)]
        value += get_terrain_info(territory.type).strategic_value

        value += TERRITORY_VALUE["PER_BUILDING"] * len(territory.buildings)
        value += sum(TERRITORY_VALUE["PER_BUILDING_LEVEL"] * (b.level - 1) for b in territory.buildings if b.level > 1)

        if player_territories:
            if world is not None:
                distance = min(world.hex_distance(territory.id, p.id) for p in player_territories)
            else:
                distance = min(territory.coord.distance_to(p.coord) for p in player_territories)
            if distance == 1:
                value += TERRITORY_VALUE["ADJACENT_TO_PLAYER"]
            elif distance <= 3:
                value += 30 - distance * 5

        if territory.is_capital:
            value += TERRITORY_VALUE["CAPITAL"]
        return value

    # ============== Attack targets ==============

    def evaluate_attacks(
        self,
        ai_territory_ids: Iterable[str],
        world: "WorldView",
        units_by_territory: Mapping[str, Sequence["MilitaryUnit"]],
        player_territories: Sequence[TerritoryData] = ()
    ) -> list[AttackPlan]:
        """Score every attack from an AI territory with units into an adjacent foreign territory."""
        plans = []
        for source_id in ai_territory_ids:
            attacking_units = units_by_territory.get(source_id) or ()
            source = world.get_territory(source_id)
            if not attacking_units or source is None:
                continue

            for target_id in world.get_neighbors(source_id):
                target = world.get_territory(target_id)
                if target is None or (target.owner is not None and target.owner == source.owner):
                    continue

                defending_units = units_by_territory.get(target_id) or ()
                assessment = self.calculator.assess_attack(attacking_units, defending_units, target)
                strategic_value = self.calculate_territory_value(target, player_territories, world)

                score = assessment.win_probability * 100 + strategic_value
                plans.append(AttackPlan(
                    source_id=source_id,
                    target_id=target_id,
                    attacking_units=len(attacking_units),
                    defending_units=len(defending_units),
                    win_probability=assessment.win_probability,
                    strategic_value=strategic_value,
                    attack_score=self.behavior.adjust_attack_score(score, strategic_value),
                    assessment=assessment,
                ))
        return plans

    def select_best_attack_target(
        self,
        ai_territory_ids: Optional[Iterable[str]],
        world: Optional["WorldView"],
        units_by_territory: Optional[Mapping[str, Sequence["MilitaryUnit"]]],
        player_territories: Sequence[TerritoryData] = ()
    ) -> Optional[AttackPlan]:
        """Pick the attack to make this turn.

        Plans below the minimum win probability are never returned, on any
        difficulty.

        Returns:
            The chosen plan, or None when there is nothing worth attacking
        """
        if not ai_territory_ids or world is None or units_by_territory is None:
            return None

        plans = self.evaluate_attacks(ai_territory_ids, world, units_by_territory, player_territories)
        viable = [p for p in plans if p.win_probability >= COMBAT_MECHANICS["MIN_ATTACK_WIN_PROBABILITY"]]
        if not viable:
            return None

        viable.sort(key=lambda p: p.attack_score, reverse=True)
        plan = self.behavior.choose(viable)
        self._emit_log(
            f"Attack plan {plan.source_id} -> {plan.target_id} "
            f"(win {plan.win_probability:.0%}, value {plan.strategic_value}, score {plan.attack_score:.1f})"
        )
        return plan

    # ============== Tactical cards ==============

    def score_card(
        self,
        card: "TacticalCardType",
        opponent_card_id: Optional[str],
        territory: Optional[TerritoryData],
        is_defender: bool
    ) -> float:
        score = card.strength * CARD_STRENGTH_WEIGHT

        counters_opponent = card.counters_card(opponent_card_id)
        if counters_opponent:
            score += CARD_COUNTER_SCORE

        terrain_match = territory is not None and card.favors_terrain(territory.type)
        if terrain_match:
            score += CARD_TERRAIN_SCORE

        if card.defensive == is_defender:
            score += CARD_ROLE_SCORE

        score += CARD_TIER_SCORE.get(card.tier.value, 0)
        return self.behavior.adjust_card_score(score, counters_opponent, terrain_match)

    def select_best_tactical_card(
        self,
        available_cards: Optional[Sequence["TacticalCardType"]],
        opponent_card_id: Optional[str] = None,
        own_unit_type_ids: Optional[Iterable[str]] = None,
        territory: Optional[TerritoryData] = None,
        is_defender: bool = False
    ) -> Optional[str]:
        """Pick a card id to play.

        Args:
            available_cards: Cards the AI may play
            opponent_card_id: Known or assumed opponent card
            own_unit_type_ids: If given, cards whose unit requirement is not met are skipped
            territory: The AI side's own territory (for terrain matches)
            is_defender: Whether the AI is defending

        Returns:
            Card id, or None when no card is available
        """
        if not available_cards:
            return None

        cards = list(available_cards)
        if own_unit_type_ids is not None:
            present = list(own_unit_type_ids)
            cards = [c for c in cards if c.requirement_met(present)]
        if not cards:
            return None

        scored = sorted(
            ((self.score_card(c, opponent_card_id, territory, is_defender), c.id) for c in cards),
            key=lambda pair: pair[0],
            reverse=True
        )
        score, card_id = self.behavior.choose(scored)
        self._emit_log(f"Card choice {card_id} (score {score:.1f}) against {opponent_card_id or 'unknown'}")
        return card_id

    # ============== Training ==============

    def score_unit_type(
        self,
        unit_type_id: str,
        existing_units: Sequence["MilitaryUnit"],
        territory: TerritoryData,
        available_production: int,
        available_resources: Mapping[str, int]
    ) -> float:
        unit_type = self.unit_catalog.get(unit_type_id)

        if unit_type.production_cost > available_production:
            return TRAINING_EXCLUDED_SCORE
        for resource, amount in unit_type.required_resources.items():
            if available_resources.get(resource, 0) < amount:
                return TRAINING_EXCLUDED_SCORE

        score: float = TRAINING_BASE_SCORE
        score += unit_type.strength * TRAINING_STRENGTH_WEIGHT
        score += unit_type.movement_range * TRAINING_MOVEMENT_WEIGHT
        score -= TRAINING_DUPLICATE_PENALTY * sum(1 for u in existing_units if u.type_id == unit_type_id)
        score += unit_type.terrain_synergy.get(territory.type, 0)

        resource_synergy = False
        for resource, bonus in unit_type.resource_synergy.items():
            if available_resources.get(resource, 0) > 0:
                score += bonus
                resource_synergy = True

        return self.behavior.adjust_training_score(score, unit_type.strength, resource_synergy)

    def decide_unit_training(
        self,
        territory: Optional[TerritoryData],
        existing_units: Sequence["MilitaryUnit"] = (),
        available_production: int = 0,
        available_resources: Optional[Mapping[str, int]] = None,
        candidate_type_ids: Optional[Iterable[str]] = None
    ) -> Optional[str]:
        """Pick a unit type to train in a territory.

        Types that cannot be afforded or lack a required resource are
        excluded; only positively scored types are considered.

        Returns:
            Unit type id, or None if nothing is worth training
        """
        if territory is None or available_production <= 0:
            return None

        resources = available_resources or {}
        type_ids = list(candidate_type_ids) if candidate_type_ids is not None else self.unit_catalog.ids()

        scored = []
        for type_id in type_ids:
            score = self.score_unit_type(type_id, existing_units, territory, available_production, resources)
            if score > 0:
                scored.append((score, type_id))
        if not scored:
            return None

        scored.sort(key=lambda pair: pair[0], reverse=True)
        score, type_id = self.behavior.choose(scored)
        self._emit_log(f"Training choice {type_id} in {territory.id} (score {score:.1f})")
        return type_id

    # ============== Full turn ==============

    def perform_military_turn(
        self,
        ai_territory_ids: Sequence[str],
        world: "WorldView",
        units_by_territory: Mapping[str, Sequence["MilitaryUnit"]],
        actions: "AIActions",
        available_production: int = 0,
        available_resources: Optional[Mapping[str, int]] = None,
        available_cards: Sequence["TacticalCardType"] = (),
        player_territories: Sequence[TerritoryData] = (),
        combat: Optional["CombatManager"] = None
    ) -> AITurnResult:
        """Train, attack and play a card for one AI turn.

        At most one unit is trained per territory. The best viable attack is
        executed through the action port, and if that leaves a combat active
        the AI plays a card against the player's card for the current round.
        A single decision that hits an unknown catalog id is logged and
        skipped.
        """
        result = AITurnResult()
        production = available_production
        resources = available_resources or {}

        for territory_id in ai_territory_ids:
            try:
                unit_type_id = self.decide_unit_training(
                    world.get_territory(territory_id),
                    units_by_territory.get(territory_id) or (),
                    production,
                    resources,
                )
                if unit_type_id and actions.train_unit(territory_id, unit_type_id):
                    result.units_trained.append((territory_id, unit_type_id))
                    production -= self.unit_catalog.get(unit_type_id).production_cost
            except NotFoundError as e:
                self._emit_log(f"Skipping training in {territory_id}: {e}", level="WARNING")

        try:
            plan = self.select_best_attack_target(ai_territory_ids, world, units_by_territory, player_territories)
        except NotFoundError as e:
            self._emit_log(f"Skipping attack: {e}", level="WARNING")
            plan = None

        if plan is not None and actions.execute_attack(plan.source_id, plan.target_id):
            result.attacks_executed.append(plan)

            if combat is not None and combat.is_active:
                state = combat.snapshot()
                player_card = combat.session.card_for(state.current_round, state.player_side)
                card_id = self.select_best_tactical_card(
                    available_cards,
                    opponent_card_id=player_card,
                    own_unit_type_ids=[u.type_id for u in units_by_territory.get(plan.source_id) or ()],
                    territory=world.get_territory(plan.source_id),
                    is_defender=False,
                )
                if card_id and actions.play_tactical_card(card_id):
                    result.card_played = card_id

        return result
