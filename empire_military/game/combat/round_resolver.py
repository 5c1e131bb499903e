"""
Round scoring for card-based combat.

A round pits the attacker's card against the defender's card. Each side
starts at its card's base strength and collects bonuses from counters,
terrain, fortifications, its units and card effects; the higher score wins
and casualties scale with the score difference.
"""
from typing import Optional, Sequence

import numpy as np

from ...core.data_structures import TerritoryData
from ...core.game_enums import CardEffect, CombatSide, RoundWinner
from ...core.game_info import CARD_EFFECT_BONUS, COMBAT_MECHANICS, RANDOM_EFFECT_RANGE, get_terrain_info
from ..doctrines import NEUTRAL_MODIFIERS, DoctrineModifiers
from ..tactical_cards import CardCatalog, TacticalCardType
from ..unit import UnitSnapshot
from .battle_calculator import BattleCalculator
from .combat_session import RoundRecord

INVALID_CARD_MESSAGE = "Invalid card selection"


def _format_bonus(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):+d}"
    return f"{value:+.2f}"


def round_casualties(winner: RoundWinner, score_difference: float) -> tuple[float, float]:
    """Casualty percentages (attacker, defender) for a round outcome."""
    if winner is RoundWinner.DRAW:
        draw = COMBAT_MECHANICS["DRAW_CASUALTIES"]
        return draw, draw

    d = abs(score_difference)
    loser = min(COMBAT_MECHANICS["LOSER_CASUALTY_CAP"],
                COMBAT_MECHANICS["LOSER_CASUALTY_BASE"] + COMBAT_MECHANICS["LOSER_CASUALTY_PER_POINT"] * d)
    winner_cas = max(COMBAT_MECHANICS["WINNER_CASUALTY_FLOOR"],
                     COMBAT_MECHANICS["WINNER_CASUALTY_BASE"] - COMBAT_MECHANICS["WINNER_CASUALTY_PER_POINT"] * d)
    loser, winner_cas = round(loser, 2), round(winner_cas, 2)
    if winner is RoundWinner.ATTACKER:
        return winner_cas, loser
    return loser, winner_cas


class RoundResolver:
    """Scores one combat round."""

    def __init__(self, card_catalog: CardCatalog, rng: np.random.Generator):
        self.card_catalog = card_catalog
        self.rng = rng

    def effect_bonus(self, effect: Optional[CardEffect], combat_round: int, total_rounds: int) -> int:
        """Score bonus of a card's special effect in a given round."""
        if effect is CardEffect.INITIATIVE:
            return CARD_EFFECT_BONUS["initiative"] if combat_round == 1 else 0
        if effect is CardEffect.SURPRISE:
            return CARD_EFFECT_BONUS["surprise"] if combat_round == total_rounds else 0
        if effect is CardEffect.RANDOM:
            low, high = RANDOM_EFFECT_RANGE
            return int(self.rng.integers(low, high + 1))
        if effect is CardEffect.HERO_UNIT:
            return CARD_EFFECT_BONUS["heroUnit"]
        return 0

    def score_side(
        self,
        card: TacticalCardType,
        opponent_card_id: Optional[str],
        side: CombatSide,
        own_territory: Optional[TerritoryData],
        defender_territory: Optional[TerritoryData],
        units: Sequence[UnitSnapshot],
        modifiers: DoctrineModifiers,
        combat_round: int,
        total_rounds: int
    ) -> tuple[float, list[str]]:
        """Score one side's card. Returns the score and a breakdown."""
        score: float = card.strength
        details = [f"Base card strength: {_format_bonus(card.strength)}"]

        def add(label: str, value: float) -> None:
            nonlocal score
            if value:
                score += value
                details.append(f"{label}: {_format_bonus(value)}")

        if card.counters_card(opponent_card_id):
            add("Counter bonus", COMBAT_MECHANICS["COUNTER_BONUS"])

        if own_territory is not None and card.favors_terrain(own_territory.type):
            add(f"{own_territory.type} terrain bonus", COMBAT_MECHANICS["TERRAIN_CARD_BONUS"])

        if side is CombatSide.DEFENDER:
            if card.defensive:
                add("Defensive bonus", COMBAT_MECHANICS["DEFENSIVE_CARD_BONUS"])
            if defender_territory is not None:
                fortification = sum(b.level for b in defender_territory.defensive_buildings)
                add("Fortification bonus", fortification * (1 + modifiers.fortification))
                add("Defensive terrain", get_terrain_info(defender_territory.type).natural_defense)

        add("Unit strength", BattleCalculator.group_contribution(units, side, modifiers))
        if card.effect is not None:
            add(f"{card.effect.value} effect", self.effect_bonus(card.effect, combat_round, total_rounds))

        return score, details

    def resolve(
        self,
        attacker_card_id: Optional[str],
        defender_card_id: Optional[str],
        attacker_units: Sequence[UnitSnapshot],
        defender_units: Sequence[UnitSnapshot],
        attacker_territory: Optional[TerritoryData],
        defender_territory: Optional[TerritoryData],
        combat_round: int,
        total_rounds: int = COMBAT_MECHANICS["ROUNDS_PER_COMBAT"],
        attacker_modifiers: DoctrineModifiers = NEUTRAL_MODIFIERS,
        defender_modifiers: DoctrineModifiers = NEUTRAL_MODIFIERS
    ) -> RoundRecord:
        """Score a round and work out its winner and casualties.

        An id that is not in the card catalog forfeits the round: that side
        scores 0 and the opponent wins. If both ids are unknown the round is
        a scoreless draw.
        """
        attacker_card = self.card_catalog.find(attacker_card_id)
        defender_card = self.card_catalog.find(defender_card_id)

        attacker_score: float = 0
        defender_score: float = 0
        attacker_details = [INVALID_CARD_MESSAGE]
        defender_details = [INVALID_CARD_MESSAGE]

        if attacker_card is not None:
            attacker_score, attacker_details = self.score_side(
                attacker_card, defender_card_id, CombatSide.ATTACKER, attacker_territory, defender_territory,
                attacker_units, attacker_modifiers, combat_round, total_rounds
            )
        if defender_card is not None:
            defender_score, defender_details = self.score_side(
                defender_card, attacker_card_id, CombatSide.DEFENDER, defender_territory, defender_territory,
                defender_units, defender_modifiers, combat_round, total_rounds
            )

        invalid = attacker_card is None or defender_card is None
        if invalid:
            # The side with a valid card always takes a forfeited round
            if attacker_card is not None:
                attacker_score = max(1, attacker_score)
            if defender_card is not None:
                defender_score = max(1, defender_score)

        if attacker_score > defender_score:
            winner = RoundWinner.ATTACKER
        elif defender_score > attacker_score:
            winner = RoundWinner.DEFENDER
        else:
            winner = RoundWinner.DRAW

        attacker_casualties, defender_casualties = round_casualties(winner, attacker_score - defender_score)

        if invalid:
            message = f"Round {combat_round}: {INVALID_CARD_MESSAGE}"
        else:
            message = self._round_message(
                combat_round, winner, attacker_card, defender_card,
                attacker_score, defender_score, attacker_casualties, defender_casualties
            )

        return RoundRecord(
            combat_round=combat_round,
            message=message,
            attacker_card_id=attacker_card_id,
            defender_card_id=defender_card_id,
            attacker_score=attacker_score,
            defender_score=defender_score,
            winner=winner,
            attacker_casualties=attacker_casualties,
            defender_casualties=defender_casualties,
            attacker_details=tuple(attacker_details),
            defender_details=tuple(defender_details),
        )

    @staticmethod
    def _round_message(
        combat_round: int,
        winner: RoundWinner,
        attacker_card: TacticalCardType,
        defender_card: TacticalCardType,
        attacker_score: float,
        defender_score: float,
        attacker_casualties: float,
        defender_casualties: float
    ) -> str:
        a_score = _format_bonus(attacker_score).lstrip("+")
        d_score = _format_bonus(defender_score).lstrip("+")
        casualties = f"Casualties: Attacker {attacker_casualties:g}%, Defender {defender_casualties:g}%"
        if winner is RoundWinner.ATTACKER:
            return (f"Round {combat_round}: Attacker wins with {attacker_card.name} ({a_score}) "
                    f"vs {defender_card.name} ({d_score}). {casualties}")
        if winner is RoundWinner.DEFENDER:
            return (f"Round {combat_round}: Defender wins with {defender_card.name} ({d_score}) "
                    f"vs {attacker_card.name} ({a_score}). {casualties}")
        return f"Round {combat_round}: Draw - both sides scored {a_score}. {casualties}"
