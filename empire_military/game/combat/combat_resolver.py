"""
Combat resolution from a completed battle log.

Round wins decide the result. Casualties are summed per side and clamped,
and a victory earns territory control that grows with the win margin and
the casualty gap. Control is an unbounded accumulator: reaching the
full-conquest threshold means the territory changes hands entirely.
"""
import math
from dataclasses import dataclass
from typing import Sequence

from ...core.game_enums import CombatResult, RoundWinner
from ...core.game_info import COMBAT_MECHANICS
from .combat_session import RoundRecord


@dataclass(frozen=True)
class CombatResolution:
    """Outcome of a whole combat, from the attacker's point of view."""
    result: CombatResult
    message: str
    territory_control: int
    attacker_casualties: float
    defender_casualties: float
    attacker_wins: int
    defender_wins: int

    @property
    def full_conquest(self) -> bool:
        return (self.result is CombatResult.VICTORY
                and self.territory_control >= COMBAT_MECHANICS["FULL_CONQUEST_THRESHOLD"])


def _clamp_percent(value: float) -> float:
    return min(100, max(0, value))


class CombatResolver:
    """Aggregates round records into a combat result."""

    @staticmethod
    def victory_control(win_margin: int, attacker_casualties: float, defender_casualties: float) -> int:
        """Territory control earned by a victory."""
        control = COMBAT_MECHANICS["VICTORY_BASE_CONTROL"]
        if win_margin > 1:
            control += (win_margin - 1) * COMBAT_MECHANICS["CONTROL_PER_EXTRA_WIN"]
        casualty_difference = defender_casualties - attacker_casualties
        if casualty_difference > 0:
            control += math.floor(casualty_difference / COMBAT_MECHANICS["CONTROL_CASUALTY_DIVISOR"])
        return control

    def resolve(self, battle_log: Sequence[RoundRecord]) -> CombatResolution:
        """Work out the result of a finished combat.

        Args:
            battle_log: The resolved rounds, in order

        Returns:
            CombatResolution with result, control and clamped casualties
        """
        attacker_wins = sum(1 for r in battle_log if r.winner is RoundWinner.ATTACKER)
        defender_wins = sum(1 for r in battle_log if r.winner is RoundWinner.DEFENDER)
        attacker_casualties = _clamp_percent(sum(r.attacker_casualties for r in battle_log))
        defender_casualties = _clamp_percent(sum(r.defender_casualties for r in battle_log))

        if attacker_wins > defender_wins:
            result = CombatResult.VICTORY
            control = self.victory_control(attacker_wins - defender_wins, attacker_casualties, defender_casualties)
            if control >= COMBAT_MECHANICS["FULL_CONQUEST_THRESHOLD"]:
                message = "Combat Result: Decisive Victory! The attackers have conquered the territory completely."
            else:
                message = f"Combat Result: Victory! The attackers have gained {control}% control over the territory."
        elif defender_wins > attacker_wins:
            result = CombatResult.DEFEAT
            control = 0
            message = "Combat Result: Defeat. The defenders have successfully held their territory."
        else:
            result = CombatResult.DRAW
            control = COMBAT_MECHANICS["DRAW_CONTROL"]
            message = "Combat Result: Stalemate. Neither side gained a clear advantage."

        message += f" Casualties: Attackers {attacker_casualties:g}%, Defenders {defender_casualties:g}%."

        return CombatResolution(
            result=result,
            message=message,
            territory_control=control,
            attacker_casualties=attacker_casualties,
            defender_casualties=defender_casualties,
            attacker_wins=attacker_wins,
            defender_wins=defender_wins,
        )
