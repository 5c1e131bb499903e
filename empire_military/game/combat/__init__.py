"""Combat calculation and resolution.

This package contains the stateless parts of combat:
- battle_calculator.py: Unit snapshots, group strength and attack odds
- round_resolver.py: Scoring of a single card round
- combat_resolver.py: Aggregation of rounds into a combat result
- combat_session.py: Session record, round records and snapshots
"""

from .battle_calculator import AttackAssessment, BattleCalculator, win_probability_for_ratio
from .combat_resolver import CombatResolution, CombatResolver
from .combat_session import CombatSession, RoundRecord, SessionSnapshot
from .round_resolver import RoundResolver, round_casualties

__all__ = [
    "AttackAssessment",
    "BattleCalculator",
    "win_probability_for_ratio",
    "CombatResolution",
    "CombatResolver",
    "CombatSession",
    "RoundRecord",
    "SessionSnapshot",
    "RoundResolver",
    "round_casualties",
]
