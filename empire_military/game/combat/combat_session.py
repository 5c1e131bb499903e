"""Combat session record and battle log.

A CombatSession holds the state of the one combat that may be in progress:
the frozen unit groups and territories both sides fight with, the cards
selected per round, the ordered battle log and the running totals. The
combat manager drives it; display code reads immutable snapshots.
"""

from dataclasses import dataclass, field
from typing import Optional

from ...core.data_structures import TerritoryData
from ...core.game_enums import CombatPhase, CombatResult, CombatSide, RoundWinner
from ...core.game_info import COMBAT_MECHANICS
from ..unit import UnitSnapshot


@dataclass(frozen=True)
class RoundRecord:
    """One entry of the battle log."""
    combat_round: int
    message: str
    attacker_card_id: Optional[str]
    defender_card_id: Optional[str]
    attacker_score: float
    defender_score: float
    winner: RoundWinner
    attacker_casualties: float
    defender_casualties: float
    attacker_details: tuple[str, ...] = ()
    defender_details: tuple[str, ...] = ()

    def casualties_for(self, side: CombatSide) -> float:
        return self.attacker_casualties if side is CombatSide.ATTACKER else self.defender_casualties


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a combat session for display."""
    phase: CombatPhase
    attacker_territory_id: Optional[str]
    defender_territory_id: Optional[str]
    player_side: CombatSide
    current_round: int
    total_rounds: int
    attacker_units: tuple[UnitSnapshot, ...]
    defender_units: tuple[UnitSnapshot, ...]
    selected_cards: tuple[tuple[int, str, str], ...]   # (round, side, card id)
    battle_log: tuple[RoundRecord, ...]
    attacker_casualties: float
    defender_casualties: float
    territory_control: int
    result: Optional[CombatResult]
    final_message: Optional[str]

    @property
    def is_active(self) -> bool:
        return self.phase is CombatPhase.ACTIVE


@dataclass
class CombatSession:
    """Mutable state of a single combat."""
    attacker_territory: TerritoryData
    defender_territory: TerritoryData
    attacker_units: tuple[UnitSnapshot, ...]
    defender_units: tuple[UnitSnapshot, ...]
    player_side: CombatSide = CombatSide.ATTACKER
    phase: CombatPhase = CombatPhase.ACTIVE
    current_round: int = 1
    total_rounds: int = COMBAT_MECHANICS["ROUNDS_PER_COMBAT"]
    selected_cards: dict[int, dict[CombatSide, str]] = field(default_factory=dict)
    battle_log: list[RoundRecord] = field(default_factory=list)
    attacker_casualties: float = 0
    defender_casualties: float = 0
    territory_control: int = 0
    result: Optional[CombatResult] = None
    final_message: Optional[str] = None

    @property
    def attacker_territory_id(self) -> str:
        return self.attacker_territory.id

    @property
    def defender_territory_id(self) -> str:
        return self.defender_territory.id

    @property
    def ai_side(self) -> CombatSide:
        return self.player_side.opponent

    @property
    def is_final_round(self) -> bool:
        return self.current_round == self.total_rounds

    def units_for(self, side: CombatSide) -> tuple[UnitSnapshot, ...]:
        return self.attacker_units if side is CombatSide.ATTACKER else self.defender_units

    def territory_for(self, side: CombatSide) -> TerritoryData:
        return self.attacker_territory if side is CombatSide.ATTACKER else self.defender_territory

    def card_for(self, combat_round: int, side: CombatSide) -> Optional[str]:
        return self.selected_cards.get(combat_round, {}).get(side)

    def select(self, combat_round: int, side: CombatSide, card_id: str) -> None:
        self.selected_cards.setdefault(combat_round, {})[side] = card_id

    def record_round(self, record: RoundRecord) -> None:
        """Append a round to the battle log and accumulate casualties."""
        self.battle_log.append(record)
        self.attacker_casualties = min(100, max(0, self.attacker_casualties + record.attacker_casualties))
        self.defender_casualties = min(100, max(0, self.defender_casualties + record.defender_casualties))

    def last_card_of(self, side: CombatSide) -> Optional[str]:
        """Most recent card a side committed, if any."""
        for combat_round in sorted(self.selected_cards, reverse=True):
            card_id = self.selected_cards[combat_round].get(side)
            if card_id is not None:
                return card_id
        return None

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            phase=self.phase,
            attacker_territory_id=self.attacker_territory_id,
            defender_territory_id=self.defender_territory_id,
            player_side=self.player_side,
            current_round=self.current_round,
            total_rounds=self.total_rounds,
            attacker_units=self.attacker_units,
            defender_units=self.defender_units,
            selected_cards=tuple(
                (combat_round, side.value, card_id)
                for combat_round, picks in sorted(self.selected_cards.items())
                for side, card_id in picks.items()
            ),
            battle_log=tuple(self.battle_log),
            attacker_casualties=self.attacker_casualties,
            defender_casualties=self.defender_casualties,
            territory_control=self.territory_control,
            result=self.result,
            final_message=self.final_message,
        )


IDLE_SNAPSHOT = SessionSnapshot(
    phase=CombatPhase.IDLE,
    attacker_territory_id=None,
    defender_territory_id=None,
    player_side=CombatSide.ATTACKER,
    current_round=1,
    total_rounds=COMBAT_MECHANICS["ROUNDS_PER_COMBAT"],
    attacker_units=(),
    defender_units=(),
    selected_cards=(),
    battle_log=(),
    attacker_casualties=0,
    defender_casualties=0,
    territory_control=0,
    result=None,
    final_message=None,
)
