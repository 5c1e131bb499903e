"""Interfaces of the engine's external collaborators.

The engine never owns territories, resources or workers. It talks to the
systems that do through the narrow contracts below.
"""

from typing import Callable, Mapping, Optional, Protocol

from .data_structures import TerritoryData


class WorldView(Protocol):
    """Territory and grid-adjacency queries."""

    def get_territory(self, territory_id: str) -> Optional[TerritoryData]:
        ...

    def get_neighbors(self, territory_id: str) -> list[str]:
        ...

    def hex_distance(self, a: str, b: str) -> int:
        ...


class AIActions(Protocol):
    """Commands the AI turn may issue through the turn orchestrator."""

    def train_unit(self, territory_id: str, unit_type_id: str) -> bool:
        ...

    def execute_attack(self, source_id: str, target_id: str) -> bool:
        ...

    def play_tactical_card(self, card_id: str) -> bool:
        ...


PayResources = Callable[[Mapping[str, int]], bool]
CanAfford = Callable[[Mapping[str, int]], bool]
ConvertWorker = Callable[[str], bool]
HasWorker = Callable[[str], bool]
RestoreWorker = Callable[[str], None]

# update_territory_control(defender_id, attacker_id, full_conquest, control_percent=None)
TerritoryControlCallback = Callable[..., None]
