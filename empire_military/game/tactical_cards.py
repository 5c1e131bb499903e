"""Tactical card catalog and the player's card inventory.

Cards are loaded from YAML into immutable TacticalCardType records. The
CardInventory tracks how many copies of each card the player owns; the
combat session only checks counts, consuming cards is the caller's job.
"""

import os
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping, Optional

import yaml

from ..core.game_enums import CardEffect, CardTier, Era
from ..core.game_info import COMBAT_MECHANICS
from .unit_templates import DATA_DIR, NotFoundError

DEFAULT_CARDS_PATH = os.path.join(DATA_DIR, "cards", "tactical_cards.yaml")

# Contextual ranking weights
REQUIREMENT_MET_SCORE = 20
REQUIREMENT_UNMET_PENALTY = -20
TERRAIN_MATCH_SCORE = 15
UNIT_BONUS_MATCH_SCORE = 10


@dataclass(frozen=True)
class TacticalCardType:
    """Immutable definition of a tactical card."""
    id: str
    name: str
    tier: CardTier
    strength: int
    defensive: bool = False
    counters: tuple[str, ...] = ()
    terrain: tuple[str, ...] = ()
    unit_requirement: tuple[str, ...] = ()   # At least one of these must be present
    effect: Optional[CardEffect] = None
    unit_bonus: dict[str, int] = field(default_factory=dict)
    era: Optional[Era] = None
    description: str = ""

    def counters_card(self, card_id: Optional[str]) -> bool:
        return card_id is not None and card_id in self.counters

    def favors_terrain(self, terrain_type: Optional[str]) -> bool:
        return terrain_type is not None and terrain_type in self.terrain

    def requirement_met(self, unit_type_ids: Iterable[str]) -> bool:
        """Check the unit requirement against the unit types a side fields."""
        if not self.unit_requirement:
            return True
        present = set(unit_type_ids)
        return any(req in present for req in self.unit_requirement)

    @classmethod
    def from_dict(cls, card_id: str, data: dict) -> "TacticalCardType":
        requirement = data.get("unit_requirement", ())
        if isinstance(requirement, str):
            requirement = (requirement,)
        effect = data.get("effect")
        era = data.get("era")
        return cls(
            id=card_id,
            name=data.get("name", card_id),
            tier=CardTier(data["tier"]),
            strength=data["strength"],
            defensive=data.get("defensive", False),
            counters=tuple(data.get("counters", ())),
            terrain=tuple(data.get("terrain", ())),
            unit_requirement=tuple(requirement),
            effect=CardEffect(effect) if effect else None,
            unit_bonus=dict(data.get("unit_bonus", {})),
            era=Era.from_name(era) if era else None,
            description=data.get("description", ""),
        )


class CardCatalog:
    """Read-only registry of tactical cards keyed by id."""

    def __init__(self, cards: Iterable[TacticalCardType], starter_deck: Optional[Mapping[str, int]] = None):
        self._cards: dict[str, TacticalCardType] = {c.id: c for c in cards}
        self.starter_deck: dict[str, int] = dict(starter_deck or {})
        for card_id in self.starter_deck:
            if card_id not in self._cards:
                raise ValueError(f"Starter deck references unknown card {card_id!r}")

    @classmethod
    def from_yaml(cls, path: str = DEFAULT_CARDS_PATH) -> "CardCatalog":
        """Load cards and the starter deck from a YAML file."""
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Tactical cards file not found: {path}")

        try:
            cards = [TacticalCardType.from_dict(card_id, entry) for card_id, entry in data["tactical_cards"].items()]
        except KeyError as e:
            raise ValueError(f"Invalid tactical card structure in {path}: missing {e}")
        return cls(cards, data.get("starter_deck"))

    def get(self, card_id: str) -> TacticalCardType:
        """Get a card by id.

        Raises:
            NotFoundError: If the id is not in the catalog
        """
        try:
            return self._cards[card_id]
        except KeyError:
            raise NotFoundError("card catalog", card_id) from None

    def find(self, card_id: Optional[str]) -> Optional[TacticalCardType]:
        """Lenient lookup used where an unknown id is a scoring outcome, not an error."""
        if card_id is None:
            return None
        return self._cards.get(card_id)

    def has(self, card_id: str) -> bool:
        return card_id in self._cards

    def filter_by_era(self, era: Era, include_earlier: bool = True) -> list[TacticalCardType]:
        """Cards available in an era. Cards without an era are always available."""
        result = []
        for card in self._cards.values():
            if card.era is None:
                result.append(card)
            elif include_earlier and card.era.value <= era.value:
                result.append(card)
            elif card.era is era:
                result.append(card)
        return result

    def filter_by_requirement(self, unit_type_ids: Iterable[str]) -> list[TacticalCardType]:
        """Cards with no unit requirement or one met by at least one of the ids."""
        present = list(unit_type_ids)
        return [c for c in self._cards.values() if c.requirement_met(present)]

    def filter_by_tier(self, tier: CardTier) -> list[TacticalCardType]:
        return [c for c in self._cards.values() if c.tier is tier]

    def ids(self) -> list[str]:
        return list(self._cards)

    def __iter__(self) -> Iterator[TacticalCardType]:
        return iter(self._cards.values())

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._cards


class CardInventory:
    """Card counts owned by the player."""

    def __init__(self, catalog: CardCatalog, counts: Optional[Mapping[str, int]] = None):
        self.catalog = catalog
        self._counts: dict[str, int] = {}
        for card_id, count in (counts or {}).items():
            self.add(card_id, count)

    @classmethod
    def starter(cls, catalog: CardCatalog) -> "CardInventory":
        """Create an inventory holding the catalog's starter deck."""
        return cls(catalog, catalog.starter_deck)

    def count(self, card_id: str) -> int:
        return self._counts.get(card_id, 0)

    def has(self, card_id: str) -> bool:
        return self.count(card_id) > 0

    def add(self, card_id: str, count: int = 1) -> bool:
        """Add copies of a card.

        Owning more than the allowed number of distinct advanced card types is
        refused.

        Returns:
            True if the cards were added

        Raises:
            NotFoundError: If the card is not in the catalog
        """
        card = self.catalog.get(card_id)
        if count <= 0:
            return False
        if card.tier is CardTier.ADVANCED and card_id not in self._counts:
            if len(self.advanced_types()) >= COMBAT_MECHANICS["MAX_ADVANCED_CARD_TYPES"]:
                return False
        self._counts[card_id] = self._counts.get(card_id, 0) + count
        return True

    def consume(self, card_id: str) -> bool:
        """Use one copy of a card. Returns False if none are left."""
        current = self._counts.get(card_id, 0)
        if current <= 0:
            return False
        if current == 1:
            del self._counts[card_id]
        else:
            self._counts[card_id] = current - 1
        return True

    def advanced_types(self) -> list[str]:
        return [cid for cid in self._counts if self.catalog.get(cid).tier is CardTier.ADVANCED]

    def available(self) -> list[TacticalCardType]:
        """Owned card types with at least one copy left."""
        return [self.catalog.get(cid) for cid, n in self._counts.items() if n > 0]

    def contextual_cards(self, unit_type_ids: Iterable[str], territory_type: Optional[str] = None) -> list[TacticalCardType]:
        """Owned cards ranked by how well they fit the current situation."""
        present = set(unit_type_ids)

        def relevance(card: TacticalCardType) -> int:
            score = 0
            if card.unit_requirement:
                score += REQUIREMENT_MET_SCORE if card.requirement_met(present) else REQUIREMENT_UNMET_PENALTY
            if card.favors_terrain(territory_type):
                score += TERRAIN_MATCH_SCORE
            score += UNIT_BONUS_MATCH_SCORE * sum(1 for unit_id in card.unit_bonus if unit_id in present)
            return score

        return sorted(self.available(), key=relevance, reverse=True)

    def as_dict(self) -> dict[str, int]:
        return dict(self._counts)

    def __len__(self) -> int:
        return sum(self._counts.values())
