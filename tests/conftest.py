"""
Basic test fixtures for the empire-military test suite.

Provides catalogs loaded from the bundled YAML data, a small hex map and
the managers wired together the way the engine wires them.
"""

import sys
import os
import pytest

# Add the project root to the Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

import numpy as np

from empire_military.core.event_manager import EventManager
from empire_military.game.ai.ai_controller import MilitaryAI
from empire_military.game.doctrines import DoctrineRegistry
from empire_military.game.log_manager import LogManager
from empire_military.game.managers.combat_manager import CombatManager
from empire_military.game.managers.unit_manager import UnitLifecycleManager
from empire_military.game.tactical_cards import CardCatalog, CardInventory
from empire_military.game.unit_templates import UnitCatalog
from tests.test_constants import TEST_SEED
from tests.test_utils import TerritoryMapBuilder


@pytest.fixture
def event_manager():
    """Create an event manager for testing."""
    return EventManager(enable_debug_logging=False)


@pytest.fixture
def log_manager(event_manager):
    """Log manager subscribed to the test event manager."""
    return LogManager(event_manager)


@pytest.fixture
def rng():
    """Seeded random generator so effect rolls are reproducible."""
    return np.random.default_rng(TEST_SEED)


@pytest.fixture(scope="session")
def unit_catalog():
    """Unit types from the bundled data files."""
    return UnitCatalog.from_yaml()


@pytest.fixture(scope="session")
def card_catalog():
    """Tactical cards from the bundled data files."""
    return CardCatalog.from_yaml()


@pytest.fixture
def doctrines():
    """Fresh doctrine registry (no current doctrine)."""
    return DoctrineRegistry.from_yaml()


@pytest.fixture
def inventory(card_catalog):
    """The player's starter deck."""
    return CardInventory.starter(card_catalog)


@pytest.fixture
def territory_map():
    """Three-territory strip: player plains (0,0), enemy plains (1,0), enemy hills (2,0)."""
    return (
        TerritoryMapBuilder()
        .with_territory(0, 0, "plains", owner="player", capital=True)
        .with_territory(1, 0, "plains", owner="enemy")
        .with_territory(2, 0, "hills", owner="enemy", buildings=[("walls", 1)])
        .build()
    )


@pytest.fixture
def unit_manager(unit_catalog, territory_map, event_manager, doctrines):
    """Unit lifecycle manager over the test map."""
    return UnitLifecycleManager(unit_catalog, territory_map, event_manager, doctrines)


@pytest.fixture
def military_ai(unit_catalog, card_catalog, rng, event_manager):
    """Normal-difficulty AI."""
    return MilitaryAI(unit_catalog, card_catalog, rng=rng, event_manager=event_manager)


@pytest.fixture
def combat_manager(unit_manager, territory_map, card_catalog, event_manager, rng, inventory, doctrines):
    """Combat manager without an AI opponent, so tests pick both sides' cards."""
    return CombatManager(
        unit_manager, territory_map, card_catalog, event_manager, rng,
        inventory=inventory, doctrines=doctrines
    )
