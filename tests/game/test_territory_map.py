"""
Unit tests for the in-memory hex territory map.
"""
import pytest

from empire_military.game.territory_map import TerritoryMap
from tests.test_constants import ENEMY_HILLS, ENEMY_PLAINS, PLAYER_TERRITORY
from tests.test_utils import TerritoryMapBuilder


class TestTerritoryQueries:
    """Test world queries."""

    def test_get_territory(self, territory_map):
        territory = territory_map.get_territory(ENEMY_HILLS)

        assert territory.type == "hills"
        assert territory.owner == "enemy"
        assert territory_map.get_territory("9,9") is None

    def test_neighbors_only_existing(self, territory_map):
        """Test that neighbors outside the map are not reported."""
        assert territory_map.get_neighbors(PLAYER_TERRITORY) == [ENEMY_PLAINS]
        assert sorted(territory_map.get_neighbors(ENEMY_PLAINS)) == sorted([PLAYER_TERRITORY, ENEMY_HILLS])
        assert territory_map.get_neighbors("9,9") == []

    def test_hex_distance(self, territory_map):
        assert territory_map.hex_distance(PLAYER_TERRITORY, ENEMY_HILLS) == 2
        # Ids outside the map are parsed as coordinates
        assert territory_map.hex_distance(PLAYER_TERRITORY, "0,4") == 4

    def test_owner_queries(self, territory_map):
        assert [t.id for t in territory_map.owned_by("enemy")] == [ENEMY_PLAINS, ENEMY_HILLS]
        assert territory_map.capital_of("player").id == PLAYER_TERRITORY
        assert territory_map.capital_of("enemy") is None

    def test_container_protocol(self, territory_map):
        assert len(territory_map) == 3
        assert ENEMY_PLAINS in territory_map
        assert {t.id for t in territory_map} == {PLAYER_TERRITORY, ENEMY_PLAINS, ENEMY_HILLS}


class TestTerritoryControl:
    """Test combat outcomes applied to ownership."""

    def test_full_conquest_transfers_ownership(self, territory_map):
        territory_map.update_territory_control(ENEMY_PLAINS, PLAYER_TERRITORY, True)
        assert territory_map.get_territory(ENEMY_PLAINS).owner == "player"

    def test_partial_control_accumulates(self, territory_map):
        """Test that partial control transfers ownership at 100."""
        territory_map.update_territory_control(ENEMY_PLAINS, PLAYER_TERRITORY, False, 45)
        territory_map.update_territory_control(ENEMY_PLAINS, PLAYER_TERRITORY, False, 40)

        assert territory_map.get_territory(ENEMY_PLAINS).owner == "enemy"
        assert territory_map.control_of(ENEMY_PLAINS) == {"player": 85}

        territory_map.update_territory_control(ENEMY_PLAINS, PLAYER_TERRITORY, False, 15)

        assert territory_map.get_territory(ENEMY_PLAINS).owner == "player"
        assert territory_map.control_of(ENEMY_PLAINS) == {}

    def test_ownerless_attacker_has_no_effect(self):
        world = (
            TerritoryMapBuilder()
            .with_territory(0, 0, "plains")
            .with_territory(1, 0, "plains", owner="enemy")
            .build()
        )
        world.update_territory_control("1,0", "0,0", True)
        assert world.get_territory("1,0").owner == "enemy"

    def test_unknown_territory_ignored(self, territory_map):
        territory_map.update_territory_control("9,9", PLAYER_TERRITORY, True)
        assert len(territory_map) == 3

    def test_conquered_capital_is_lost(self):
        """Test that a captured capital stops being a capital."""
        world = (
            TerritoryMapBuilder()
            .with_territory(0, 0, "plains", owner="player")
            .with_territory(1, 0, "plains", owner="enemy", capital=True)
            .build()
        )
        world.update_territory_control("1,0", "0,0", True)

        assert world.get_territory("1,0").owner == "player"
        assert not world.get_territory("1,0").is_capital


class TestMapLoading:
    """Test loading maps from YAML."""

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "map.yaml"
        path.write_text(
            "territories:\n"
            "  - {q: 0, r: 0, type: plains, owner: rome, is_capital: true}\n"
            "  - {q: 1, r: 0, type: forest, owner: gaul, buildings: [{type: walls, level: 2}]}\n"
        )
        world = TerritoryMap.from_yaml(str(path))

        assert len(world) == 2
        assert world.get_territory("1,0").defensive_buildings[0].level == 2
        assert world.get_neighbors("0,0") == ["1,0"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            TerritoryMap.from_yaml(str(tmp_path / "nope.yaml"))

    def test_missing_key(self, tmp_path):
        path = tmp_path / "map.yaml"
        path.write_text("regions: []\n")
        with pytest.raises(ValueError):
            TerritoryMap.from_yaml(str(path))

    def test_bundled_example_map(self):
        from empire_military.game.territory_map import DEFAULT_MAP_PATH

        world = TerritoryMap.from_yaml(DEFAULT_MAP_PATH)
        assert len(world) > 0
        assert world.owned_by("player")
