"""
Unit tests for the battle calculator.

Tests combat snapshots, ability bonuses, unit-strength contribution to
round scores and the attack odds the AI relies on.
"""
import math

import pytest

from empire_military.core.game_enums import CombatSide, SpecialAbility
from empire_military.game.combat.battle_calculator import BattleCalculator, win_probability_for_ratio
from empire_military.game.doctrines import DoctrineModifiers
from tests.test_utils import UnitFactory, make_snapshot, make_territory


@pytest.fixture
def calculator(unit_catalog):
    return BattleCalculator(unit_catalog)


@pytest.fixture
def factory(unit_catalog):
    return UnitFactory(unit_catalog)


class TestWinProbability:
    """Test the ratio to probability table."""

    @pytest.mark.parametrize("ratio, expected", [
        (math.inf, 0.90),
        (3.0, 0.90),
        (2.5, 0.75),
        (1.5, 0.65),
        (1.0, 0.55),
        (0.8, 0.40),
        (0.6, 0.25),
        (0.3, 0.10),
    ])
    def test_table(self, ratio, expected):
        assert win_probability_for_ratio(ratio) == expected


class TestAbilityBonus:
    """Test special ability bonuses."""

    def test_anti_cavalry_needs_cavalry(self, calculator):
        assert calculator.ability_bonus(SpecialAbility.ANTI_CAVALRY, CombatSide.DEFENDER, 1, True, None) == 3
        assert calculator.ability_bonus(SpecialAbility.ANTI_CAVALRY, CombatSide.DEFENDER, 1, False, None) == 0

    def test_formation_fighting_counts_comrades(self, calculator):
        assert calculator.ability_bonus(SpecialAbility.FORMATION_FIGHTING, CombatSide.ATTACKER, 1, False, None) == 0
        assert calculator.ability_bonus(SpecialAbility.FORMATION_FIGHTING, CombatSide.ATTACKER, 3, False, None) == 2

    def test_charge_only_attacking(self, calculator):
        assert calculator.ability_bonus(SpecialAbility.CHARGE, CombatSide.ATTACKER, 1, False, None) == 2
        assert calculator.ability_bonus(SpecialAbility.CHARGE, CombatSide.DEFENDER, 1, False, None) == 0

    def test_volley_fire_only_defending(self, calculator):
        assert calculator.ability_bonus(SpecialAbility.VOLLEY_FIRE, CombatSide.DEFENDER, 1, False, None) == 3
        assert calculator.ability_bonus(SpecialAbility.VOLLEY_FIRE, CombatSide.ATTACKER, 1, False, None) == 0

    def test_fortification_damage_needs_walls(self, calculator):
        walled = make_territory("1,0", buildings=[("walls", 1)])
        open_field = make_territory("1,0")

        assert calculator.ability_bonus(
            SpecialAbility.FORTIFICATION_DAMAGE, CombatSide.ATTACKER, 1, False, walled) == 2
        assert calculator.ability_bonus(
            SpecialAbility.FORTIFICATION_DAMAGE, CombatSide.ATTACKER, 1, False, open_field) == 0

    def test_no_ability(self, calculator):
        assert calculator.ability_bonus(None, CombatSide.ATTACKER, 5, True, None) == 0


class TestSnapshots:
    """Test freezing unit groups for combat."""

    def test_snapshot_copies_unit_state(self, calculator, factory):
        unit = factory.unit("warrior", health=80, level=2)
        (snapshot,) = calculator.snapshot_group([unit], CombatSide.ATTACKER, make_territory(), [], None)

        unit.health = 1
        assert snapshot.health == 80
        assert snapshot.level == 2
        assert snapshot.unit_id == unit.id

    def test_terrain_bonus_uses_own_territory(self, calculator, factory):
        chariot = factory.unit("chariot")
        attacker_land = make_territory("0,0", "plains")
        defender_land = make_territory("1,0", "mountains")

        (snapshot,) = calculator.snapshot_group(
            [chariot], CombatSide.ATTACKER, attacker_land, [], defender_land
        )
        assert snapshot.terrain_bonus == 2

    def test_abilities_resolved_against_opponents(self, calculator, factory):
        spearmen = factory.units("spearman", 2)
        horseman = factory.unit("horseman")

        snapshots = calculator.snapshot_group(spearmen, CombatSide.DEFENDER, make_territory(), [horseman], None)
        assert all(s.ability_bonus == 3 for s in snapshots)

        snapshots = calculator.snapshot_group(spearmen, CombatSide.DEFENDER, make_territory(), [], None)
        assert all(s.ability_bonus == 0 for s in snapshots)

    def test_formation_fighting_group(self, calculator, factory):
        swordsmen = factory.units("swordsman", 3)
        snapshots = calculator.snapshot_group(swordsmen, CombatSide.ATTACKER, make_territory(), [], None)
        assert [s.ability_bonus for s in snapshots] == [2, 2, 2]


class TestGroupContribution:
    """Test the unit-strength part of a round score."""

    def test_empty_group(self):
        assert BattleCalculator.group_contribution((), CombatSide.ATTACKER) == 0.0

    def test_sum_divided_by_five(self):
        snapshots = [make_snapshot(10), make_snapshot(5)]
        assert BattleCalculator.group_contribution(snapshots, CombatSide.ATTACKER) == pytest.approx(3.0)

    def test_health_and_level(self):
        snapshots = [make_snapshot(10, health=50, level=3)]
        assert BattleCalculator.group_contribution(snapshots, CombatSide.DEFENDER) == pytest.approx(1.2)

    def test_attack_modifier_for_attacker_only(self):
        snapshots = [make_snapshot(10)]
        modifiers = DoctrineModifiers(attack=0.2, defense=-0.1)

        assert BattleCalculator.group_contribution(snapshots, CombatSide.ATTACKER, modifiers) == pytest.approx(2.4)
        assert BattleCalculator.group_contribution(snapshots, CombatSide.DEFENDER, modifiers) == pytest.approx(1.8)

    def test_terrain_and_strength_modifiers(self):
        """Test terrain bonuses scaled by (1 + terrain) and the total by (1 + strength)."""
        snapshots = [make_snapshot(10, terrain_bonus=2)]
        modifiers = DoctrineModifiers(terrain=0.3, strength=-0.1)

        expected = (10 + 2 * 1.3) / 5 * 0.9
        assert BattleCalculator.group_contribution(snapshots, CombatSide.ATTACKER, modifiers) == pytest.approx(expected)


class TestAttackAssessment:
    """Test attack odds used by the AI."""

    def test_assessed_strength(self, calculator, factory):
        veteran = factory.unit("warrior", health=50, level=3)
        assert calculator.assessed_strength([veteran]) == pytest.approx(5 * 0.5 * 1.1)
        assert calculator.assessed_strength([]) == 0.0

    def test_unit_advantage(self, calculator, factory):
        horseman = factory.unit("horseman")
        warriors = factory.units("warrior", 2)

        assert calculator.unit_advantage([horseman], warriors) == pytest.approx(1.0)
        assert calculator.unit_advantage(warriors, [horseman]) == 0.0

    def test_assess_owned_plains(self, calculator, factory):
        """Test terrain modifiers and the home territory bonus."""
        attackers = factory.units("warrior", 2)
        defenders = factory.units("warrior", 1)
        target = make_territory("1,0", "plains", owner="enemy")

        assessment = calculator.assess_attack(attackers, defenders, target)

        assert assessment.attack_strength == pytest.approx(11)    # 10 + plains attack 1
        assert assessment.defense_strength == pytest.approx(6)    # 5 + home 1
        assert assessment.win_probability == 0.65

    def test_undefended_unowned_territory(self, calculator, factory):
        assessment = calculator.assess_attack(factory.units("scout", 1), [], make_territory("1,0", "plains"))

        assert assessment.strength_ratio == math.inf
        assert assessment.win_probability == 0.90

    def test_defensive_terrain_lowers_odds(self, calculator, factory):
        attackers = factory.units("warrior", 1)
        defenders = factory.units("warrior", 1)

        plains = calculator.assess_attack(attackers, defenders, make_territory("1,0", "plains", owner="enemy"))
        mountains = calculator.assess_attack(attackers, defenders, make_territory("1,0", "mountains", owner="enemy"))

        assert mountains.win_probability < plains.win_probability
