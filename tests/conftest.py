"""
Shared fixtures for the card battle test suite.

Battles are built directly from dataclasses so each test controls round,
hp, energy and battlefield without replaying a whole match.
"""

import pytest

from cardbattle.engine.catalog import CardCatalog
from cardbattle.engine.models import Battle, PlayerBattleState


TEST_CARDS = {
    "footman": {
        "name": "Footman",
        "type": "battle",
        "class": "melee",
        "health": 8,
        "attack": 6,
        "defense": 1,
        "criticalChance": 0,
        "criticalDamage": 50,
    },
    "duelist": {
        "name": "Duelist",
        "type": "battle",
        "class": "melee",
        "health": 8,
        "attack": 6,
        "defense": 1,
        "criticalChance": 12,
        "criticalDamage": 50,
    },
    "shieldbearer": {
        "name": "Shieldbearer",
        "type": "battle",
        "class": "melee",
        "health": 8,
        "attack": 3,
        "defense": 2,
        "meleeResistance": 10,
        "rangedResistance": 50,
    },
    "brute": {
        "name": "Brute",
        "type": "battle",
        "class": "melee",
        "health": 10,
        "attack": 7,
        "defense": 0,
    },
    "archer": {
        "name": "Archer",
        "type": "battle",
        "class": "ranged",
        "health": 3,
        "attack": 4,
        "defense": 0,
    },
    "healer": {
        "name": "Healer",
        "type": "battle",
        "class": "mage",
        "health": 9,
        "attack": 1,
        "defense": 0,
        "passiveAbilities": ["crystal_shield"],
    },
    "bolt": {
        "name": "Bolt",
        "type": "ability",
        "cost": 30,
        "spellType": "magical",
    },
    "spark": {
        "name": "Spark",
        "type": "ability",
        "cost": 0,
        "spellType": "magical",
    },
}


def sequence_rng(*values):
    """rng that returns the given draws in order, repeating the last one."""
    draws = list(values)

    def rng():
        if len(draws) > 1:
            return draws.pop(0)
        return draws[0]

    return rng


@pytest.fixture
def fixed_rng():
    return sequence_rng


@pytest.fixture
def catalog():
    return CardCatalog(TEST_CARDS)


@pytest.fixture
def make_battle():
    """
    Factory for an active two-player battle.
    Units are given as {"left": "footman"} per player and get ids like "footman#1".
    """

    def factory(p1_units=None, p2_units=None, current_round=2, hp=(20, 20), energy=(100, 100)):
        battle = Battle(
            battle_id="b1",
            turn_order=["p1", "p2"],
            current_turn="p1",
            current_round=current_round,
            status="active",
            phase="battle",
        )
        battle.players["p1"] = PlayerBattleState(
            player_id="p1",
            display_name="Alice",
            hp=hp[0],
            energy=energy[0],
            hand=["footman", "brute", "bolt"],
            spell_deck=["bolt", "spark"],
        )
        battle.players["p2"] = PlayerBattleState(
            player_id="p2",
            display_name="Bob",
            hp=hp[1],
            energy=energy[1],
            hand=["archer", "shieldbearer"],
            spell_deck=["bolt"],
        )
        for player_id, units in (("p1", p1_units), ("p2", p2_units)):
            for slot, card_id in (units or {}).items():
                battle.unit_seq += 1
                unit_id = f"{card_id}#{battle.unit_seq}"
                battle.units[unit_id] = card_id
                battle.players[player_id].battlefield[slot] = unit_id
        return battle

    return factory
