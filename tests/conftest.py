"""Shared fixtures for the rule engine tests."""

import sys
import os
import random

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from skirmish.config import GameConfig
from skirmish.player import Player
from skirmish.scenario import Scenario
from skirmish.units import GameObject, UnitTypeRegistry
from skirmish.world import World


TEST_UNIT_TYPES = {
    'T1': {
        'max_hp': 5, 'movement_radius': 1, 'attack_radius': 1,
        'cost': 4, 'income_per_round': 1, 'bounty': 3, 'damage': 2,
    },
    'factory': {
        'max_hp': 10, 'production_radius': 1, 'cost': 10,
        'income_per_round': 5, 'bounty': 8, 'can_produce': ['T1'],
    },
    'cannon': {
        'max_hp': 3, 'attack_radius': 2, 'cost': 6, 'bounty': 2,
        'damage': 5, 'damage_table': {'factory': 1},
    },
}


def place(world, player, unit_type, x, y, hp=-1):
    """Put a unit directly on the map, bypassing start placement rules."""
    obj = world.game_map.add_object(GameObject(player, unit_type, x, y, hp=hp))
    assert obj is not None
    return obj


@pytest.fixture
def registry():
    return UnitTypeRegistry.from_dict(TEST_UNIT_TYPES)


@pytest.fixture
def players():
    return [Player(0, "A", "red"), Player(1, "B", "blue")]


@pytest.fixture
def world(registry):
    return World(Scenario(5, 5, player_names=["A", "B"]),
                 config=GameConfig(start_min_distance=1),
                 rng=random.Random(7), unit_types=registry)
