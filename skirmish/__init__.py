"""
Skirmish - Turn-based Grid Strategy Rule Engine

A pure-Python rule engine for a turn-based strategy game on a square grid.
Features:

- Unit types supplied as data (radii, cost, income, bounty, damage)
- Move, fight and produce actions with separate validation and execution
- Per-round action budget for every unit
- Player economy: income per round, bounties and conquest of eliminated players
- Save/load of games in progress with integrity checks
- Read-only numeric and ASCII views of the world
"""

from skirmish.units import (
    ActionKind, GameObject, GameObjectType, UnitTypeRegistry, DEFAULT_UNIT_TYPES,
)
from skirmish.player import Player
from skirmish.actions import Action, legal_actions
from skirmish.scenario import Scenario, StartPlacement
from skirmish.game_map import GameMap
from skirmish.world import World, FightResult
from skirmish.engine import GameEngine
from skirmish.config import GameConfig
from skirmish.renderer import WorldRenderer, Cursor
from skirmish.exceptions import (
    SkirmishError, UnitTypeError, ScenarioError, PlacementError,
    InvalidCoordinateError, EmptyCellError, PersistenceError,
    IntegrityError, SaveFormatError,
)

__all__ = [
    "ActionKind", "GameObject", "GameObjectType", "UnitTypeRegistry",
    "DEFAULT_UNIT_TYPES",
    "Player",
    "Action", "legal_actions",
    "Scenario", "StartPlacement",
    "GameMap", "World", "FightResult",
    "GameEngine", "GameConfig",
    "WorldRenderer", "Cursor",
    "SkirmishError", "UnitTypeError", "ScenarioError", "PlacementError",
    "InvalidCoordinateError", "EmptyCellError", "PersistenceError",
    "IntegrityError", "SaveFormatError",
]
