"""
World - Authoritative game state and the rules that change it.

The world owns the map, knows whose turn it is and validates and executes
every action. Each action kind comes as a pair:

- can_move / can_produce / can_fight: pure predicates, safe to call for
  UI hints at any time
- move / produce / fight: re-check the predicate and only then mutate

Rejected actions are the normal case for untrusted input and never raise;
the executors simply report failure. do_action() is the single entry point
for submitted actions.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional
import logging
import random

from skirmish.actions import Action
from skirmish.config import GameConfig
from skirmish.exceptions import (
    EmptyCellError, InvalidCoordinateError, PlacementError, ScenarioError,
)
from skirmish.game_map import GameMap
from skirmish.player import Player
from skirmish.scenario import Scenario
from skirmish.units import ActionKind, GameObject, GameObjectType, UnitTypeRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FightResult:
    """Outcome of an executed fight."""
    damage: int
    destroyed: bool = False     # Defender removed from the map
    conquered: bool = False     # Defender's owner lost its last unit
    bounty: int = 0

    @property
    def hp_delta(self) -> int:
        """Signed hp change of the defender; negative when damage was dealt."""
        return -self.damage


class World:
    """
    Grid, live units, active player and all rule logic of one game.

    A world instance is driven by one caller at a time; it holds no locks.
    """

    def __init__(self, scenario: Scenario, config: Optional[GameConfig] = None,
                 rng: Optional[random.Random] = None,
                 unit_types: Optional[UnitTypeRegistry] = None):
        self.config = config or GameConfig()
        self.rng = rng or random.Random()
        self.unit_types = unit_types
        self.game_map: GameMap
        self.active_player: Optional[Player]
        self.init_scenario(scenario)

    def init_scenario(self, scenario: Scenario):
        """Reset to an empty map of the scenario's size with no active player."""
        self.game_map = GameMap(scenario.map_size_x, scenario.map_size_y)
        self.active_player = None
        logger.info(f"World initialized: {scenario.map_size_x}x{scenario.map_size_y}")

    @property
    def map_size_x(self) -> int:
        return self.game_map.width

    @property
    def map_size_y(self) -> int:
        return self.game_map.height

    def in_bounds(self, x: int, y: int) -> bool:
        return self.game_map.in_bounds(x, y)

    def get_object_at(self, x: int, y: int) -> Optional[GameObject]:
        """Return the unit at the given cell, None if empty or out of bounds."""
        return self.game_map.get_object_at(x, y)

    def objects_of(self, player: Player) -> List[GameObject]:
        return self.game_map.objects_of(player)

    def live_objects(self) -> List[GameObject]:
        return list(self.game_map.objects.values())

    def replace_map(self, game_map: GameMap):
        """Swap in a fully built map of the same dimensions (used by loading)."""
        if (game_map.width, game_map.height) != (self.map_size_x, self.map_size_y):
            raise ValueError(
                f"Map size {game_map.width}x{game_map.height} does not match "
                f"world size {self.map_size_x}x{self.map_size_y}")
        self.game_map = game_map

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def add_start_game_objects(self, player: Player,
                               unit_type: GameObjectType) -> GameObject:
        """
        Add a starting unit for the player at a random free position.

        A position qualifies when no unit stands within
        config.start_min_distance of it. Raises PlacementError when no such
        position turns up within config.max_placement_attempts draws.
        """
        for _ in range(self.config.max_placement_attempts):
            x = self.rng.randrange(self.map_size_x)
            y = self.rng.randrange(self.map_size_y)
            if self._can_add_start_game_object(x, y):
                obj = self.game_map.add_object(GameObject(player, unit_type, x, y))
                logger.info(f"Placed start {unit_type.name} for {player.name} at ({x},{y})")
                return obj
        raise PlacementError(
            f"No valid start position for {unit_type.name} of {player.name} "
            f"after {self.config.max_placement_attempts} attempts on a "
            f"{self.map_size_x}x{self.map_size_y} map")

    def _can_add_start_game_object(self, px: int, py: int) -> bool:
        if not self.in_bounds(px, py):
            return False
        d = self.config.start_min_distance
        for y in range(max(0, py - d), min(self.map_size_y, py + d + 1)):
            for x in range(max(0, px - d), min(self.map_size_x, px + d + 1)):
                if self.game_map.cells[y][x] is not None:
                    return False
        return True

    def populate(self, scenario: Scenario, players: List[Player],
                 unit_types: Optional[UnitTypeRegistry] = None) -> List[GameObject]:
        """Place every starting unit of the scenario."""
        registry = unit_types or self.unit_types
        if registry is None:
            raise ScenarioError("Populating a world needs a unit type registry")
        if len(players) != scenario.num_players:
            raise ScenarioError(
                f"Scenario expects {scenario.num_players} players, got {len(players)}")
        placed = []
        for placement in scenario.placements:
            if placement.type_name not in registry:
                raise ScenarioError(f"Scenario uses unknown unit type {placement.type_name}")
            placed.append(self.add_start_game_objects(
                players[placement.player_index], registry[placement.type_name]))
        return placed

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    def start_round(self, player: Player, reenable_used_actions: bool) -> int:
        """
        Make the player active and pay their income.

        With reenable_used_actions every live unit, whatever its owner,
        regains all action kinds. Returns the income credited.
        """
        self.active_player = player
        if reenable_used_actions:
            for obj in self.game_map.objects.values():
                obj.reset_used_actions()
        income = self.income_per_round(player)
        player.add_money(income)
        logger.debug(f"Round started for {player.name}: +{income} (balance {player.money})")
        return income

    def resume_round(self, player: Player):
        """Make the player active without paying income or resetting actions."""
        self.active_player = player

    def income_per_round(self, player: Player) -> int:
        return sum(obj.unit_type.income_per_round for obj in self.objects_of(player))

    def is_player_still_alive(self, player: Player) -> bool:
        """True while at least one unit on the grid belongs to the player."""
        return any(obj.owner is player for _, _, obj in self.game_map.occupied_cells())

    def alive_players(self, players: Iterable[Player]) -> List[Player]:
        return [p for p in players if self.is_player_still_alive(p)]

    def was_used(self, x: int, y: int) -> bool:
        """True if the unit at the cell has no action kind left this round."""
        if not self.in_bounds(x, y):
            raise InvalidCoordinateError(f"({x},{y}) is outside the map")
        obj = self.get_object_at(x, y)
        if obj is None:
            raise EmptyCellError(f"No unit at ({x},{y})")
        return obj.all_used

    def remove_game_object(self, x: int, y: int) -> Optional[GameObject]:
        obj = self.get_object_at(x, y)
        if obj is None:
            return None
        return self.game_map.remove_object(obj.handle)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def do_action(self, action: Action) -> bool:
        """Validate and execute an action. Returns True if it was applied."""
        if action.kind == ActionKind.MOVE:
            applied = self.move(action.start_x, action.start_y,
                                action.end_x, action.end_y)
        elif action.kind == ActionKind.FIGHT:
            applied = self.fight(action.start_x, action.start_y,
                                 action.end_x, action.end_y) is not None
        elif action.kind == ActionKind.PRODUCE:
            applied = self.produce(action.start_x, action.start_y,
                                   action.end_x, action.end_y,
                                   action.produce_type) is not None
        else:
            raise ValueError(f"Unknown action kind: {action.kind!r}")

        if not applied:
            logger.debug(f"Rejected {action}")
        return applied

    def _acting_object(self, start_x: int, start_y: int, end_x: int, end_y: int,
                       kind: ActionKind) -> Optional[GameObject]:
        """Checks shared by all action kinds; returns the acting unit or None."""
        if not self.in_bounds(start_x, start_y) or not self.in_bounds(end_x, end_y):
            return None
        obj = self.get_object_at(start_x, start_y)
        if obj is None:
            return None
        # only the active player's units may act
        if self.active_player is None or obj.owner is not self.active_player:
            return None
        if obj.was_used(kind):
            return None
        return obj

    def can_move(self, start_x: int, start_y: int, end_x: int, end_y: int) -> bool:
        obj = self._acting_object(start_x, start_y, end_x, end_y, ActionKind.MOVE)
        if obj is None:
            return False
        if not self.game_map.is_empty(end_x, end_y):
            return False
        return obj.can_move_to(end_x, end_y)

    def move(self, start_x: int, start_y: int, end_x: int, end_y: int) -> bool:
        """Move the unit at start to the empty end cell."""
        if not self.can_move(start_x, start_y, end_x, end_y):
            return False
        obj = self.get_object_at(start_x, start_y)
        self.game_map.move_object(obj.handle, end_x, end_y)
        obj.use(ActionKind.MOVE)
        logger.debug(f"{obj.unit_type.name} of {obj.owner.name} moved "
                     f"({start_x},{start_y})->({end_x},{end_y})")
        return True

    def can_produce(self, start_x: int, start_y: int, end_x: int, end_y: int,
                    unit_type: GameObjectType) -> bool:
        obj = self._acting_object(start_x, start_y, end_x, end_y, ActionKind.PRODUCE)
        if obj is None:
            return False
        if not self.game_map.is_empty(end_x, end_y):
            return False
        if not obj.can_produce_to(end_x, end_y):
            return False
        if not obj.unit_type.produces(unit_type):
            return False
        return self.active_player.can_afford(unit_type.cost)

    def produce(self, start_x: int, start_y: int, end_x: int, end_y: int,
                unit_type: GameObjectType) -> Optional[GameObject]:
        """
        Build a new unit for the active player at the end cell.

        The producer spends its PRODUCE action; the new unit cannot act
        before the next reset of used actions.
        """
        if not self.can_produce(start_x, start_y, end_x, end_y, unit_type):
            return None
        producer = self.get_object_at(start_x, start_y)
        new_obj = self.game_map.add_object(
            GameObject(self.active_player, unit_type, end_x, end_y))
        self.active_player.add_money(-unit_type.cost)
        producer.use(ActionKind.PRODUCE)
        new_obj.use_all()
        logger.debug(f"{self.active_player.name} produced {unit_type.name} at "
                     f"({end_x},{end_y}) for {unit_type.cost}")
        return new_obj

    def can_fight(self, start_x: int, start_y: int, end_x: int, end_y: int) -> bool:
        obj = self._acting_object(start_x, start_y, end_x, end_y, ActionKind.FIGHT)
        if obj is None:
            return False
        target = self.get_object_at(end_x, end_y)
        if target is None:
            return False
        return obj.can_fight(target)

    def fight(self, start_x: int, start_y: int, end_x: int,
              end_y: int) -> Optional[FightResult]:
        """
        Attack the unit at the end cell.

        A destroyed defender pays its bounty to the active player; if its
        owner has no units left the active player also takes over that
        owner's whole balance.
        """
        if not self.can_fight(start_x, start_y, end_x, end_y):
            return None
        attacker = self.get_object_at(start_x, start_y)
        defender = self.get_object_at(end_x, end_y)

        damage = attacker.fight(defender)
        destroyed = conquered = False
        bounty = 0
        if defender.hp <= 0:
            destroyed = True
            bounty = defender.unit_type.bounty
            self.active_player.add_money(bounty)
            loser = defender.owner
            self.game_map.remove_object(defender.handle)
            logger.info(f"{defender.unit_type.name} of {loser.name} at ({end_x},{end_y}) "
                        f"destroyed by {self.active_player.name} (bounty {bounty})")
            if not self.is_player_still_alive(loser):
                self._conquer_player(self.active_player, loser)
                conquered = True
        attacker.use(ActionKind.FIGHT)
        return FightResult(damage=damage, destroyed=destroyed,
                           conquered=conquered, bounty=bounty)

    def _conquer_player(self, conqueror: Player, loser: Player):
        spoils = loser.money
        conqueror.add_money(spoils)
        loser.money = 0
        logger.info(f"{conqueror.name} conquered {loser.name} and took {spoils}")
