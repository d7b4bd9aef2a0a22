"""
Game Engine - Turn order and round progression on top of a world.

Handles:
- Game setup from a scenario (players, starting units, first round)
- Turn hand-over to the next player still alive
- Round counting and reset of used actions
- Winner detection
- Saving and resuming a game in progress
"""

from typing import List, Optional
import logging
import random

from skirmish.actions import Action
from skirmish.config import GameConfig
from skirmish.exceptions import SkirmishError
from skirmish import persistence
from skirmish.player import Player, PLAYER_COLORS
from skirmish.scenario import Scenario
from skirmish.units import UnitTypeRegistry
from skirmish.world import World

logger = logging.getLogger(__name__)


class GameEngine:
    """
    Drives one game: whose turn it is, when rounds start and who won.

    The engine is the only writer of its world. Callers that share it
    between threads must serialize submit() and end_turn() themselves.
    """

    def __init__(self, unit_types: UnitTypeRegistry,
                 config: Optional[GameConfig] = None,
                 rng: Optional[random.Random] = None):
        self.unit_types = unit_types
        self.config = config or GameConfig()
        self.rng = rng or random.Random()
        self.world: Optional[World] = None
        self.players: List[Player] = []
        self.active_index = 0
        self.round_number = 0

    def new_game(self, scenario: Scenario) -> World:
        """Create players and world, place the start units and open round 1."""
        money = (scenario.starting_money if scenario.starting_money is not None
                 else self.config.starting_money)
        self.players = [
            Player(player_id=i, name=name,
                   color=PLAYER_COLORS[i % len(PLAYER_COLORS)], money=money)
            for i, name in enumerate(scenario.player_names)
        ]
        self.world = World(scenario, config=self.config, rng=self.rng,
                           unit_types=self.unit_types)
        self.world.populate(scenario, self.players)
        self.active_index = 0
        self.round_number = 1
        self.world.start_round(self.current_player, reenable_used_actions=True)
        logger.info(f"New game: {len(self.players)} players on "
                    f"{scenario.map_size_x}x{scenario.map_size_y}")
        return self.world

    def _require_world(self) -> World:
        if self.world is None:
            raise SkirmishError("Call new_game() or load() first")
        return self.world

    @property
    def current_player(self) -> Player:
        return self.players[self.active_index]

    def alive_players(self) -> List[Player]:
        return self._require_world().alive_players(self.players)

    @property
    def is_over(self) -> bool:
        return len(self.alive_players()) <= 1

    @property
    def winner(self) -> Optional[Player]:
        """The last player standing, None while the game runs or if nobody is left."""
        alive = self.alive_players()
        if len(alive) == 1:
            return alive[0]
        return None

    def submit(self, action: Action) -> bool:
        """Apply an action for the current player."""
        world = self._require_world()
        if self.is_over:
            logger.debug(f"Ignoring {action}: game is over")
            return False
        applied = world.do_action(action)
        if applied and self.is_over:
            winner = self.winner
            logger.info(f"Game over after round {self.round_number}: "
                        f"{winner.name if winner else 'nobody'} wins")
        return applied

    def end_turn(self) -> Player:
        """Hand the turn to the next player still alive and start their round."""
        world = self._require_world()
        if self.is_over:
            raise SkirmishError("The game is over")

        wrapped = False
        index = self.active_index
        for _ in range(len(self.players)):
            index += 1
            if index >= len(self.players):
                index = 0
                wrapped = True
            if world.is_player_still_alive(self.players[index]):
                break

        self.active_index = index
        if wrapped:
            self.round_number += 1
        reenable = self.config.reenable_actions_each_turn or wrapped
        income = world.start_round(self.current_player, reenable_used_actions=reenable)
        logger.info(f"Round {self.round_number}: {self.current_player.name} "
                    f"to move (+{income})")
        return self.current_player

    def save(self, filepath: str):
        document = persistence.save_session(self._require_world(), self.players,
                                            self.active_index, self.round_number)
        persistence.write_session(filepath, document)

    @classmethod
    def load(cls, filepath: str, unit_types: UnitTypeRegistry,
             config: Optional[GameConfig] = None,
             rng: Optional[random.Random] = None) -> 'GameEngine':
        """Resume a saved game; no income is paid and used actions are kept."""
        engine = cls(unit_types, config=config, rng=rng)
        session = persistence.load_session(persistence.read_session(filepath),
                                           unit_types, config=engine.config,
                                           rng=engine.rng)
        engine.world = session.world
        engine.players = session.players
        engine.active_index = session.active_index
        engine.round_number = session.round_number
        return engine
