"""
Scenario - Map dimensions and the starting layout of a game.

A scenario says how large the map is, who plays and which unit types each
player starts with. Start positions are chosen randomly by the world.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional
import json

from skirmish.exceptions import ScenarioError


@dataclass(frozen=True)
class StartPlacement:
    """One starting unit: the player's seat index and the unit type name."""
    player_index: int
    type_name: str


@dataclass
class Scenario:
    map_size_x: int
    map_size_y: int
    player_names: List[str] = field(default_factory=lambda: ["Player 1", "Player 2"])
    placements: List[StartPlacement] = field(default_factory=list)
    starting_money: Optional[int] = None  # None = GameConfig.starting_money

    def __post_init__(self):
        if not self.player_names:
            raise ScenarioError("A scenario needs at least one player")
        if self.map_size_x < 1 or self.map_size_y < 1:
            raise ScenarioError(
                f"Map size must be positive, got {self.map_size_x}x{self.map_size_y}")
        for p in self.placements:
            if not 0 <= p.player_index < len(self.player_names):
                raise ScenarioError(
                    f"Placement for unknown player index {p.player_index}")

    @property
    def num_players(self) -> int:
        return len(self.player_names)

    def placements_for(self, player_index: int) -> List[StartPlacement]:
        return [p for p in self.placements if p.player_index == player_index]

    @classmethod
    def standard(cls, num_players: int = 2, size: int = 10,
                 start_types: Optional[List[str]] = None,
                 size_y: Optional[int] = None) -> 'Scenario':
        """Map (square unless size_y is given) where every player starts with the same units."""
        start_types = start_types or ['city', 'soldier']
        return cls(
            map_size_x=size,
            map_size_y=size_y or size,
            player_names=[f"Player {i + 1}" for i in range(num_players)],
            placements=[StartPlacement(i, t)
                        for i in range(num_players) for t in start_types],
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Scenario':
        try:
            return cls(
                map_size_x=int(data['map_size_x']),
                map_size_y=int(data['map_size_y']),
                player_names=list(data.get('player_names', ["Player 1", "Player 2"])),
                placements=[StartPlacement(int(p['player']), str(p['type']))
                            for p in data.get('placements', [])],
                starting_money=(None if data.get('starting_money') is None
                                else int(data['starting_money'])),
            )
        except KeyError as e:
            raise ScenarioError(f"Scenario is missing field {e.args[0]}") from e
        except (TypeError, ValueError) as e:
            raise ScenarioError(f"Malformed scenario: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            'map_size_x': self.map_size_x,
            'map_size_y': self.map_size_y,
            'player_names': list(self.player_names),
            'placements': [{'player': p.player_index, 'type': p.type_name}
                           for p in self.placements],
            'starting_money': self.starting_money,
        }

    @classmethod
    def load(cls, filepath: str) -> 'Scenario':
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ScenarioError(f"{filepath}: not a valid JSON scenario ({e})") from e
        if not isinstance(data, dict):
            raise ScenarioError(f"{filepath}: expected a JSON object")
        return cls.from_dict(data)
