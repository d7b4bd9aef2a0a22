"""
Player - Economic actor of a game.
"""

from dataclasses import dataclass
from typing import Dict, Any

# Display colors handed out in seat order
PLAYER_COLORS = ['red', 'blue', 'green', 'yellow', 'purple', 'orange']


@dataclass(eq=False)
class Player:
    """A seat in the game with its money balance."""
    player_id: int
    name: str
    color: str = 'white'
    money: int = 0

    def add_money(self, amount: int):
        self.money += amount

    def can_afford(self, cost: int) -> bool:
        return self.money >= cost

    @property
    def symbol(self) -> str:
        """Single letter used by the ASCII renderer."""
        return chr(ord('A') + self.player_id % 26)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'player_id': self.player_id,
            'name': self.name,
            'color': self.color,
            'money': self.money,
        }

    def __repr__(self) -> str:
        return f"Player({self.player_id}, {self.name!r}, money={self.money})"
