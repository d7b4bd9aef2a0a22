"""
Unit System - Unit type definitions, the type registry and unit instances.

Unit types are plain data: radii, prices, income and combat numbers are
supplied by the caller (a dict or a JSON file) and shared read-only by every
unit of that type. A unit instance tracks its owner, position, hit points and
which action kinds it has already spent this round.

All reach checks (move, attack, produce, start spacing) use the Chebyshev
distance, so a radius of 1 covers the 8 neighbouring cells.
"""

from enum import IntEnum
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple, TYPE_CHECKING
import json

from skirmish.exceptions import UnitTypeError

if TYPE_CHECKING:
    from skirmish.player import Player


class ActionKind(IntEnum):
    MOVE = 0
    FIGHT = 1
    PRODUCE = 2


def distance(x1: int, y1: int, x2: int, y2: int) -> int:
    """Chebyshev distance between two cells."""
    return max(abs(x1 - x2), abs(y1 - y2))


@dataclass(frozen=True, eq=False)
class GameObjectType:
    """Immutable stats for a unit type."""
    name: str
    max_hp: int
    movement_radius: int = 0
    production_radius: int = 0
    attack_radius: int = 0
    cost: int = 0
    income_per_round: int = 0
    bounty: int = 0            # Paid to the attacker on destruction
    damage: int = 0
    damage_table: Dict[str, int] = field(default_factory=dict)  # defender name -> damage
    can_produce: Tuple[str, ...] = ()

    def __post_init__(self):
        for attr in ('movement_radius', 'production_radius', 'attack_radius',
                     'cost', 'damage'):
            if getattr(self, attr) < 0:
                raise UnitTypeError(f"{self.name}: {attr} must be >= 0")
        if self.max_hp < 1:
            raise UnitTypeError(f"{self.name}: max_hp must be >= 1")
        for defender, dmg in self.damage_table.items():
            if dmg < 0:
                raise UnitTypeError(f"{self.name}: damage against {defender} must be >= 0")

    def damage_against(self, other: 'GameObjectType') -> int:
        return self.damage_table.get(other.name, self.damage)

    def produces(self, other: 'GameObjectType') -> bool:
        return other.name in self.can_produce

    def __repr__(self) -> str:
        return f"GameObjectType({self.name!r})"

    @classmethod
    def from_dict(cls, name: str, data: Dict) -> 'GameObjectType':
        try:
            return cls(
                name=name,
                max_hp=int(data['max_hp']),
                movement_radius=int(data.get('movement_radius', 0)),
                production_radius=int(data.get('production_radius', 0)),
                attack_radius=int(data.get('attack_radius', 0)),
                cost=int(data.get('cost', 0)),
                income_per_round=int(data.get('income_per_round', 0)),
                bounty=int(data.get('bounty', 0)),
                damage=int(data.get('damage', 0)),
                damage_table={k: int(v) for k, v in data.get('damage_table', {}).items()},
                can_produce=tuple(data.get('can_produce', ())),
            )
        except KeyError as e:
            raise UnitTypeError(f"{name}: missing field {e.args[0]}") from e
        except (TypeError, ValueError) as e:
            raise UnitTypeError(f"{name}: {e}") from e

    def to_dict(self) -> Dict:
        return {
            'max_hp': self.max_hp,
            'movement_radius': self.movement_radius,
            'production_radius': self.production_radius,
            'attack_radius': self.attack_radius,
            'cost': self.cost,
            'income_per_round': self.income_per_round,
            'bounty': self.bounty,
            'damage': self.damage,
            'damage_table': dict(self.damage_table),
            'can_produce': list(self.can_produce),
        }


# Stock unit table used by the CLI and demos
DEFAULT_UNIT_TYPES = {
    'city': {
        'max_hp': 20, 'movement_radius': 0, 'production_radius': 1,
        'attack_radius': 0, 'cost': 50, 'income_per_round': 10, 'bounty': 30,
        'damage': 0, 'can_produce': ['settler', 'soldier', 'archer'],
    },
    'settler': {
        'max_hp': 4, 'movement_radius': 1, 'production_radius': 1,
        'attack_radius': 0, 'cost': 30, 'income_per_round': 0, 'bounty': 5,
        'damage': 0, 'can_produce': ['city'],
    },
    'soldier': {
        'max_hp': 10, 'movement_radius': 1, 'production_radius': 0,
        'attack_radius': 1, 'cost': 10, 'income_per_round': 0, 'bounty': 5,
        'damage': 4, 'damage_table': {'city': 2},
    },
    'archer': {
        'max_hp': 6, 'movement_radius': 1, 'production_radius': 0,
        'attack_radius': 2, 'cost': 15, 'income_per_round': 0, 'bounty': 7,
        'damage': 3, 'damage_table': {'city': 1},
    },
}


class UnitTypeRegistry:
    """Name -> GameObjectType lookup for one game."""

    def __init__(self, types: List[GameObjectType]):
        self._types: Dict[str, GameObjectType] = {}
        for t in types:
            if t.name in self._types:
                raise UnitTypeError(f"Duplicate unit type: {t.name}")
            self._types[t.name] = t
        for t in types:
            for produced in t.can_produce:
                if produced not in self._types:
                    raise UnitTypeError(f"{t.name} produces unknown type {produced}")

    def __getitem__(self, name: str) -> GameObjectType:
        try:
            return self._types[name]
        except KeyError:
            raise UnitTypeError(f"Unknown unit type: {name}") from None

    def __contains__(self, name: str) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[GameObjectType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def get(self, name: str) -> Optional[GameObjectType]:
        return self._types.get(name)

    def producible_types(self, unit_type: GameObjectType) -> List[GameObjectType]:
        return [self._types[name] for name in unit_type.can_produce]

    @classmethod
    def from_dict(cls, data: Dict[str, Dict]) -> 'UnitTypeRegistry':
        return cls([GameObjectType.from_dict(name, stats) for name, stats in data.items()])

    @classmethod
    def default(cls) -> 'UnitTypeRegistry':
        return cls.from_dict(DEFAULT_UNIT_TYPES)

    @classmethod
    def load(cls, filepath: str) -> 'UnitTypeRegistry':
        """Load unit types from a JSON object of name -> stats."""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise UnitTypeError(f"{filepath}: not a valid JSON type table ({e})") from e
        if not isinstance(data, dict):
            raise UnitTypeError(f"{filepath}: expected a JSON object of unit types")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Dict]:
        return {name: t.to_dict() for name, t in self._types.items()}


@dataclass(eq=False)
class GameObject:
    """A unit instance on the grid."""
    owner: 'Player'
    unit_type: GameObjectType
    x: int
    y: int
    hp: int = -1           # -1 means use max from type
    used: Set[ActionKind] = field(default_factory=set)
    handle: int = -1       # Arena index, assigned by the map

    def __post_init__(self):
        if self.hp == -1:
            self.hp = self.unit_type.max_hp

    @property
    def position(self) -> Tuple[int, int]:
        return (self.x, self.y)

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    @property
    def all_used(self) -> bool:
        return all(kind in self.used for kind in ActionKind)

    def distance_to(self, x: int, y: int) -> int:
        return distance(self.x, self.y, x, y)

    def can_move_to(self, x: int, y: int) -> bool:
        return self.distance_to(x, y) <= self.unit_type.movement_radius

    def can_produce_to(self, x: int, y: int) -> bool:
        return self.distance_to(x, y) <= self.unit_type.production_radius

    def can_fight(self, other: 'GameObject') -> bool:
        """Check range and that the target is an enemy unit."""
        if other is self or other.owner is self.owner:
            return False
        return self.distance_to(other.x, other.y) <= self.unit_type.attack_radius

    def was_used(self, kind: ActionKind) -> bool:
        return kind in self.used

    def use(self, kind: ActionKind):
        self.used.add(kind)

    def use_all(self):
        self.used.update(ActionKind)

    def reset_used_actions(self):
        self.used.clear()

    def damage_against(self, other: 'GameObject') -> int:
        return self.unit_type.damage_against(other.unit_type)

    def take_damage(self, damage: int):
        """Apply damage. hp may drop to zero or below; the world removes the unit."""
        self.hp -= damage

    def heal(self, amount: int):
        self.hp = min(self.unit_type.max_hp, self.hp + amount)

    def fight(self, other: 'GameObject') -> int:
        """Attack another unit and return the damage dealt."""
        damage = self.damage_against(other)
        other.take_damage(damage)
        return damage
