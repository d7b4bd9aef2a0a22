"""
Action System - Action descriptors and legal action enumeration.

An action names one unit (by its cell), what it should do and the target
cell. Actions are plain values: the world validates and executes them, so
the same descriptor can be checked for UI hints and then submitted.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, List, TYPE_CHECKING

from skirmish.units import ActionKind, GameObjectType

if TYPE_CHECKING:
    from skirmish.world import World

__all__ = ["ActionKind", "Action", "legal_actions"]


@dataclass(frozen=True)
class Action:
    """A single request for the unit standing on (start_x, start_y)."""
    kind: ActionKind
    start_x: int
    start_y: int
    end_x: int
    end_y: int
    produce_type: Optional[GameObjectType] = None  # PRODUCE only

    def __post_init__(self):
        if self.kind == ActionKind.PRODUCE and self.produce_type is None:
            raise ValueError("PRODUCE actions need a produce_type")
        if self.kind != ActionKind.PRODUCE and self.produce_type is not None:
            raise ValueError(f"{self.kind.name} actions take no produce_type")

    @property
    def start(self) -> Tuple[int, int]:
        return (self.start_x, self.start_y)

    @property
    def end(self) -> Tuple[int, int]:
        return (self.end_x, self.end_y)

    @classmethod
    def move(cls, start_x: int, start_y: int, end_x: int, end_y: int) -> 'Action':
        return cls(ActionKind.MOVE, start_x, start_y, end_x, end_y)

    @classmethod
    def fight(cls, start_x: int, start_y: int, end_x: int, end_y: int) -> 'Action':
        return cls(ActionKind.FIGHT, start_x, start_y, end_x, end_y)

    @classmethod
    def produce(cls, start_x: int, start_y: int, end_x: int, end_y: int,
                produce_type: GameObjectType) -> 'Action':
        return cls(ActionKind.PRODUCE, start_x, start_y, end_x, end_y, produce_type)

    def __str__(self) -> str:
        text = f"{self.kind.name.lower()} ({self.start_x},{self.start_y})->({self.end_x},{self.end_y})"
        if self.produce_type is not None:
            text += f" [{self.produce_type.name}]"
        return text


def _cells_within(world: 'World', x: int, y: int, radius: int) -> List[Tuple[int, int]]:
    """In-bounds cells within a Chebyshev radius, excluding the center."""
    cells = []
    for ty in range(max(0, y - radius), min(world.map_size_y, y + radius + 1)):
        for tx in range(max(0, x - radius), min(world.map_size_x, x + radius + 1)):
            if (tx, ty) != (x, y):
                cells.append((tx, ty))
    return cells


def legal_actions(world: 'World', x: int, y: int) -> List[Action]:
    """
    Enumerate every action the unit at (x, y) may perform right now.

    Only the side-effect-free predicates of the world are consulted.
    """
    unit = world.get_object_at(x, y)
    if unit is None:
        return []

    actions = []
    ut = unit.unit_type

    for tx, ty in _cells_within(world, x, y, ut.movement_radius):
        if world.can_move(x, y, tx, ty):
            actions.append(Action.move(x, y, tx, ty))

    for tx, ty in _cells_within(world, x, y, ut.attack_radius):
        if world.can_fight(x, y, tx, ty):
            actions.append(Action.fight(x, y, tx, ty))

    if ut.can_produce:
        producible = [world.unit_types[name] for name in ut.can_produce] \
            if world.unit_types is not None else []
        for tx, ty in _cells_within(world, x, y, ut.production_radius):
            for pt in producible:
                if world.can_produce(x, y, tx, ty, pt):
                    actions.append(Action.produce(x, y, tx, ty, pt))

    return actions
