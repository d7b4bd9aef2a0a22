"""
Game Map - Fixed-size grid of unit handles plus the live unit arena.

Units live in a single arena keyed by a stable integer handle. Each grid
cell stores the handle of the unit standing on it (or None), so the grid
and the registry cannot hold two different objects for the same unit.
"""

from typing import Dict, Iterator, List, Optional, Tuple, TYPE_CHECKING

from skirmish.units import GameObject

if TYPE_CHECKING:
    from skirmish.player import Player


class GameMap:
    """Grid-based map holding at most one unit per cell."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.cells: List[List[Optional[int]]] = [
            [None] * width for _ in range(height)
        ]
        self.objects: Dict[int, GameObject] = {}  # handle -> GameObject
        self._next_handle = 0

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_empty(self, x: int, y: int) -> bool:
        """Check if a cell is in bounds and has no unit."""
        return self.in_bounds(x, y) and self.cells[y][x] is None

    def get_object_at(self, x: int, y: int) -> Optional[GameObject]:
        """Get unit at position, or None (also for out-of-bounds cells)."""
        if not self.in_bounds(x, y):
            return None
        handle = self.cells[y][x]
        if handle is None:
            return None
        return self.objects[handle]

    def add_object(self, obj: GameObject) -> Optional[GameObject]:
        """Register a unit at its stored position. Returns None if the cell is taken."""
        if not self.is_empty(obj.x, obj.y):
            return None
        handle = self._next_handle
        self._next_handle += 1
        obj.handle = handle
        self.objects[handle] = obj
        self.cells[obj.y][obj.x] = handle
        return obj

    def remove_object(self, handle: int) -> Optional[GameObject]:
        """Remove a unit from the grid and the arena."""
        obj = self.objects.pop(handle, None)
        if obj is not None and self.cells[obj.y][obj.x] == handle:
            self.cells[obj.y][obj.x] = None
        return obj

    def move_object(self, handle: int, new_x: int, new_y: int) -> bool:
        """Move a unit to an empty cell. Returns success."""
        obj = self.objects.get(handle)
        if obj is None or not self.is_empty(new_x, new_y):
            return False
        self.cells[obj.y][obj.x] = None
        obj.x = new_x
        obj.y = new_y
        self.cells[new_y][new_x] = handle
        return True

    def objects_of(self, player: 'Player') -> List[GameObject]:
        """All units on the grid owned by a player, in row-major order."""
        return [obj for _, _, obj in self.occupied_cells() if obj.owner is player]

    def occupied_cells(self) -> Iterator[Tuple[int, int, GameObject]]:
        """Yield (x, y, unit) for every occupied cell, row by row."""
        for y in range(self.height):
            for x in range(self.width):
                handle = self.cells[y][x]
                if handle is not None:
                    yield x, y, self.objects[handle]

    def integrity_problems(self) -> List[str]:
        """Describe every disagreement between grid cells and unit positions."""
        problems = []
        seen = set()
        for y in range(self.height):
            for x in range(self.width):
                handle = self.cells[y][x]
                if handle is None:
                    continue
                obj = self.objects.get(handle)
                if obj is None:
                    problems.append(f"cell ({x},{y}) references missing unit {handle}")
                    continue
                if handle in seen:
                    problems.append(f"unit {handle} appears in more than one cell")
                seen.add(handle)
                if obj.position != (x, y):
                    problems.append(
                        f"unit {handle} in cell ({x},{y}) reports position {obj.position}")
        for handle in self.objects:
            if handle not in seen:
                problems.append(f"unit {handle} is registered but not on the grid")
        return problems
