"""
World Renderer - ASCII visualization of a world and the selected cell.

Renders the map as text for the command line and for debugging.
"""

from typing import Optional

from skirmish.player import Player
from skirmish.units import ActionKind, GameObject
from skirmish.world import World


class Cursor:
    """The active (selected) cell of a view. -1 means nothing is selected."""

    def __init__(self):
        self.active_x = -1
        self.active_y = -1

    def select(self, world: World, x: int, y: int) -> bool:
        """Select a cell; out-of-bounds selections are ignored."""
        if not world.in_bounds(x, y):
            return False
        self.active_x = x
        self.active_y = y
        return True

    def clear(self):
        self.active_x = -1
        self.active_y = -1

    @property
    def has_selection(self) -> bool:
        return self.active_x >= 0 and self.active_y >= 0

    def active_object(self, world: World) -> Optional[GameObject]:
        if not self.has_selection:
            return None
        return world.get_object_at(self.active_x, self.active_y)


def _cell_symbol(obj: GameObject) -> str:
    """Owner letter, uppercase while the unit still has actions left."""
    sym = obj.owner.symbol
    return sym.lower() if obj.all_used else sym


class WorldRenderer:
    """ASCII renderer for world visualization."""

    @staticmethod
    def render(world: World, cursor: Optional[Cursor] = None,
               show_info: bool = True) -> str:
        """Render the world as an ASCII string."""
        h, w = world.map_size_y, world.map_size_x
        lines = []

        if show_info:
            active = world.active_player
            lines.append(f"Active: {active.name if active else '-'}  "
                         f"Money: {active.money if active else 0}")
            lines.append("")

        lines.append("  " + "".join(f"{x % 10}" for x in range(w)))
        lines.append("  " + "-" * w)

        for y in range(h):
            row = f"{y % 10}|"
            for x in range(w):
                obj = world.get_object_at(x, y)
                if cursor is not None and (x, y) == (cursor.active_x, cursor.active_y):
                    row += "*" if obj is None else "@"
                elif obj is None:
                    row += "."
                else:
                    row += _cell_symbol(obj)
            row += f"|{y % 10}"
            lines.append(row)

        lines.append("  " + "-" * w)
        lines.append("  " + "".join(f"{x % 10}" for x in range(w)))

        if show_info:
            lines.append("")
            lines.append("Legend: letter=owner  UPPER=can act  lower=done  @=selected")
            if cursor is not None:
                selected = cursor.active_object(world)
                if selected is not None:
                    lines.append(WorldRenderer.describe(selected))

        return "\n".join(lines)

    @staticmethod
    def render_compact(world: World) -> str:
        """Compact single-line rendering for logging."""
        owners = {}
        for obj in world.live_objects():
            owners[obj.owner] = owners.get(obj.owner, 0) + 1
        parts = [f"{p.symbol}[u={n} m={p.money}]"
                 for p, n in sorted(owners.items(), key=lambda item: item[0].player_id)]
        active = world.active_player.symbol if world.active_player else "-"
        return f"active={active} " + " ".join(parts)

    @staticmethod
    def describe(obj: GameObject) -> str:
        used = ",".join(k.name.lower() for k in ActionKind if obj.was_used(k)) or "none"
        return (f"{obj.unit_type.name} of {obj.owner.name} ({obj.x},{obj.y}) "
                f"HP={obj.hp}/{obj.unit_type.max_hp} used={used}")

    @staticmethod
    def render_unit_details(world: World, player: Player) -> str:
        """Render detailed unit info for a player."""
        lines = [f"{player.name} units (money {player.money}, "
                 f"income {world.income_per_round(player)}):"]
        for obj in world.objects_of(player):
            lines.append("  " + WorldRenderer.describe(obj))
        return "\n".join(lines)
