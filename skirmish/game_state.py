"""
Game State - Read-only numeric views of a world.

Presentation code and analysis tools read the world through these arrays
instead of walking the grid themselves. Nothing here mutates the world;
target masks are built from the side-effect-free can_* predicates.

Observation space: (height, width, NUM_FEATURE_PLANES), from the point of
view of one player.
"""

import numpy as np
from typing import Dict, Optional

from skirmish.player import Player
from skirmish.units import ActionKind, GameObjectType
from skirmish.world import World


# Feature plane definitions (8 planes total)
# Owner: none, own, enemy  (3 planes)
# HP as a fraction of max hp  (1 plane)
# Used actions: move, fight, produce  (3 planes)
# Own unit that can still act while its owner is active  (1 plane)

NUM_OWNER_PLANES = 3
NUM_HP_PLANES = 1
NUM_USED_PLANES = len(ActionKind)
NUM_READY_PLANES = 1
NUM_FEATURE_PLANES = (NUM_OWNER_PLANES + NUM_HP_PLANES + NUM_USED_PLANES
                      + NUM_READY_PLANES)

HP_PLANE = NUM_OWNER_PLANES
USED_PLANE_OFFSET = HP_PLANE + NUM_HP_PLANES
READY_PLANE = USED_PLANE_OFFSET + NUM_USED_PLANES


def encode_world(world: World, player: Player) -> np.ndarray:
    """Encode the world as a (H, W, NUM_FEATURE_PLANES) float32 tensor."""
    h, w = world.map_size_y, world.map_size_x
    obs = np.zeros((h, w, NUM_FEATURE_PLANES), dtype=np.float32)
    # Owner "none" everywhere, cleared below for occupied cells
    obs[:, :, 0] = 1.0

    is_active = world.active_player is player
    for x, y, obj in world.game_map.occupied_cells():
        obs[y, x, 0] = 0.0
        obs[y, x, 1 if obj.owner is player else 2] = 1.0
        obs[y, x, HP_PLANE] = obj.hp / obj.unit_type.max_hp
        for kind in obj.used:
            obs[y, x, USED_PLANE_OFFSET + int(kind)] = 1.0
        if is_active and obj.owner is player and not obj.all_used:
            obs[y, x, READY_PLANE] = 1.0

    return obs


def legal_target_mask(world: World, x: int, y: int, kind: ActionKind,
                      produce_type: Optional[GameObjectType] = None) -> np.ndarray:
    """
    Cells the unit at (x, y) may target with the given action kind.

    Returns an (H, W) bool array indexed [y, x]; all False if the cell is
    empty or the unit cannot act.
    """
    h, w = world.map_size_y, world.map_size_x
    mask = np.zeros((h, w), dtype=np.bool_)
    if world.get_object_at(x, y) is None:
        return mask
    if kind == ActionKind.PRODUCE and produce_type is None:
        raise ValueError("PRODUCE masks need a produce_type")

    for ty in range(h):
        for tx in range(w):
            if kind == ActionKind.MOVE:
                mask[ty, tx] = world.can_move(x, y, tx, ty)
            elif kind == ActionKind.FIGHT:
                mask[ty, tx] = world.can_fight(x, y, tx, ty)
            else:
                mask[ty, tx] = world.can_produce(x, y, tx, ty, produce_type)
    return mask


def ownership_grid(world: World) -> np.ndarray:
    """(H, W) int array of owner player ids, -1 for empty cells."""
    grid = np.full((world.map_size_y, world.map_size_x), -1, dtype=np.int32)
    for x, y, obj in world.game_map.occupied_cells():
        grid[y, x] = obj.owner.player_id
    return grid


def summarize(world: World, players) -> Dict[int, Dict[str, int]]:
    """Per-player unit count, total hp, balance and income."""
    summary = {}
    for p in players:
        units = world.objects_of(p)
        summary[p.player_id] = {
            'units': len(units),
            'hp': sum(u.hp for u in units),
            'money': p.money,
            'income': world.income_per_round(p),
        }
    return summary
