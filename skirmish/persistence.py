"""
Persistence - Save and load contract for worlds and whole sessions.

A world is saved as a flat list of unit records:

    {"type": "soldier", "owner": 0, "x": 3, "y": 1, "hp": 7, "used": ["MOVE"]}

Saving verifies that every unit's stored position matches its grid cell and
fails instead of writing an inconsistent snapshot. Loading builds a fresh
map and swaps it into the world only when every record was accepted, so a
failed load leaves the world untouched.

A session document adds the map size, the players with their balances, the
active player and the round number around the unit records.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
import json
import logging
import random

from skirmish.config import GameConfig
from skirmish.exceptions import IntegrityError, SaveFormatError, ScenarioError
from skirmish.game_map import GameMap
from skirmish.player import Player
from skirmish.scenario import Scenario
from skirmish.units import ActionKind, GameObject, UnitTypeRegistry
from skirmish.world import World

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

PlayerLookup = Union[Sequence[Player], Mapping[int, Player]]


def _require_key(mapping: Mapping[str, Any], key: str, where: str) -> Any:
    if not isinstance(mapping, Mapping):
        raise SaveFormatError(f"{where}: expected an object, got {type(mapping).__name__}")
    if key not in mapping:
        raise SaveFormatError(f"{where}: required field '{key}' is missing")
    return mapping[key]


def _require_int(mapping: Mapping[str, Any], key: str, where: str) -> int:
    value = _require_key(mapping, key, where)
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool) or not isinstance(value, int):
        raise SaveFormatError(f"{where}: field '{key}' must be an integer, got {value!r}")
    return value


def _players_by_id(players: PlayerLookup) -> Dict[int, Player]:
    if isinstance(players, Mapping):
        return dict(players)
    return {p.player_id: p for p in players}


# ----------------------------------------------------------------------
# World records
# ----------------------------------------------------------------------

def object_to_record(obj: GameObject) -> Dict[str, Any]:
    return {
        'type': obj.unit_type.name,
        'owner': obj.owner.player_id,
        'x': obj.x,
        'y': obj.y,
        'hp': obj.hp,
        'used': sorted(kind.name for kind in obj.used),
    }


def save_world(world: World) -> List[Dict[str, Any]]:
    """
    Snapshot all units as records, row by row.

    Raises IntegrityError if a unit's position disagrees with its cell or
    the arena and grid are out of sync.
    """
    records = []
    for x, y, obj in world.game_map.occupied_cells():
        if obj.position != (x, y):
            msg = (f"Position of {obj.unit_type.name} in cell ({x},{y}) "
                   f"is stored as {obj.position}")
            logger.error(msg)
            raise IntegrityError(msg)
        records.append(object_to_record(obj))

    problems = world.game_map.integrity_problems()
    if problems:
        logger.error(f"World integrity check failed: {problems}")
        raise IntegrityError("; ".join(problems))
    return records


def record_to_object(record: Mapping[str, Any], index: int,
                     unit_types: UnitTypeRegistry,
                     players: Dict[int, Player]) -> GameObject:
    where = f"game object #{index}"
    type_name = _require_key(record, 'type', where)
    unit_type = unit_types.get(type_name) if isinstance(type_name, str) else None
    if unit_type is None:
        raise SaveFormatError(f"{where}: unknown unit type {type_name!r}")

    owner_id = _require_int(record, 'owner', where)
    owner = players.get(owner_id)
    if owner is None:
        raise SaveFormatError(f"{where}: unknown owner {owner_id}")

    x = _require_int(record, 'x', where)
    y = _require_int(record, 'y', where)
    hp = _require_int(record, 'hp', where)
    if not 1 <= hp <= unit_type.max_hp:
        raise SaveFormatError(
            f"{where}: hp {hp} outside 1..{unit_type.max_hp} for {type_name}")

    used_names = _require_key(record, 'used', where)
    if not isinstance(used_names, list):
        raise SaveFormatError(f"{where}: field 'used' must be a list")
    try:
        used = {ActionKind[name] for name in used_names}
    except (KeyError, TypeError):
        raise SaveFormatError(f"{where}: unknown action kinds in {used_names!r}") from None

    return GameObject(owner=owner, unit_type=unit_type, x=x, y=y, hp=hp, used=used)


def load_world(world: World, records: Sequence[Mapping[str, Any]],
               unit_types: UnitTypeRegistry, players: PlayerLookup) -> int:
    """
    Rebuild the world's map from unit records.

    Records must reference known types and owners and distinct in-bounds
    cells. Returns the number of units loaded.
    """
    if not isinstance(records, Sequence) or isinstance(records, (str, bytes)):
        raise SaveFormatError("Game objects must be a list of records")

    lookup = _players_by_id(players)
    game_map = GameMap(world.map_size_x, world.map_size_y)
    for index, record in enumerate(records):
        obj = record_to_object(record, index, unit_types, lookup)
        if not game_map.in_bounds(obj.x, obj.y):
            raise IntegrityError(
                f"game object #{index} at ({obj.x},{obj.y}) lies outside the "
                f"{world.map_size_x}x{world.map_size_y} map")
        if game_map.add_object(obj) is None:
            msg = f"game object #{index} collides with another unit at ({obj.x},{obj.y})"
            logger.error(msg)
            raise IntegrityError(msg)

    world.replace_map(game_map)
    logger.info(f"Loaded {len(game_map.objects)} game objects")
    return len(game_map.objects)


# ----------------------------------------------------------------------
# Sessions
# ----------------------------------------------------------------------

@dataclass
class LoadedSession:
    world: World
    players: List[Player]
    active_index: int
    round_number: int


def save_session(world: World, players: Sequence[Player],
                 active_index: int, round_number: int) -> Dict[str, Any]:
    """Build a JSON-ready document for a game in progress."""
    return {
        'format_version': FORMAT_VERSION,
        'map_size_x': world.map_size_x,
        'map_size_y': world.map_size_y,
        'round': round_number,
        'active_player': active_index,
        'players': [p.to_dict() for p in players],
        'game_objects': save_world(world),
    }


def _player_from_dict(data: Mapping[str, Any], index: int) -> Player:
    where = f"player #{index}"
    name = _require_key(data, 'name', where)
    return Player(
        player_id=_require_int(data, 'player_id', where),
        name=str(name),
        color=str(data.get('color', 'white')),
        money=_require_int(data, 'money', where),
    )


def load_session(data: Mapping[str, Any], unit_types: UnitTypeRegistry,
                 config: Optional[GameConfig] = None,
                 rng: Optional[random.Random] = None) -> LoadedSession:
    """Recreate world and players from a session document."""
    version = _require_key(data, 'format_version', 'session')
    if version != FORMAT_VERSION:
        raise SaveFormatError(f"Unsupported session format version {version!r}")

    raw_players = _require_key(data, 'players', 'session')
    if not isinstance(raw_players, list) or not raw_players:
        raise SaveFormatError("session: 'players' must be a non-empty list")
    players = [_player_from_dict(p, i) for i, p in enumerate(raw_players)]
    if len({p.player_id for p in players}) != len(players):
        raise SaveFormatError("session: duplicate player ids")

    active_index = _require_int(data, 'active_player', 'session')
    if not 0 <= active_index < len(players):
        raise SaveFormatError(f"session: active player index {active_index} out of range")
    round_number = _require_int(data, 'round', 'session')

    try:
        scenario = Scenario(
            map_size_x=_require_int(data, 'map_size_x', 'session'),
            map_size_y=_require_int(data, 'map_size_y', 'session'),
            player_names=[p.name for p in players],
        )
    except ScenarioError as e:
        raise SaveFormatError(f"session: {e}") from e
    world = World(scenario, config=config, rng=rng, unit_types=unit_types)
    load_world(world, _require_key(data, 'game_objects', 'session'), unit_types, players)
    world.resume_round(players[active_index])
    return LoadedSession(world=world, players=players,
                         active_index=active_index, round_number=round_number)


def write_session(filepath: str, document: Mapping[str, Any]):
    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(document, f, indent=2)
    logger.info(f"Saved session to {filepath}")


def read_session(filepath: str) -> Dict[str, Any]:
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            return json.load(f)
    except UnicodeDecodeError as e:
        raise SaveFormatError(f"{filepath}: not UTF-8 text ({e})") from e
    except json.JSONDecodeError as e:
        raise SaveFormatError(f"{filepath}: not valid JSON ({e})") from e
