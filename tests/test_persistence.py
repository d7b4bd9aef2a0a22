"""
Tests for saving and loading worlds and sessions.
"""

import json
import random

import pytest

from conftest import place
from skirmish import persistence
from skirmish.exceptions import IntegrityError, SaveFormatError
from skirmish.player import Player
from skirmish.scenario import Scenario
from skirmish.units import ActionKind
from skirmish.world import World


def _cells(world):
    """Comparable per-cell snapshot: type, owner, position, hp, used."""
    return [(x, y, o.unit_type.name, o.owner.player_id, o.hp, frozenset(o.used))
            for x, y, o in world.game_map.occupied_cells()]


@pytest.fixture
def populated(world, registry, players):
    a, b = players
    soldier = place(world, a, registry['T1'], 1, 1, hp=4)
    soldier.use(ActionKind.MOVE)
    place(world, a, registry['factory'], 0, 4)
    place(world, b, registry['cannon'], 3, 2, hp=1)
    return world


class TestSaveWorld:
    def test_records(self, populated):
        records = persistence.save_world(populated)
        assert records[0] == {'type': 'T1', 'owner': 0, 'x': 1, 'y': 1,
                              'hp': 4, 'used': ['MOVE']}
        assert len(records) == 3

    def test_records_are_json_ready(self, populated):
        json.dumps(persistence.save_world(populated))

    def test_position_mismatch_is_fatal(self, populated):
        obj = populated.get_object_at(1, 1)
        obj.x = 2
        with pytest.raises(IntegrityError):
            persistence.save_world(populated)

    def test_unplaced_arena_object_is_fatal(self, populated):
        obj = populated.get_object_at(3, 2)
        populated.game_map.cells[2][3] = None
        assert obj in populated.live_objects()
        with pytest.raises(IntegrityError):
            persistence.save_world(populated)


class TestLoadWorld:
    def test_round_trip(self, populated, registry, players):
        records = persistence.save_world(populated)
        fresh = World(Scenario(5, 5, player_names=["A", "B"]))
        assert persistence.load_world(fresh, records, registry, players) == 3
        assert _cells(fresh) == _cells(populated)
        assert fresh.game_map.integrity_problems() == []

    def test_players_by_id_mapping(self, populated, registry, players):
        records = persistence.save_world(populated)
        fresh = World(Scenario(5, 5))
        persistence.load_world(fresh, records, registry,
                               {p.player_id: p for p in players})
        assert fresh.get_object_at(3, 2).owner is players[1]

    def test_duplicate_position_is_fatal(self, world, registry, players):
        record = {'type': 'T1', 'owner': 0, 'x': 1, 'y': 1, 'hp': 5, 'used': []}
        with pytest.raises(IntegrityError):
            persistence.load_world(world, [record, dict(record)], registry, players)

    def test_out_of_bounds_is_fatal(self, world, registry, players):
        record = {'type': 'T1', 'owner': 0, 'x': 5, 'y': 1, 'hp': 5, 'used': []}
        with pytest.raises(IntegrityError):
            persistence.load_world(world, [record], registry, players)

    @pytest.mark.parametrize("change", [
        {'type': 'dragon'},
        {'owner': 9},
        {'hp': 0},
        {'hp': 6},
        {'used': ['JUMP']},
        {'x': 'one'},
    ])
    def test_bad_records(self, world, registry, players, change):
        record = {'type': 'T1', 'owner': 0, 'x': 1, 'y': 1, 'hp': 5, 'used': []}
        record.update(change)
        with pytest.raises(SaveFormatError):
            persistence.load_world(world, [record], registry, players)

    def test_missing_field(self, world, registry, players):
        record = {'type': 'T1', 'owner': 0, 'x': 1, 'hp': 5, 'used': []}
        with pytest.raises(SaveFormatError):
            persistence.load_world(world, [record], registry, players)

    def test_failed_load_leaves_world_untouched(self, populated, registry, players):
        before = _cells(populated)
        good = {'type': 'T1', 'owner': 0, 'x': 4, 'y': 4, 'hp': 5, 'used': []}
        bad = {'type': 'T1', 'owner': 7, 'x': 4, 'y': 0, 'hp': 5, 'used': []}
        with pytest.raises(SaveFormatError):
            persistence.load_world(populated, [good, bad], registry, players)
        assert _cells(populated) == before


class TestSession:
    def test_session_round_trip(self, populated, registry, players, tmp_path):
        a, b = players
        a.money, b.money = 12, 7
        document = persistence.save_session(populated, players,
                                            active_index=1, round_number=4)
        path = tmp_path / "game.json"
        persistence.write_session(str(path), document)

        session = persistence.load_session(persistence.read_session(str(path)),
                                           registry, rng=random.Random(1))
        assert session.round_number == 4
        assert session.active_index == 1
        assert [p.money for p in session.players] == [12, 7]
        assert session.world.active_player is session.players[1]
        assert _cells(session.world) == _cells(populated)
        # used actions survive, nothing is reset on load
        assert session.world.get_object_at(1, 1).was_used(ActionKind.MOVE)

    def test_unsupported_version(self, populated, registry, players):
        document = persistence.save_session(populated, players, 0, 1)
        document['format_version'] = 99
        with pytest.raises(SaveFormatError):
            persistence.load_session(document, registry)

    def test_bad_active_player(self, populated, registry, players):
        document = persistence.save_session(populated, players, 0, 1)
        document['active_player'] = 5
        with pytest.raises(SaveFormatError):
            persistence.load_session(document, registry)

    def test_duplicate_player_ids(self, populated, registry, players):
        document = persistence.save_session(populated, players, 0, 1)
        document['players'][1]['player_id'] = 0
        with pytest.raises(SaveFormatError):
            persistence.load_session(document, registry)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(SaveFormatError):
            persistence.read_session(str(path))

    def test_non_utf8_file(self, tmp_path):
        path = tmp_path / "binary.json"
        path.write_bytes(b"\xff\xfe\x00garbage")
        with pytest.raises(SaveFormatError):
            persistence.read_session(str(path))

    def test_player_dict(self):
        p = Player(3, "C", "green", 11)
        assert p.to_dict() == {'player_id': 3, 'name': 'C', 'color': 'green', 'money': 11}
