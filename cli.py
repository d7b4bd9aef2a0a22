#!/usr/bin/env python3
"""
Skirmish - Command Line Interface

Create, inspect and advance saved games.

Usage:
    python cli.py new --size 10 10 --players 2 --out game.json
    python cli.py show game.json
    python cli.py act game.json move 3 4 3 5
    python cli.py act game.json produce 2 2 2 3 --type soldier
    python cli.py end-turn game.json
"""

import argparse
import json
import logging
import random
import sys

from skirmish.actions import Action
from skirmish.config import GameConfig, configure_logging
from skirmish.engine import GameEngine
from skirmish.exceptions import SkirmishError
from skirmish.game_state import summarize
from skirmish.renderer import Cursor, WorldRenderer
from skirmish.scenario import Scenario
from skirmish.units import UnitTypeRegistry

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='skirmish',
        description='Turn-based grid strategy rule engine'
    )
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output')
    parser.add_argument('--types', '-t', type=str, default=None,
                        help='Unit type JSON file (default: built-in types)')

    # Also accepted after the command; SUPPRESS keeps a top-level value
    types_parser = argparse.ArgumentParser(add_help=False)
    types_parser.add_argument('--types', '-t', type=str, default=argparse.SUPPRESS,
                              help='Unit type JSON file (default: built-in types)')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # New command
    new_parser = subparsers.add_parser('new', parents=[types_parser],
                                       help='Create a new game')
    new_parser.add_argument('--size', type=int, nargs=2, default=[10, 10],
                            metavar=('W', 'H'), help='Map size')
    new_parser.add_argument('--players', '-p', type=int, default=2,
                            help='Number of players')
    new_parser.add_argument('--scenario', type=str, default=None,
                            help='Scenario JSON file (overrides --size/--players)')
    new_parser.add_argument('--seed', type=int, default=None,
                            help='Random seed for start positions')
    new_parser.add_argument('--out', '-o', type=str, required=True,
                            help='Save file to write')

    # Show command
    show_parser = subparsers.add_parser('show', parents=[types_parser],
                                        help='Render a saved game')
    show_parser.add_argument('file', type=str, help='Save file')
    show_parser.add_argument('--select', type=int, nargs=2, default=None,
                             metavar=('X', 'Y'), help='Highlight a cell')
    show_parser.add_argument('--json', action='store_true',
                             help='Print a JSON summary instead of the map')

    # Act command
    act_parser = subparsers.add_parser('act', parents=[types_parser],
                                       help='Apply one action to a saved game')
    act_parser.add_argument('file', type=str, help='Save file')
    act_parser.add_argument('kind', choices=['move', 'fight', 'produce'])
    act_parser.add_argument('coords', type=int, nargs=4,
                            metavar=('SX', 'SY', 'EX', 'EY'))
    act_parser.add_argument('--type', dest='produce_type', type=str, default=None,
                            help='Unit type to produce')

    # End turn command
    end_parser = subparsers.add_parser('end-turn', parents=[types_parser],
                                       help='End the current turn')
    end_parser.add_argument('file', type=str, help='Save file')

    return parser


def load_types(args) -> UnitTypeRegistry:
    if args.types:
        return UnitTypeRegistry.load(args.types)
    return UnitTypeRegistry.default()


def cmd_new(args, config: GameConfig) -> int:
    """Create a new game"""
    if args.scenario:
        scenario = Scenario.load(args.scenario)
    else:
        scenario = Scenario.standard(num_players=args.players, size=args.size[0],
                                     size_y=args.size[1])
    engine = GameEngine(load_types(args), config=config,
                        rng=random.Random(args.seed))
    engine.new_game(scenario)
    engine.save(args.out)
    print(WorldRenderer.render(engine.world))
    print(f"\nSaved to {args.out}")
    return 0


def cmd_show(args, config: GameConfig) -> int:
    """Render a saved game"""
    engine = GameEngine.load(args.file, load_types(args), config=config)
    if args.json:
        print(json.dumps({
            'round': engine.round_number,
            'active_player': engine.current_player.player_id,
            'players': summarize(engine.world, engine.players),
        }, indent=2))
        return 0

    cursor = None
    if args.select:
        cursor = Cursor()
        cursor.select(engine.world, *args.select)
    print(f"Round {engine.round_number}")
    print(WorldRenderer.render(engine.world, cursor=cursor))
    for player in engine.players:
        print()
        print(WorldRenderer.render_unit_details(engine.world, player))
    return 0


def cmd_act(args, config: GameConfig) -> int:
    """Apply one action"""
    unit_types = load_types(args)
    engine = GameEngine.load(args.file, unit_types, config=config)
    sx, sy, ex, ey = args.coords

    if args.kind == 'move':
        action = Action.move(sx, sy, ex, ey)
    elif args.kind == 'fight':
        action = Action.fight(sx, sy, ex, ey)
    else:
        if not args.produce_type:
            print("produce needs --type")
            return 2
        action = Action.produce(sx, sy, ex, ey, unit_types[args.produce_type])

    if not engine.submit(action):
        print(f"Rejected: {action}")
        return 1

    engine.save(args.file)
    print(f"Applied: {action}")
    print(WorldRenderer.render_compact(engine.world))
    if engine.is_over:
        winner = engine.winner
        print(f"\n*** {winner.name.upper() if winner else 'NOBODY'} WINS! ***")
    return 0


def cmd_end_turn(args, config: GameConfig) -> int:
    """End the current turn"""
    engine = GameEngine.load(args.file, load_types(args), config=config)
    player = engine.end_turn()
    engine.save(args.file)
    print(f"Round {engine.round_number}: {player.name} to move (money {player.money})")
    return 0


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = GameConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid configuration: {e}")
        return 1
    configure_logging('DEBUG' if args.verbose else config.log_level)

    # Map commands to functions
    commands = {
        'new': cmd_new,
        'show': cmd_show,
        'act': cmd_act,
        'end-turn': cmd_end_turn,
    }

    try:
        return commands[args.command](args, config)
    except (SkirmishError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main() or 0)
