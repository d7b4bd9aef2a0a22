"""
Game Configuration - Tunable rule constants and logging setup.

Values can come from defaults, environment variables or a JSON file.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any
import json
import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'off')


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be one of {_TRUE_VALUES + _FALSE_VALUES}, got {raw!r}")


@dataclass
class GameConfig:
    """Rule constants that are not part of the unit type data"""
    # Chebyshev distance kept free around every start unit
    start_min_distance: int = 2
    # Upper bound for random start position draws
    max_placement_attempts: int = 10000
    starting_money: int = 0
    # False: units only regain actions when the turn order wraps
    reenable_actions_each_turn: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        if self.start_min_distance < 0:
            raise ValueError("start_min_distance must be >= 0")
        if self.max_placement_attempts < 1:
            raise ValueError("max_placement_attempts must be >= 1")
        if self.starting_money < 0:
            raise ValueError("starting_money must be >= 0")

    @classmethod
    def from_env(cls) -> 'GameConfig':
        """Load from environment variables"""
        defaults = cls()
        return cls(
            start_min_distance=int(os.getenv('SKIRMISH_START_MIN_DISTANCE',
                                             defaults.start_min_distance)),
            max_placement_attempts=int(os.getenv('SKIRMISH_MAX_PLACEMENT_ATTEMPTS',
                                                 defaults.max_placement_attempts)),
            starting_money=int(os.getenv('SKIRMISH_STARTING_MONEY',
                                         defaults.starting_money)),
            reenable_actions_each_turn=_env_flag('SKIRMISH_REENABLE_EACH_TURN',
                                                 defaults.reenable_actions_each_turn),
            log_level=os.getenv('SKIRMISH_LOG_LEVEL', defaults.log_level),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameConfig':
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration"""
        return asdict(self)

    def save(self, filepath: str):
        """Save configuration to file"""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filepath: str) -> 'GameConfig':
        """Load configuration from file"""
        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)


def configure_logging(level: str = "INFO"):
    """Install a stream handler on the root logger."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO),
                        format=LOG_FORMAT)
