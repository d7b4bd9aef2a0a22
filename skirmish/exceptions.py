"""
Exceptions - Error hierarchy for the rule engine.

Rejected actions are not errors: the can_* predicates return False and the
executors report failure. These exceptions cover misuse of the API, broken
configuration data and corrupt or inconsistent saved games.
"""


class SkirmishError(Exception):
    """Base exception for all rule engine errors."""

    pass


class UnitTypeError(SkirmishError):
    """Raised when unit type data is invalid or references unknown types."""

    pass


class ScenarioError(SkirmishError):
    """Raised when a scenario description cannot be applied."""

    pass


class PlacementError(SkirmishError):
    """Raised when no valid start position can be found."""

    pass


class InvalidCoordinateError(SkirmishError, IndexError):
    """Raised when a cell query is made outside of the map."""

    pass


class EmptyCellError(SkirmishError, LookupError):
    """Raised when a query needs a game object but the cell is empty."""

    pass


class PersistenceError(SkirmishError):
    """Base exception for save and load failures."""

    pass


class IntegrityError(PersistenceError):
    """Raised when grid and object positions disagree."""

    pass


class SaveFormatError(PersistenceError):
    """Raised when saved data is missing fields or references unknown entities."""

    pass
