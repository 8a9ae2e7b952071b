"""Exceptions raised by the index design search."""

from typing import Union


class CheckMyIndexError(Exception):
    """Base class for all checkmyindex errors."""


class InvalidInputError(CheckMyIndexError):
    """Raised when pools or search parameters are invalid.

    Collects every problem found so the caller can report them together.
    """

    def __init__(self, errors: Union[list[str], str]):
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__("Invalid input: " + "; ".join(self.errors))


class IncompatiblePoolTooSmallError(InvalidInputError):
    """Raised when too few chemistry-usable indexes remain to fill a lane."""


class NoSolutionFoundError(CheckMyIndexError):
    """Raised when no valid design was built within the trial budget."""

    def __init__(self, trials: int, reason: str = ""):
        self.trials = trials
        self.reason = reason
        msg = f"No solution found after {trials} trial(s)"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ChemistryConfigError(CheckMyIndexError):
    """Raised when the chemistry configuration file is malformed."""
