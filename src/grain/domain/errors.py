"""Error hierarchy for grain.

Every expected failure derives from GrainError so the interface layer
can report it uniformly.
"""


class GrainError(Exception):
    """Base class for all grain errors."""


class ValidationError(GrainError):
    """Rejected input: bad amount, Sunday logging, bad filter or file name."""


class NothingToUndoError(GrainError):
    def __init__(self) -> None:
        super().__init__("no actions to undo")


class InsufficientBreakCreditsError(GrainError):
    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            f"not enough break credits (need {requested}, have {available})"
        )


class InternalConsistencyError(GrainError):
    """
    The undo stack points at data that no longer exists.

    Only happens when the data file was edited by hand or corrupted.
    """


class StorageError(GrainError):
    """A state, config or backup file could not be read or written."""
