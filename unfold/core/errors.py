"""Exceptions that abort a run before any RunResult is produced."""


class UnfoldError(Exception):
    """Base error for a run that could not start or could not continue."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PreflightError(UnfoldError):
    """The source folder failed the checks that run before any mutation."""


class OutputDirectoryError(UnfoldError):
    """The flattened output directory could not be created."""
