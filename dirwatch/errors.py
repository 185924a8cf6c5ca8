"""
Exception taxonomy for dirwatch.

Nothing is recovered locally: every error here ends the program with a
message and exit status 1.
"""


class DirwatchError(Exception):
    """Base class for fatal dirwatch errors."""


class UsageError(DirwatchError):
    """The command line did not name a command to supervise."""


class SpawnError(DirwatchError):
    """The supervised command could not be started."""


class SignalError(DirwatchError):
    """The OS refused to signal or reap the supervised process."""


class WatchError(DirwatchError):
    """The filesystem watch failed and cannot be trusted to recover."""
