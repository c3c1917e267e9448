"""
Errors raised while walking a repository.
"""

from pathlib import Path


class WalkRepoError(Exception):
    """Base class for walkrepo errors."""

    pass


class NotARuleFileError(WalkRepoError):
    """A rule-file parser was handed a file that is not a rule file."""

    pass


class WalkIOError(WalkRepoError):
    """
    A directory could not be listed or a rule file could not be read.

    The walk is aborted; `path` names the offending location and the
    underlying OSError is chained as __cause__.
    """

    def __init__(self, path, error: OSError):
        self.path = Path(path)
        self.error = error
        super().__init__(f"{self.path}: {error.strerror or error}")


class RuleFileReadError(WalkIOError):
    """A rule file exists but could not be read."""

    pass
