"""Exceptions raised at the edges of the study engine."""


class RunedeckError(Exception):
    """Base class for all runedeck errors."""


class InvalidGradeError(RunedeckError, ValueError):
    """A grade outside Again/Hard/Good/Easy reached the boundary."""

    def __init__(self, value: object):
        super().__init__(f"Invalid grade {value!r}: expected 1-4 or again/hard/good/easy")
        self.value = value


class QueueBuildError(RunedeckError):
    """One of the three queue subsets could not be fetched."""

    def __init__(self, subset: str, cause: BaseException):
        super().__init__(f"Failed to fetch {subset} cards: {cause}")
        self.subset = subset


class NoActiveCardError(RunedeckError):
    """A grade was submitted while the session had no current card."""


class DeckFileError(RunedeckError):
    """The deck file is missing, malformed, or could not be written."""
