"""
Error taxonomy shared by the parsers, the frame classifier and the calculators.

Every error carries enough context (file, line, frame) to locate the
offending record without re-running the evaluation.
"""

from pathlib import Path
from typing import Optional, Union

Source = Optional[Union[str, Path]]


def _describe(source: Source) -> str:
    return str(source) if source is not None else "<text>"


class CtcMapError(Exception):
    """Base class for all input and consistency errors."""


class MalformedRecordError(CtcMapError):
    """Raised when a record line has the wrong field count or a non-integer field."""

    def __init__(self, line: str, line_number: int, expected: str, source: Source = None) -> None:
        self.line = line
        self.line_number = line_number
        self.expected = expected
        self.source = source
        super().__init__(
            f"Invalid [{expected}] record at {_describe(source)}:{line_number}: {line!r}"
        )


class EmptyInputError(CtcMapError):
    """Raised when a required input produced zero records."""

    what = "input"

    def __init__(self, source: Source = None) -> None:
        self.source = source
        super().__init__(f"No {self.what} record was found in {_describe(source)}")


class EmptyGroundTruthError(EmptyInputError):
    """Raised when the ground-truth track file holds no track."""

    what = "reference (GT) track"


class EmptyMappingError(EmptyInputError):
    """Raised when the result to ground-truth mapping holds no record."""

    what = "result to GT mapping"


class ConsistencyError(CtcMapError):
    """Raised when the mapping, result and ground-truth data disagree."""

    def __init__(self, message: str, time: Optional[int] = None) -> None:
        self.time = time
        if time is not None:
            message = f"Frame {time}: {message}"
        super().__init__(message)


class UnreadableInputError(CtcMapError):
    """Raised when an input file cannot be decoded as text."""

    def __init__(self, source: Source = None, reason: str = "") -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot decode {_describe(source)} as UTF-8 text: {reason}")
