"""
Line-oriented parsers for track and node mapping text.

Parsing is strict: every non-blank line must hold exactly the expected number
of space-separated integers. The first bad line aborts the parse.
"""

import re
from pathlib import Path
from typing import Callable, List, TypeVar, Union

from ..errors import MalformedRecordError, Source, UnreadableInputError
from ..logging import get_logger
from .model import NodeMapping, TrackRecord

logger = get_logger(__name__)

T = TypeVar("T")

TRACK_FIELDS = "id start end parent"
MAPPING_FIELDS = "resId time gtId"

# Optional sign then ASCII digits; no underscores or embedded whitespace
INTEGER_FIELD = re.compile(r"[+-]?[0-9]+")


def _parse_lines(
    text: str,
    field_count: int,
    expected: str,
    build: Callable[..., T],
    source: Source,
) -> List[T]:
    records: List[T] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        fields = line.split(" ")
        if len(fields) != field_count:
            raise MalformedRecordError(line, line_number, expected, source)
        if not all(INTEGER_FIELD.fullmatch(value) for value in fields):
            raise MalformedRecordError(line, line_number, expected, source)
        values = [int(value) for value in fields]
        records.append(build(*values))
    return records


def parse_track_records(text: str, source: Source = None) -> List[TrackRecord]:
    """
    Parse track records of the form ``id start end parent``.

    Args:
        text: Track file content
        source: File identity used in error messages

    Returns:
        Track records in input order (empty for empty text)

    Raises:
        MalformedRecordError: A line is not four integers
    """
    tracks = _parse_lines(text, 4, TRACK_FIELDS, TrackRecord, source)
    logger.debug(f"Parsed {len(tracks)} track records from {source or '<text>'}")
    return tracks


def parse_node_mappings(text: str, source: Source = None) -> List[NodeMapping]:
    """
    Parse node mapping records of the form ``resId time gtId``.

    Args:
        text: Mapping file content
        source: File identity used in error messages

    Returns:
        Mapping records in input order (empty for empty text)

    Raises:
        MalformedRecordError: A line is not three integers
    """
    mappings = _parse_lines(text, 3, MAPPING_FIELDS, NodeMapping, source)
    logger.debug(f"Parsed {len(mappings)} mapping records from {source or '<text>'}")
    return mappings


def read_record_text(path: Union[str, Path]) -> str:
    """
    Read a record file as UTF-8 text.

    Raises:
        OSError: The file cannot be read
        UnreadableInputError: The file is not valid UTF-8
    """
    path = Path(path)
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise UnreadableInputError(path, str(exc)) from exc


def load_track_records(path: Union[str, Path]) -> List[TrackRecord]:
    path = Path(path)
    return parse_track_records(read_record_text(path), source=path)


def load_node_mappings(path: Union[str, Path]) -> List[NodeMapping]:
    path = Path(path)
    return parse_node_mappings(read_record_text(path), source=path)
