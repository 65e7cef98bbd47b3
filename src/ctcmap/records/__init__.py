"""
Cell Tracking Challenge record files.

Track files hold ``id start end parent`` records and node mapping files hold
``resId time gtId`` records, one per line.
"""

from .model import NodeMapping, TrackRecord
from .parser import (
    load_node_mappings,
    load_track_records,
    parse_node_mappings,
    parse_track_records,
    read_record_text,
)

__all__ = [
    "NodeMapping",
    "TrackRecord",
    "load_node_mappings",
    "load_track_records",
    "parse_node_mappings",
    "parse_track_records",
    "read_record_text",
]
