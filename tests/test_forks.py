"""Tests for parent to children tables."""

from ctcmap.aogm import detect_forks, divisions
from ctcmap.records import parse_track_records


class TestDetectForks:
    def test_no_parents(self):
        assert detect_forks(parse_track_records("1 0 3 0\n2 0 3 0\n")) == {}

    def test_children_are_grouped_and_sorted(self):
        tracks = parse_track_records("1 0 3 0\n5 4 6 1\n4 4 8 1\n7 9 9 4\n")
        assert detect_forks(tracks) == {1: (4, 5), 4: (7,)}

    def test_divisions_need_two_children(self):
        forks = {1: (4, 5), 4: (7,)}
        assert divisions(forks) == {1: (4, 5)}
