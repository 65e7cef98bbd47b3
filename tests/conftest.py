"""Test configuration for pytest."""

import logging
import os
from pathlib import Path

import pytest

from tests.helpers.scenario import GT_TRACKS, MAPPING, RES_TRACKS, as_text


@pytest.fixture(autouse=True)
def configure_test_logging():
    """Configure logging for tests to be minimal."""
    os.environ['CTCMAP_LOG_LEVEL'] = 'WARNING'
    logging.getLogger().setLevel(logging.WARNING)
    logging.getLogger('ctcmap').setLevel(logging.ERROR)


@pytest.fixture
def scenario_text():
    """Ground truth, result and mapping text of a small division scenario."""
    return as_text(GT_TRACKS), as_text(RES_TRACKS), as_text(MAPPING)


@pytest.fixture
def scenario_files(tmp_path: Path, scenario_text):
    gt_text, res_text, map_text = scenario_text
    gt_path = tmp_path / "man_track.txt"
    res_path = tmp_path / "res_track.txt"
    map_path = tmp_path / "res_track.map.txt"
    gt_path.write_text(gt_text)
    res_path.write_text(res_text)
    map_path.write_text(map_text)
    return gt_path, res_path, map_path
