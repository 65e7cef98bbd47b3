import pytest
from hypothesis import given, strategies as st

from ctcmap.config import PENALTY_PRESETS, PenaltyConfig, Settings


class TestPenaltyConfig:
    def test_default_values(self):
        """Defaults are the Cell Tracking Challenge weights."""
        assert PenaltyConfig() == PenaltyConfig.cell_tracking_challenge()
        assert PenaltyConfig().as_tuple() == (5.0, 10.0, 1.0, 1.0, 1.5, 1.0)

    def test_preset_lookup(self):
        assert PENALTY_PRESETS["ctc"] == PenaltyConfig.cell_tracking_challenge()

    @given(weight=st.floats(max_value=-1e-9, allow_nan=False, allow_infinity=False))
    def test_negative_weight_rejected(self, weight):
        """For any negative weight, configuration is invalid."""
        with pytest.raises(ValueError):
            PenaltyConfig(ec=weight)

    @given(st.tuples(*[st.floats(min_value=0, max_value=1e6) for _ in range(6)]))
    def test_non_negative_weights_accepted(self, weights):
        assert PenaltyConfig(*weights).as_tuple() == weights


class TestSettings:
    def test_default_values(self):
        settings = Settings()
        assert settings.penalty == PenaltyConfig.cell_tracking_challenge()
        assert settings.consistency_check is True
        assert settings.collect_reports is False
        assert settings.matching_reports is False
        assert settings.map_suffix == ".map.txt"
        assert settings.track_suffix == ".txt"
