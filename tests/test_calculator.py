"""Tests for repeated AOGM evaluation against a cached ground truth."""

import pytest

from ctcmap.aogm import (
    AogmReport,
    BatchCalculator,
    GroundTruthCache,
    evaluate_mapped,
    matching_report,
    tra_score,
)
from ctcmap.aogm import calculator as calculator_module
from ctcmap.config import PenaltyConfig
from ctcmap.errors import (
    ConsistencyError,
    EmptyGroundTruthError,
    EmptyMappingError,
    MalformedRecordError,
    UnreadableInputError,
)
from tests.helpers.scenario import GT_TRACKS, MAPPING, RES_TRACKS, as_text

SCENARIO_PENALTY = PenaltyConfig(ns=5, fn=10, fp=1, ed=1, ea=1.5, ec=1.35)


class RecordingEngine:
    """Engine double that records its inputs and returns a fixed score."""

    def __init__(self, aogm: float = 3.0) -> None:
        self.aogm = aogm
        self.calls = []

    def evaluate(self, gt_tracks, res_tracks, levels, gt_forks, res_forks, penalty):
        self.calls.append((gt_tracks, res_tracks, levels, gt_forks, res_forks, penalty))
        return AogmReport(aogm=self.aogm)


@pytest.fixture
def calculator(scenario_text):
    gt_text, _, _ = scenario_text
    return BatchCalculator(GroundTruthCache.load(gt_text), penalty=SCENARIO_PENALTY)


class TestCalculate:
    def test_scenario_score(self, calculator, scenario_text):
        _, res_text, map_text = scenario_text
        assert calculator.calculate(res_text, map_text) == pytest.approx(12.7)

    def test_repeated_calls_are_identical(self, calculator, scenario_text):
        _, res_text, map_text = scenario_text
        nodes, edges = calculator.get_gt_node_count(), calculator.get_gt_edge_count()
        first = calculator.calculate(res_text, map_text)
        second = calculator.calculate(res_text, map_text)
        assert first == second
        assert calculator.get_gt_node_count() == nodes
        assert calculator.get_gt_edge_count() == edges

    def test_state_replaced_between_results(self, calculator, scenario_text):
        _, res_text, map_text = scenario_text
        calculator.calculate(res_text, map_text)
        assert len(calculator.state.levels) == 6
        assert calculator.state.result_forks == {1: (2,)}

        calculator.calculate("1 0 1 0\n", "1 0 10\n1 1 10\n")
        state = calculator.state
        assert [level.time for level in state.levels] == [0, 1]
        assert [track.id for track in state.result_tracks] == [1]
        assert state.result_forks == {}
        assert state.report.fn == 1

    def test_failed_call_clears_state(self, calculator, scenario_text):
        _, res_text, map_text = scenario_text
        calculator.calculate(res_text, map_text)
        with pytest.raises(ConsistencyError):
            calculator.calculate(res_text, "1 1 12\n")
        assert calculator.state.levels == []
        assert calculator.last_report is None

    def test_calculate_paths(self, scenario_files):
        gt_path, res_path, map_path = scenario_files
        calculator = BatchCalculator(GroundTruthCache.from_path(gt_path), penalty=SCENARIO_PENALTY)
        assert calculator.calculate_paths(res_path, map_path) == pytest.approx(12.7)


class TestErrors:
    def test_empty_mapping(self, calculator, scenario_text):
        _, res_text, _ = scenario_text
        populous = "".join(f"{i} 0 100 0\n" for i in range(1, 500))
        with pytest.raises(EmptyMappingError):
            calculator.calculate(res_text, "")
        with pytest.raises(EmptyMappingError):
            calculator.calculate(populous, "\n")

    def test_empty_mapping_names_file(self, calculator, tmp_path, scenario_files):
        _, res_path, _ = scenario_files
        empty = tmp_path / "empty.map.txt"
        empty.write_text("")
        with pytest.raises(EmptyMappingError) as info:
            calculator.calculate_paths(res_path, empty)
        assert str(empty) in str(info.value)

    def test_empty_ground_truth(self, scenario_text):
        _, res_text, map_text = scenario_text
        with pytest.raises(EmptyGroundTruthError):
            evaluate_mapped("", res_text, map_text)

    def test_malformed_result(self, calculator, scenario_text):
        _, _, map_text = scenario_text
        with pytest.raises(MalformedRecordError):
            calculator.calculate("1 0 2\n", map_text)

    def test_undecodable_mapping_file(self, calculator, tmp_path, scenario_files):
        _, res_path, _ = scenario_files
        bad = tmp_path / "bad.map.txt"
        bad.write_bytes(b"1 0 10\n\xff\xfe 1 10\n")
        with pytest.raises(UnreadableInputError) as info:
            calculator.calculate_paths(res_path, bad)
        assert str(bad) in str(info.value)
        assert calculator.last_report is None

    @pytest.mark.parametrize("gt_id", [-5, 99999999999])
    def test_mapping_outside_ground_truth_labels(self, calculator, scenario_text, gt_id):
        _, res_text, _ = scenario_text
        with pytest.raises(ConsistencyError) as info:
            calculator.calculate(res_text, f"1 0 {gt_id}\n")
        assert info.value.time == 0


class TestNormalisation:
    def test_aogm_empty_and_tra(self, calculator, scenario_text):
        _, res_text, map_text = scenario_text
        aogm = calculator.calculate(res_text, map_text)
        assert calculator.aogm_empty == 7 * 10 + 5 * 1.5
        assert calculator.tra(aogm) == pytest.approx(1 - 12.7 / 77.5)

    def test_tra_clamped(self):
        assert tra_score(200.0, 100.0) == 0.0
        assert tra_score(0.0, 100.0) == 1.0
        assert tra_score(5.0, 0.0) == 0.0


class TestEngineBoundary:
    def test_engine_receives_tables(self, scenario_text):
        gt_text, res_text, map_text = scenario_text
        engine = RecordingEngine(aogm=3.0)
        calculator = BatchCalculator(GroundTruthCache.load(gt_text), penalty=SCENARIO_PENALTY, engine=engine)

        assert calculator.calculate(res_text, map_text) == 3.0
        gt_tracks, res_tracks, levels, gt_forks, res_forks, penalty = engine.calls[0]
        assert [track.id for track in gt_tracks] == [10, 12, 44]
        assert [track.id for track in res_tracks] == [1, 2]
        assert [level.time for level in levels] == [0, 1, 2, 3, 4, 5]
        assert gt_forks == {10: (12,)}
        assert res_forks == {1: (2,)}
        assert penalty is SCENARIO_PENALTY


class TestEvaluateMapped:
    def test_one_shot(self):
        report = evaluate_mapped(as_text(GT_TRACKS), as_text(RES_TRACKS), as_text(MAPPING), SCENARIO_PENALTY)
        assert report.aogm == pytest.approx(12.7)
        assert report.fn == 1
        assert report.ec == 2


class TestMatchingReport:
    def test_lines_per_matched_pair(self, calculator, scenario_text):
        _, res_text, map_text = scenario_text
        calculator.calculate(res_text, map_text)
        lines = matching_report(calculator.state.levels)
        assert lines[0] == "T=0 RES_label=1 GT_label=10"
        assert "T=3 RES_label=2 GT_label=12" in lines
        assert len(lines) == len(MAPPING)

    def test_calculator_logs_pairs_when_enabled(self, scenario_text, monkeypatch):
        gt_text, res_text, map_text = scenario_text
        logged = []
        monkeypatch.setattr(calculator_module.logger, "info", logged.append)

        quiet = BatchCalculator(GroundTruthCache.load(gt_text), penalty=SCENARIO_PENALTY)
        quiet.calculate(res_text, map_text)
        assert logged == []

        verbose = BatchCalculator(GroundTruthCache.load(gt_text), penalty=SCENARIO_PENALTY, matching_reports=True)
        verbose.calculate(res_text, map_text)
        assert logged == matching_report(verbose.state.levels)
