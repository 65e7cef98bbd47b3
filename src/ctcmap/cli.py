import logging
from pathlib import Path
from typing import Optional

import typer

from .aogm import calculator as calculator_module
from .aogm.cache import GroundTruthCache
from .aogm.calculator import BatchCalculator
from .batch import format_rows, header_lines, run_batch
from .config import PENALTY_PRESETS, PenaltyConfig, Settings
from .errors import CtcMapError
from .logging import get_logger, set_level

app = typer.Typer(help="ctcmap – AOGM/TRA tracking measures from node mappings", no_args_is_help=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug detail from every stage"),
) -> None:
    """
    Cell Tracking Challenge AOGM/TRA measures from result to ground-truth node mappings.
    """
    if verbose:
        get_logger(__name__)
        set_level(logging.DEBUG)


def _penalty(
    preset: Optional[str],
    ns: float,
    fn: float,
    fp: float,
    ed: float,
    ea: float,
    ec: float,
) -> PenaltyConfig:
    if preset is None:
        return PenaltyConfig(ns=ns, fn=fn, fp=fp, ed=ed, ea=ea, ec=ec)
    if preset not in PENALTY_PRESETS:
        raise typer.BadParameter(
            f"Unknown preset '{preset}'. Choose from: {', '.join(sorted(PENALTY_PRESETS))}",
            param_hint="--preset",
        )
    return PENALTY_PRESETS[preset]


PRESET_OPTION = typer.Option(None, "--preset", help="Penalty preset, e.g. 'ctc' (overrides the weights)")
NS_OPTION = typer.Option(5.0, "--ns", min=0.0, help="Splitting operations penalty")
FN_OPTION = typer.Option(10.0, "--fn", min=0.0, help="False negative vertices penalty")
FP_OPTION = typer.Option(1.0, "--fp", min=0.0, help="False positive vertices penalty")
ED_OPTION = typer.Option(1.0, "--ed", min=0.0, help="Redundant edges to be deleted penalty")
EA_OPTION = typer.Option(1.5, "--ea", min=0.0, help="Edges to be added penalty")
EC_OPTION = typer.Option(1.0, "--ec", min=0.0, help="Edges with wrong semantics penalty")
MATCHING_OPTION = typer.Option(
    False, "--matching-reports", help="Log which result label matches which ground-truth label per frame"
)


def _enable_matching_reports() -> None:
    # The pairs are logged at INFO by the calculator, which defaults to WARNING
    matching_logger = calculator_module.logger
    if matching_logger.getEffectiveLevel() > logging.INFO:
        matching_logger.setLevel(logging.INFO)


@app.command()
def measure(
    gt_path: Path = typer.Argument(..., exists=True, readable=True, help="Ground-truth track file (id start end parent)"),
    res_path: Path = typer.Argument(..., exists=True, readable=True, help="Result track file (id start end parent)"),
    map_path: Path = typer.Argument(..., exists=True, readable=True, help="Result to ground-truth mapping (resId time gtId)"),
    preset: Optional[str] = PRESET_OPTION,
    ns: float = NS_OPTION,
    fn: float = FN_OPTION,
    fp: float = FP_OPTION,
    ed: float = ED_OPTION,
    ea: float = EA_OPTION,
    ec: float = EC_OPTION,
    tra: bool = typer.Option(False, "--tra/--aogm", help="Report the normalised TRA instead of the AOGM"),
    consistency: bool = typer.Option(True, "--consistency/--no-consistency", help="Check input consistency"),
    reports: bool = typer.Option(False, "--reports", help="Report the count of each tracking error"),
    matching_reports: bool = MATCHING_OPTION,
) -> None:
    """
    Compute the AOGM (or TRA) of one result against the ground truth.
    """
    logger = get_logger(__name__)
    penalty = _penalty(preset, ns, fn, fp, ed, ea, ec)
    if matching_reports:
        _enable_matching_reports()

    try:
        cache = GroundTruthCache.from_path(gt_path)
    except (CtcMapError, OSError) as exc:
        logger.error(f"Cannot load ground truth: {exc}")
        raise typer.Exit(code=2) from exc

    calculator = BatchCalculator(
        cache,
        penalty=penalty,
        consistency_check=consistency,
        collect_reports=reports,
        matching_reports=matching_reports,
    )
    try:
        aogm = calculator.calculate_paths(res_path, map_path)
    except (CtcMapError, OSError) as exc:
        logger.error(f"AOGM problem: {exc}")
        raise typer.Exit(code=1) from exc

    if tra:
        typer.echo(f"TRA = {calculator.tra(aogm)}")
    else:
        typer.echo(f"AOGM = {aogm}")

    if reports:
        report = calculator.last_report
        for name, count in report.counts().items():
            typer.echo(f"{name.upper()} = {count}")
        for name, entries in report.details.items():
            for entry in entries:
                logger.info(f"{name.upper()}: {entry}")


@app.command()
def batch(
    gt_path: Path = typer.Argument(..., exists=True, readable=True, help="Ground-truth track file (id start end parent)"),
    result_dir: Path = typer.Argument(..., exists=True, file_okay=False, help="Folder of NAME.txt and NAME.map.txt pairs"),
    preset: Optional[str] = PRESET_OPTION,
    ns: float = NS_OPTION,
    fn: float = FN_OPTION,
    fp: float = FP_OPTION,
    ed: float = ED_OPTION,
    ea: float = EA_OPTION,
    ec: float = EC_OPTION,
    consistency: bool = typer.Option(False, "--consistency/--no-consistency", help="Check input consistency"),
    reports: bool = typer.Option(False, "--reports", help="Add the count of each tracking error"),
    matching_reports: bool = MATCHING_OPTION,
) -> None:
    """
    Compute AOGM and TRA for every result set in a folder.

    Writes commented header lines and CSV rows to standard output.
    """
    logger = get_logger(__name__)
    settings = Settings(
        penalty=_penalty(preset, ns, fn, fp, ed, ea, ec),
        consistency_check=consistency,
        collect_reports=reports,
        matching_reports=matching_reports,
    )
    if matching_reports:
        _enable_matching_reports()

    try:
        summary = run_batch(gt_path, result_dir, settings)
    except (CtcMapError, OSError) as exc:
        logger.error(f"Cannot load ground truth: {exc}")
        raise typer.Exit(code=2) from exc

    for line in header_lines(summary):
        typer.echo(line)
    for line in format_rows(summary, with_counts=reports):
        typer.echo(line)

    stats = summary.statistics()
    logger.info(f"n={stats['n']}")
    if stats["n"] == 0:
        logger.error(f"No result set in {result_dir} could be scored")
        raise typer.Exit(code=1)

    aogm, tra = stats["aogm"], stats["tra"]
    logger.info(f"AOGM max={aogm['max']}; mean={aogm['mean']:.5f}; min={aogm['min']}")
    logger.info(f"TRA  min={tra['min']:.5f}; mean={tra['mean']:.5f}; max={tra['max']:.5f}")
    for item in summary.failures():
        logger.warning(f"Failed {item.name}: {item.error}")
