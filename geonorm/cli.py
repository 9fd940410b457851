"""CLI entrypoint for the station geodata normalisation pipeline."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from geonorm.common.config_loader import ConfigBundle, load_all_configs
from geonorm.common.constants import (
    DELIMITER_SAMPLE_INDEX,
    EXIT_HARD_FAIL,
    EXIT_PARTIAL,
    EXIT_SUCCESS,
    STAGES,
)
from geonorm.common.errors import ConfigError, PipelineError
from geonorm.common.geometry import ShapelyGeometryProvider
from geonorm.common.time_utils import generate_run_id
from geonorm.common.logging import build_logger, close_logger, log_event
from geonorm.pipeline.bathymetry import run_bathymetry
from geonorm.pipeline.depth import DepthClassifier
from geonorm.pipeline.export import write_errors_json, write_normalised_csv
from geonorm.pipeline.normalise import run_normalise
from geonorm.pipeline.reports import summarise_normalisation, write_run_summary
from geonorm.pipeline.stations import read_station_records
from geonorm.pipeline.zones import load_zone_set


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=[*STAGES, "all"])
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def _resolve(data_dir: Path, value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else data_dir / path


def run_normalise_stage(bundle: ConfigBundle, classifier: DepthClassifier, data_dir: Path, logger, run_id: str) -> dict:
    cfg = bundle.normalise
    provider = ShapelyGeometryProvider()
    records = read_station_records(_resolve(data_dir, cfg["inputs"]["stations"]), cfg["fields"])
    zones = load_zone_set(cfg["zones"], provider, bundle.config_dir)

    result = run_normalise(
        records,
        zones,
        convention=bundle.convention,
        delimiter=cfg["coordinates"].get("delimiter"),
        classifier=classifier,
        provider=provider,
        sample_index=cfg["coordinates"].get("sample_index", DELIMITER_SAMPLE_INDEX),
    )
    for error in result.errors.values():
        log_event(
            logger,
            error.message,
            level=logging.WARNING,
            run_id=run_id,
            stage="normalise",
            record_id=error.record_id,
            event="RECORD_REJECTED",
            status="warning",
            error_code=error.error_code,
        )

    out_dir = data_dir / "out"
    write_normalised_csv(result, out_dir / cfg["output"]["normalised_filename"])
    write_errors_json(result, out_dir / cfg["output"]["errors_filename"])
    return summarise_normalisation(result, rows_in=len(records))


def run_bathymetry_stage(bundle: ConfigBundle, classifier: DepthClassifier, data_dir: Path) -> dict | None:
    cfg = bundle.normalise
    source = cfg["inputs"].get("bathymetry")
    if not source:
        return None
    return run_bathymetry(
        cfg["bathymetry"],
        classifier,
        _resolve(data_dir, source),
        data_dir / "out" / cfg["output"]["bathymetry_filename"],
    )


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    data_dir = Path(args.data_dir)

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    try:
        bundle = load_all_configs(config_dir, overlay_config_dir=overlay_config_dir)
        classifier = DepthClassifier(bundle.breakpoints)
        stages = STAGES if args.command == "all" else (args.command,)

        summaries: dict[str, dict | None] = {}
        failed_stages: list[str] = []
        had_partial_failure = False

        for stage in stages:
            log_event(logger, "stage start", run_id=run_id, stage=stage, event="STAGE_START", status="ok")
            try:
                if stage == "normalise":
                    summary = run_normalise_stage(bundle, classifier, data_dir, logger, run_id)
                    if summary["rejected"]:
                        had_partial_failure = True
                    rows_in, rows_out = summary["rows_in"], summary["rows_out"]
                elif stage == "bathymetry":
                    summary = run_bathymetry_stage(bundle, classifier, data_dir)
                    rows_in = rows_out = None if summary is None else summary["rows"]
                else:
                    raise ValueError(f"Unknown stage: {stage}")
                summaries[stage] = summary
            except ConfigError as exc:
                log_event(
                    logger,
                    f"configuration failure in stage {stage}: {exc}",
                    level=logging.ERROR,
                    run_id=run_id,
                    stage=stage,
                    event="STAGE_FAIL",
                    status="error",
                    error_code=exc.error_code,
                )
                return EXIT_HARD_FAIL
            except PipelineError as exc:
                had_partial_failure = True
                failed_stages.append(stage)
                log_event(
                    logger,
                    f"stage {stage} failed: {exc}",
                    level=logging.ERROR,
                    run_id=run_id,
                    stage=stage,
                    event="STAGE_FAIL",
                    status="error",
                    error_code=exc.error_code,
                )
                if args.strict:
                    return EXIT_HARD_FAIL
                continue
            except Exception as exc:
                had_partial_failure = True
                failed_stages.append(stage)
                log_event(
                    logger,
                    f"unexpected failure in stage {stage}: {exc!r}",
                    level=logging.ERROR,
                    run_id=run_id,
                    stage=stage,
                    event="STAGE_FAIL",
                    status="error",
                    error_code="UNEXPECTED_ERROR",
                )
                if args.strict:
                    return EXIT_HARD_FAIL
                continue
            log_event(
                logger,
                "stage end",
                run_id=run_id,
                stage=stage,
                event="STAGE_END",
                status="ok",
                rows_in=rows_in,
                rows_out=rows_out,
            )

        write_run_summary(
            data_dir,
            run_id,
            normalise=summaries.get("normalise"),
            bathymetry=summaries.get("bathymetry"),
            failed_stages=failed_stages,
        )
        if had_partial_failure:
            return EXIT_PARTIAL
        return EXIT_SUCCESS
    finally:
        close_logger(logger)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL
    except Exception:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
