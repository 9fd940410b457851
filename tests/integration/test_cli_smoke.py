import json
from pathlib import Path

import pytest

from geonorm.cli import parse_args, run_command
from geonorm.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from geonorm.common.fs import read_csv, write_csv


def _seed_inputs(data_dir: Path, *, with_bad_row: bool) -> None:
    rows = [
        {"station": "1", "lat": "40°49.20'", "long": "68°31.48'", "depth": "-85"},
        {"station": "2", "lat": "41°30.00'", "long": "67°00.00'", "depth": "-120"},
        {"station": "3", "lat": "40°30.00'", "long": "70°00.00'", "depth": "-60"},
    ]
    if with_bad_row:
        rows.insert(1, {"station": "bad", "lat": "41°xx", "long": "67°00.00'", "depth": ""})
    write_csv(data_dir / "raw" / "stations.csv", ["station", "lat", "long", "depth"], rows)
    write_csv(
        data_dir / "raw" / "bathymetry_xyz.csv",
        ["x", "y", "depth"],
        [{"x": -68.5, "y": 40.8, "depth": -1500}, {"x": -68.4, "y": 40.8, "depth": -40}],
    )


def _args(data_dir: Path, *extra: str):
    return parse_args(["all", "--config-dir", "config", "--data-dir", str(data_dir), "--run-id", "run-test", *extra])


@pytest.mark.integration
def test_cli_all_generates_expected_artifacts(tmp_path: Path):
    data_dir = tmp_path / "data"
    _seed_inputs(data_dir, with_bad_row=False)

    exit_code = run_command(_args(data_dir))

    assert exit_code == EXIT_SUCCESS
    _header, rows = read_csv(data_dir / "out" / "stations_normalised.csv")
    assert [row["zone"] for row in rows] == ["Closed Area I", "Closed Area II", "Nantucket Lightship"]
    assert (data_dir / "out" / "bathymetry_bins.csv").exists()
    assert (data_dir / "run_meta" / "run-test.log.jsonl").exists()
    summary = json.loads((data_dir / "out" / "reports" / "run_summary.json").read_text(encoding="utf-8"))
    assert summary["status"] == "success"
    assert summary["normalise"]["delimiter"] == "°"


@pytest.mark.integration
def test_cli_reports_partial_when_records_are_rejected(tmp_path: Path):
    data_dir = tmp_path / "data"
    _seed_inputs(data_dir, with_bad_row=True)

    exit_code = run_command(_args(data_dir))

    assert exit_code == EXIT_PARTIAL
    errors = json.loads((data_dir / "out" / "stations_errors.json").read_text(encoding="utf-8"))
    assert [error["record_id"] for error in errors["errors"]] == ["bad"]
    log_lines = (data_dir / "run_meta" / "run-test.log.jsonl").read_text(encoding="utf-8").splitlines()
    assert any(json.loads(line)["event"] == "RECORD_REJECTED" for line in log_lines)


@pytest.mark.integration
def test_cli_missing_bathymetry_input_is_partial_or_strict_failure(tmp_path: Path):
    data_dir = tmp_path / "data"
    _seed_inputs(data_dir, with_bad_row=False)
    (data_dir / "raw" / "bathymetry_xyz.csv").unlink()

    assert run_command(_args(data_dir)) == EXIT_PARTIAL
    assert run_command(_args(data_dir, "--strict")) == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_delimiter_detection_failure_is_hard_fail(tmp_path: Path):
    data_dir = tmp_path / "data"
    write_csv(
        data_dir / "raw" / "stations.csv",
        ["station", "lat", "long", "depth"],
        [{"station": "1", "lat": "4049.20N", "long": "6831.48W", "depth": ""}],
    )

    assert run_command(parse_args(["normalise", "--config-dir", "config", "--data-dir", str(data_dir)])) == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_header_only_inputs_succeed(tmp_path: Path):
    data_dir = tmp_path / "data"
    write_csv(data_dir / "raw" / "stations.csv", ["station", "lat", "long", "depth"], [])
    write_csv(data_dir / "raw" / "bathymetry_xyz.csv", ["x", "y", "depth"], [])

    assert run_command(_args(data_dir)) == EXIT_SUCCESS
    header, rows = read_csv(data_dir / "out" / "stations_normalised.csv")
    assert header and rows == []
    summary = json.loads((data_dir / "out" / "reports" / "run_summary.json").read_text(encoding="utf-8"))
    assert summary["status"] == "success"
    assert summary["normalise"]["delimiter"] is None


@pytest.mark.integration
def test_cli_stations_without_latitudes_are_rejected_not_fatal(tmp_path: Path):
    data_dir = tmp_path / "data"
    _seed_inputs(data_dir, with_bad_row=False)
    write_csv(
        data_dir / "raw" / "stations.csv",
        ["station", "lat", "long", "depth"],
        [{"station": "1", "lat": "", "long": "68°31.48'", "depth": ""}],
    )

    assert run_command(_args(data_dir)) == EXIT_PARTIAL
    errors = json.loads((data_dir / "out" / "stations_errors.json").read_text(encoding="utf-8"))
    assert [error["error_code"] for error in errors["errors"]] == ["MALFORMED_COORDINATE"]


@pytest.mark.integration
def test_cli_unexpected_stage_error_is_logged_and_summarised(tmp_path: Path):
    data_dir = tmp_path / "data"
    _seed_inputs(data_dir, with_bad_row=False)
    (data_dir / "raw" / "bathymetry_xyz.csv").write_bytes(b"\xff\xfex,y,depth\n\xff\n")

    assert run_command(_args(data_dir)) == EXIT_PARTIAL
    log_lines = (data_dir / "run_meta" / "run-test.log.jsonl").read_text(encoding="utf-8").splitlines()
    failures = [json.loads(line) for line in log_lines if json.loads(line)["event"] == "STAGE_FAIL"]
    assert [(entry["stage"], entry["error_code"]) for entry in failures] == [("bathymetry", "UNEXPECTED_ERROR")]
    summary = json.loads((data_dir / "out" / "reports" / "run_summary.json").read_text(encoding="utf-8"))
    assert summary["failed_stages"] == ["bathymetry"]
    assert summary["normalise"]["rows_out"] == 3

    assert run_command(_args(data_dir, "--strict")) == EXIT_HARD_FAIL
