import json
import logging
from pathlib import Path

from geonorm.common.fs import read_csv, write_csv, write_json
from geonorm.common.time_utils import generate_run_id
from geonorm.common.logging import JsonLineFormatter, build_logger, close_logger, log_event
from geonorm.common.models import HemisphereConvention


def test_generate_run_id_prefix():
    assert generate_run_id().startswith("run-")


def test_hemisphere_convention_from_letters():
    assert HemisphereConvention.from_letters("n", "w") == HemisphereConvention(1, -1)
    assert HemisphereConvention.from_letters("S", "E") == HemisphereConvention(-1, 1)


def test_json_and_csv_round_trip(tmp_path: Path):
    write_json(tmp_path / "a" / "payload.json", {"b": 1, "a": [1, 2]})
    assert json.loads((tmp_path / "a" / "payload.json").read_text(encoding="utf-8")) == {"a": [1, 2], "b": 1}

    write_csv(tmp_path / "rows.csv", ["x", "y"], [{"x": 1, "y": 2, "z": 3}])
    header, rows = read_csv(tmp_path / "rows.csv")
    assert header == ["x", "y"]
    assert rows == [{"x": "1", "y": "2"}]


def test_read_csv_strips_byte_order_mark(tmp_path: Path):
    path = tmp_path / "bom.csv"
    path.write_text("\ufeffstation,lat\n1,40 49.20\n", encoding="utf-8")

    header, _rows = read_csv(path)
    assert header == ["station", "lat"]


def test_json_line_formatter_emits_stable_fields():
    record = logging.LogRecord("geonorm.test", logging.INFO, __file__, 1, "hello", None, None)
    record.stage = "normalise"

    payload = json.loads(JsonLineFormatter().format(record))

    assert payload["stage"] == "normalise"
    assert payload["message"] == "hello"
    assert payload["record_id"] is None


def test_build_logger_writes_jsonl_file(tmp_path: Path):
    logger = build_logger("run-log", tmp_path)
    log_event(logger, "stage start", run_id="run-log", event="STAGE_START", status="ok")
    close_logger(logger)

    lines = (tmp_path / "run_meta" / "run-log.log.jsonl").read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[0])["event"] == "STAGE_START"
