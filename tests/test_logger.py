"""Tests for the structured logger."""

import json
import logging

import pytest

from jinspect.parsers.class_parser import ClassFileParser
from shared.config import GlobalConfig
from shared.logger import InspectLogger


def read_lines(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestInspectLogger:
    def test_stage_scope(self):
        log = InspectLogger("scope", console_output=False)
        assert log.current_stage is None
        with log.stage("constant_pool"):
            assert log.current_stage == "constant_pool"
            with log.stage("attributes"):
                assert log.current_stage == "attributes"
            assert log.current_stage == "constant_pool"
        assert log.current_stage is None

    def test_stage_restored_after_error(self):
        log = InspectLogger("unwind", console_output=False)
        with pytest.raises(RuntimeError):
            with log.stage("methods"):
                raise RuntimeError("boom")
        assert log.current_stage is None

    def test_json_file_records(self, tmp_path):
        path = tmp_path / "logs" / "jinspect.log"
        log = InspectLogger(
            "decoder", log_file=path, json_logs=True, console_output=False
        )
        with log.stage("methods"):
            log.warning("Length mismatch on %s", "Code", declared=12)
        log.debug("filtered out at INFO")
        log.info("no stage")

        record, plain = read_lines(path)
        assert record["level"] == "WARNING"
        assert record["logger"] == "jinspect.decoder"
        assert record["message"] == "Length mismatch on Code"
        assert record["component"] == "decoder"
        assert record["stage"] == "methods"
        assert record["details"] == {"declared": 12}
        assert "stage" not in plain
        assert "details" not in plain

    def test_plain_file_format(self, tmp_path):
        path = tmp_path / "plain.log"
        log = InspectLogger("engine", log_file=path, console_output=False)
        with log.stage("fields"):
            log.info("Fields: %d", 3)
        log.info("done")

        first, second = path.read_text(encoding="utf-8").splitlines()
        assert "| engine/fields | Fields: 3" in first
        assert "| engine/- | done" in second

    def test_timed(self, tmp_path):
        path = tmp_path / "timed.log"
        log = InspectLogger(
            "timer", log_level="DEBUG", log_file=path, json_logs=True,
            console_output=False,
        )
        with log.timed("decode App.class") as timer:
            pass
        assert timer.elapsed >= 0
        messages = [r["message"] for r in read_lines(path)]
        assert messages[0] == "Started: decode App.class"
        assert messages[-1].startswith("Finished: decode App.class")

    def test_timed_failure(self, tmp_path):
        path = tmp_path / "failed.log"
        log = InspectLogger(
            "timer", log_level="DEBUG", log_file=path, json_logs=True,
            console_output=False,
        )
        with pytest.raises(ValueError):
            with log.timed("decode Broken.class"):
                raise ValueError("truncated")
        last = read_lines(path)[-1]["message"]
        assert last.startswith("Failed: decode Broken.class after")
        assert last.endswith("(ValueError)")

    def test_from_config(self, tmp_path):
        settings = GlobalConfig(log_level="WARNING", log_file=str(tmp_path / "cfg.log"))
        log = InspectLogger.from_config("cli", settings, console_output=False)
        assert log.underlying.level == logging.WARNING

        debug_log = InspectLogger.from_config(
            "cli", settings, debug=True, console_output=False
        )
        assert debug_log.underlying.level == logging.DEBUG

    def test_reinstantiation_replaces_handlers(self, tmp_path):
        InspectLogger("dup", log_file=tmp_path / "a.log", console_output=False)
        log = InspectLogger("dup", log_file=tmp_path / "b.log", console_output=False)
        assert len(log.underlying.handlers) == 1
        assert len(log.underlying.filters) == 1

    def test_accessors(self):
        log = InspectLogger("names", console_output=False)
        assert log.component == "names"
        assert log.underlying.name == "jinspect.names"


class TestParserStages:
    def test_records_carry_decode_stage(self, tmp_path, sample_bytes):
        path = tmp_path / "parse.log"
        log = InspectLogger(
            "parser", log_level="DEBUG", log_file=path, json_logs=True,
            console_output=False,
        )
        ClassFileParser(sample_bytes, logger=log).parse()

        stages = {r["message"].split(":")[0]: r.get("stage") for r in read_lines(path)}
        assert stages["Header"] == "header"
        assert stages["Constant pool"] == "constant_pool"
        assert stages["Interfaces"] == "linkage"
        assert stages["Fields"] == "fields"
        assert stages["Methods"] == "methods"
        assert stages["Attributes"] == "attributes"
        assert log.current_stage is None
