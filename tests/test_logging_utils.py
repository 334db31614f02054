import json
import logging

from floorgen.generation import FloorConfig, generate_floor
from floorgen.logging_utils import get_logger
from floorgen.server import _configure_logging


def test_key_value_format(monkeypatch, capsys):
    monkeypatch.setenv("FLOORGEN_LOG_LEVEL", "info")
    monkeypatch.delenv("FLOORGEN_LOG_JSON", raising=False)
    get_logger("floorgen.test").info(event="hello", rooms=3, note="two words", skipped=None)
    out = capsys.readouterr().out.strip()
    assert "level=info" in out
    assert "event=hello" in out
    assert "rooms=3" in out
    assert "note=two_words" in out
    assert "logger=floorgen.test" in out
    assert "skipped" not in out


def test_json_mode(monkeypatch, capsys):
    monkeypatch.setenv("FLOORGEN_LOG_LEVEL", "debug")
    monkeypatch.setenv("FLOORGEN_LOG_JSON", "1")
    get_logger("floorgen.test").debug(event="tick", n=1)
    rec = json.loads(capsys.readouterr().out.strip())
    assert rec["event"] == "tick" and rec["level"] == "debug" and rec["n"] == 1


def test_level_filter_and_stderr_for_errors(monkeypatch, capsys):
    monkeypatch.setenv("FLOORGEN_LOG_LEVEL", "warn")
    log = get_logger("floorgen.test")
    log.info(event="quiet")
    log.error(event="loud")
    captured = capsys.readouterr()
    assert "quiet" not in captured.out
    assert "event=loud" in captured.err


def test_get_logger_cached():
    assert get_logger("floorgen.same") is get_logger("floorgen.same")


def test_generation_emits_summary(monkeypatch, capsys):
    monkeypatch.setenv("FLOORGEN_LOG_LEVEL", "info")
    monkeypatch.setenv("FLOORGEN_LOG_JSON", "1")
    generate_floor(FloorConfig(seed=21, width=60, height=60))
    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.startswith("{")]
    summary = [rec for rec in lines if rec.get("event") == "floor_generated"]
    assert len(summary) == 1
    assert summary[0]["seed"] == 21
    assert summary[0]["rooms"] > 1


def test_configure_logging_idempotent(test_app, tmp_path, monkeypatch):
    monkeypatch.setattr(test_app, "instance_path", str(tmp_path))
    root = logging.getLogger()
    saved = list(root.handlers)
    try:
        _configure_logging(test_app)
        _configure_logging(test_app)
        assert len(root.handlers) == 2
        logging.getLogger("floorgen").info("written")
        for h in root.handlers:
            h.flush()
        assert (tmp_path / "floorgen.log").exists()
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved:
            root.addHandler(h)
