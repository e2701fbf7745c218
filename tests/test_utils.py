"""
Utility tests: configuration loading, logging setup and the frame-rate meter.
"""

import json
import logging

import pytest

from utils import load_config, setup_logging, FpsMeter


def test_load_config_roundtrip(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"simulation_parameters": {"particle_count": 5000}}))
    assert load_config(str(path))["simulation_parameters"]["particle_count"] == 5000


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.json"))


def test_load_config_bad_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(json.JSONDecodeError):
        load_config(str(path))


def test_setup_logging_creates_log_dir(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging({"logging": {"level": "debug", "log_file": str(log_file)}})
        assert root.level == logging.DEBUG
        assert log_file.parent.is_dir()
        assert len(root.handlers) == 2
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_fps_meter_reports_every_fifth_tick():
    meter = FpsMeter(window=30, report_every=5)
    reports = [meter.tick(1 / 60) for _ in range(10)]
    assert reports[:4] == [None] * 4
    assert reports[4] == pytest.approx(60.0, rel=1e-4)
    assert reports[9] == pytest.approx(60.0, rel=1e-4)


def test_fps_meter_window_forgets_old_frames():
    meter = FpsMeter(window=5, report_every=5)
    for _ in range(5):
        meter.tick(1 / 10)
    for _ in range(4):
        meter.tick(1 / 100)
    assert meter.tick(1 / 100) == pytest.approx(100.0, rel=1e-4)


def test_fps_meter_guards_zero_dt():
    meter = FpsMeter(window=1, report_every=1)
    assert meter.tick(0.0) == pytest.approx(1e4, rel=1e-4)
