"""
Tests for configuration loading and logging utilities
=======================================================
"""

import logging

import pytest
import yaml

from signbridge.modules.recognition.gesture_bank import load_gesture_registry
from signbridge.modules.utils.config import Config
from signbridge.modules.utils.logger import SignLogger, log_timing, setup_logging


class TestConfig:

    @pytest.fixture
    def config(self):
        return Config().load()

    def test_packaged_defaults(self, config):
        assert config.get("engine.score_threshold") == 7.0
        assert config.engine["max_candidates"] == 4
        assert config.smoother["window_size"] == 9
        assert config.debouncing == {"debounce_ms": 380, "cooldown_ms": 1400}
        assert config.geometry["extension_thresholds"]["ring"] == 1.55
        assert len(load_gesture_registry(config.gestures_path)) == 56

    def test_packaged_defaults_validate_cleanly(self, config):
        assert config._validate() == []

    def test_dotted_get_default(self, config):
        assert config.get("engine.missing", "fallback") == "fallback"
        assert config.get("no.such.path") is None

    def test_missing_files_fall_back(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            config = Config().load(
                config_path=str(tmp_path / "none.yaml"),
                gestures_path=str(tmp_path / "none_gestures.yaml"),
            )
        assert config.engine == {}
        assert config.gestures_path == str(tmp_path / "none_gestures.yaml")
        assert "Config file not found" in caplog.text
        assert "Gestures file not found" in caplog.text
        with pytest.raises(FileNotFoundError):
            load_gesture_registry(config.gestures_path)

    def test_gestures_path_recorded_for_engine(self, tmp_path):
        path = tmp_path / "gestures.yaml"
        path.write_text(yaml.safe_dump({"static_gestures": {
            "FIST": {"curl": {"index": {"full_curl": 1.0}}},
        }}))
        config = Config().load(gestures_path=str(path))
        assert config.to_dict()["gestures_path"] == str(path)
        assert "gestures" not in config.to_dict()
        assert list(load_gesture_registry(config.gestures_path)) == ["FIST"]

    def test_type_mismatch_warns(self, tmp_path, caplog):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            "smoother": {"window_size": "nine"},
            "learner": {"alpha": 1},
        }))
        with caplog.at_level(logging.WARNING):
            config = Config().load(config_path=str(path))
        assert "smoother.window_size: expected int" in caplog.text
        # int is accepted where float is expected
        assert "learner.alpha" not in caplog.text
        assert config.smoother["window_size"] == "nine"

    def test_instances_are_independent(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"engine": {"score_threshold": 5.0}}))
        custom = Config().load(config_path=str(path))
        default = Config().load()
        assert custom.get("engine.score_threshold") == 5.0
        assert default.get("engine.score_threshold") == 7.0

    def test_non_mapping_section(self):
        config = Config({"engine": [1, 2, 3]})
        assert config.engine == {}


class TestLogging:

    def test_sign_logger_history(self, caplog):
        sign_logger = SignLogger()
        with caplog.at_level(logging.INFO, logger="sign_events"):
            sign_logger.log_sign("HELLO", 91, timestamp=1.5)
            sign_logger.log_sign("YES", 88, timestamp=2.0)
        assert sign_logger.total_signs == 2
        assert sign_logger.sentence == "HELLO YES"
        assert sign_logger.get_history(1)[0]["sign"] == "YES"
        assert "HELLO" in caplog.text

    def test_log_timing_preserves_result(self, caplog):
        @log_timing
        def add(a, b):
            return a + b

        with caplog.at_level(logging.DEBUG):
            assert add(2, 3) == 5
        assert "add took" in caplog.text

    def test_setup_logging_file(self, tmp_path):
        log_file = tmp_path / "logs" / "signbridge.log"
        root = setup_logging("DEBUG", log_file=str(log_file))
        try:
            logging.getLogger("signbridge.test").debug("hello file")
            for handler in root.handlers:
                handler.flush()
            assert "hello file" in log_file.read_text()
        finally:
            for handler in list(root.handlers):
                handler.close()
                root.removeHandler(handler)

    def test_console_follows_level_by_default(self):
        root = setup_logging("DEBUG")
        try:
            assert root.level == logging.DEBUG
            assert root.handlers[0].level == logging.DEBUG
        finally:
            root.handlers.clear()

    def test_console_floor_with_debug_file(self, tmp_path):
        log_file = tmp_path / "signbridge.log"
        root = setup_logging("DEBUG", log_file=str(log_file), console_level="INFO")
        try:
            console, file_handler = root.handlers
            assert console.level == logging.INFO
            assert file_handler.level == logging.DEBUG
            assert root.level == logging.DEBUG
        finally:
            for handler in list(root.handlers):
                handler.close()
                root.removeHandler(handler)

    def test_log_timing_budget_warns(self, caplog):
        @log_timing(warn_ms=-1.0)
        def slow():
            return "done"

        @log_timing(warn_ms=60_000.0)
        def fast():
            return "done"

        with caplog.at_level(logging.DEBUG):
            assert slow() == "done"
            assert fast() == "done"
        levels = {record.getMessage().split()[0]: record.levelno for record in caplog.records}
        assert levels["slow"] == logging.WARNING
        assert levels["fast"] == logging.DEBUG
