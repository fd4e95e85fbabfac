"""Tests for the command line entry point and logging setup."""
import json
import logging

import pytest

from indent_planner.utils import paths
from indent_planner.utils.logging_config import APP_LOGGER_NAME, setup_logging
from main import build_inputs, main

from conftest import bonding_row, day, indent_row, purchase_row


@pytest.fixture(autouse=True)
def reset_app_logger():
    """Drop handlers installed by setup_logging between tests."""
    yield
    logger = logging.getLogger(APP_LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def _request():
    return {
        "bonding": [bonding_row("C1", "Alpha", 1000)],
        "indents": [indent_row("C1", day(-5), 100)],
        "purchases": [
            purchase_row("C1", day(-5), day(-5), 50),
            purchase_row("C1", day(-2), day(-5), 50),
        ],
        "planning_date": day(0).isoformat(),
        "parameters": {"target_daily_requirement": 1000, "plant_start_date": day(-30).isoformat()},
    }


class TestBuildInputs:
    def test_parameters_override_defaults(self):
        """Request parameters win over configured defaults."""
        inputs = build_inputs(_request(), {"target_daily_requirement": 0.0, "plant_capacity_percent": 100.0})
        assert inputs.target_daily_requirement == 1000
        assert inputs.plant_capacity_percent == 100.0
        assert inputs.planning_date == "2025-11-20"

    def test_unknown_parameters_ignored(self):
        """Parameters the engine does not know are dropped."""
        request = dict(_request(), parameters={"bogus": 1})
        inputs = build_inputs(request, {"target_daily_requirement": 5.0})
        assert inputs.target_daily_requirement == 5.0


class TestMain:
    def test_writes_results(self, tmp_path):
        """A valid request writes the serialized results and exits 0."""
        request_file = tmp_path / "request.json"
        request_file.write_text(json.dumps(_request()), encoding="utf-8")
        output = tmp_path / "out" / "results.json"

        code = main([
            "--input", str(request_file),
            "--output", str(output),
            "--settings", str(tmp_path / "missing.json"),
            "--log-dir", str(tmp_path / "logs"),
        ])

        assert code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["table_data"][0]["indent_to_raise"] == pytest.approx(2000.0)

    def test_missing_dataset_returns_error(self, tmp_path, capsys):
        """A missing dataset is reported on stderr with exit code 1."""
        request = _request()
        del request["purchases"]
        request_file = tmp_path / "request.json"
        request_file.write_text(json.dumps(request), encoding="utf-8")

        code = main([
            "--input", str(request_file),
            "--settings", str(tmp_path / "missing.json"),
            "--log-dir", str(tmp_path / "logs"),
        ])

        assert code == 1
        assert "purchase_rows" in capsys.readouterr().err

    def test_null_parameter_returns_error(self, tmp_path, capsys):
        """A null numeric parameter is reported by name with exit code 1."""
        request = _request()
        request["parameters"]["target_daily_requirement"] = None
        request_file = tmp_path / "request.json"
        request_file.write_text(json.dumps(request), encoding="utf-8")

        code = main([
            "--input", str(request_file),
            "--settings", str(tmp_path / "missing.json"),
            "--log-dir", str(tmp_path / "logs"),
        ])

        assert code == 1
        assert "target_daily_requirement" in capsys.readouterr().err

    def test_numeric_string_parameter_is_accepted(self):
        """Numbers sent as strings are coerced to floats."""
        request = _request()
        request["parameters"]["target_daily_requirement"] = "1000"
        inputs = build_inputs(request, {"target_daily_requirement": 0.0, "season_total_days": 0})
        assert inputs.target_daily_requirement == 1000.0


class TestSetupLogging:
    def test_handlers_installed_once(self, tmp_path):
        """Repeated setup does not duplicate handlers."""
        logger = setup_logging(tmp_path)
        again = setup_logging(tmp_path)
        assert logger is again
        assert len(logger.handlers) == 2

    def test_warnings_reach_log_file(self, tmp_path):
        """Module warnings propagate into the rotating log file."""
        logger = setup_logging(tmp_path)
        logging.getLogger("indent_planner.engine").warning("stock position looks odd")
        for handler in logger.handlers:
            handler.flush()
        log_files = list(tmp_path.glob("indent_planner_*.log"))
        assert len(log_files) == 1
        assert "stock position looks odd" in log_files[0].read_text(encoding="utf-8")


class TestLogsDir:
    def test_read_only_project_falls_back_to_home(self, tmp_path, monkeypatch):
        """An unwritable project root sends logs to the home directory."""
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setattr(paths, "_try_writable", lambda path: False)
        assert paths.get_logs_dir() == tmp_path / ".indent_planner" / "logs"
        assert (tmp_path / ".indent_planner" / "logs").is_dir()
