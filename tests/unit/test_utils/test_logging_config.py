import json
import logging

from utils.logging_config import JSONFormatter, PrettyFormatter, setup_logging
from utils.response import json_safe, standard_response
from decimal import Decimal


def _record(msg="run_started", **extra):
    record = logging.LogRecord("assistant.runner", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    line = JSONFormatter().format(_record(run_id="run-1", round_trip=2))
    payload = json.loads(line)
    assert payload["message"] == "run_started"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "assistant.runner"
    assert payload["run_id"] == "run-1"
    assert payload["round_trip"] == 2


def test_json_formatter_skips_unserializable_extras():
    payload = json.loads(JSONFormatter().format(_record(handle=object())))
    assert "handle" not in payload


def test_pretty_formatter_is_single_line():
    line = PrettyFormatter().format(_record(run_id="run-1"))
    assert "run_started" in line
    assert "run_id=run-1" in line
    assert "\n" not in line


def test_setup_logging_installs_one_handler():
    logger = setup_logging("DEBUG", "pretty", logger_name="test_setup_logging")
    setup_logging("DEBUG", "pretty", logger_name="test_setup_logging")
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, PrettyFormatter)


def test_json_safe_converts_decimals():
    data = {"qty": Decimal("3"), "price": Decimal("9.99"), "rows": (Decimal("1"),)}
    assert json_safe(data) == {"qty": 3, "price": 9.99, "rows": [1]}
    assert standard_response(True, data=data)["data"]["qty"] == 3
