import json
import logging
import sys

import pytest

from app.core import logging_config
from app.core.config import Settings
from app.core.logging_config import ACCESS_LOGGER, SERVER_LOGGER, StructuredJSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="app.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="user %s created",
        args=("Ana",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_structured_formatter_emits_json_line():
    line = StructuredJSONFormatter().format(_record(request_path="/api/users"))

    payload = json.loads(line)
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "app.test"
    assert payload["message"] == "user Ana created"
    assert payload["request_path"] == "/api/users"
    assert "lineno" not in payload
    assert "timestamp" in payload


def test_structured_formatter_includes_exception():
    try:
        raise ValueError("bad input")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()

    payload = json.loads(StructuredJSONFormatter().format(record))

    assert "ValueError: bad input" in payload["exception"]


@pytest.fixture
def captured_config(monkeypatch):
    calls = []
    monkeypatch.setattr(logging_config, "_CONFIGURED", False)
    monkeypatch.setattr(logging_config.logging.config, "dictConfig", calls.append)
    return calls


def test_configure_logging_routes_streams(captured_config):
    logging_config.configure_logging(Settings(_env_file=None))

    config = captured_config[0]
    assert config["handlers"]["default"]["stream"] == "ext://sys.stderr"
    assert config["handlers"]["stdout"]["stream"] == "ext://sys.stdout"
    assert config["root"]["level"] == "INFO"
    for name in (ACCESS_LOGGER, SERVER_LOGGER):
        assert config["loggers"][name]["handlers"] == ["stdout"]
        assert config["loggers"][name]["propagate"] is False


def test_configure_logging_runs_once(captured_config):
    settings = Settings(_env_file=None, DEBUG=True)

    logging_config.configure_logging(settings)
    logging_config.configure_logging(settings)

    assert len(captured_config) == 1
    assert captured_config[0]["root"]["level"] == "DEBUG"
