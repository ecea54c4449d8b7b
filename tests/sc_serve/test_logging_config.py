import json
import logging

import pytest

from sc_serve.logging_config import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_format_by_default(monkeypatch, capsys):
    monkeypatch.delenv("SC_SERVE_LOG_FORMAT", raising=False)
    configure_logging(level=logging.INFO)

    logging.getLogger("sc_serve.test").info("hello", extra={"dataset": "d"})

    record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert record["message"] == "hello"
    assert record["dataset"] == "d"


def test_plain_format_from_env(monkeypatch, capsys):
    monkeypatch.setenv("SC_SERVE_LOG_FORMAT", "plain")
    configure_logging(level="DEBUG")

    logging.getLogger("sc_serve.test").debug("plain hello")

    line = capsys.readouterr().err.strip().splitlines()[-1]
    assert "[DEBUG] sc_serve.test: plain hello" in line
    assert logging.getLogger().level == logging.DEBUG
