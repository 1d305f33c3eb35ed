import json
import logging

import pytest

from frostfall.infra import configure_logging, get_logger


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_installs_handlers(restore_root_logger, tmp_path):
    logfile = tmp_path / "logs" / "rules.log"
    configure_logging("DEBUG", logfile=logfile)

    assert restore_root_logger.level == logging.DEBUG
    assert len(restore_root_logger.handlers) == 2

    get_logger("frostfall.test").debug("snowfall %s", 3)
    for handler in restore_root_logger.handlers:
        handler.flush()
    assert "snowfall 3" in logfile.read_text(encoding="utf-8")


def test_get_logger_is_namespaced():
    assert get_logger("frostfall.systems").name == "frostfall.systems"


def test_json_lines_escape_quotes(restore_root_logger, tmp_path):
    logfile = tmp_path / "rules.jsonl"
    configure_logging(logging.INFO, json_lines=True, logfile=logfile)

    get_logger("frostfall.effects").warning('Effect "%s" refused', "naughty_list")
    for handler in restore_root_logger.handlers:
        handler.flush()

    record = json.loads(logfile.read_text(encoding="utf-8").strip())
    assert record["msg"] == 'Effect "naughty_list" refused'
    assert record["level"] == "WARNING"
    assert record["logger"] == "frostfall.effects"
