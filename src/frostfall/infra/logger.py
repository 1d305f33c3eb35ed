from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Union

# The rules core only asks for loggers; the game owning the loop configures them once.
DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record, so quotes in messages stay valid JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "line": record.lineno,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    level: Union[str, int] = "INFO",
    *,
    json_lines: bool = False,
    logfile: str | Path | None = None,
) -> None:
    """
    Route every ``frostfall.*`` logger through stdout and an optional file.

    Args:
        level: Logging level name or int (e.g., "DEBUG", logging.INFO).
        json_lines: Emit one JSON object per record instead of plain text.
        logfile: File path to append logs; None keeps output on stdout only.
    """
    formatter: logging.Formatter = JsonLineFormatter() if json_lines else logging.Formatter(DEFAULT_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if logfile is not None:
        log_path = Path(logfile)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    logging.captureWarnings(True)


def get_logger(name: str) -> logging.Logger:
    """Namespaced logger for a rules-core module; never configures handlers itself."""
    return logging.getLogger(name)
