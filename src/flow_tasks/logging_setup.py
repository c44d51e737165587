# src/flow_tasks/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILENAME = "flow.log"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the interactive console readable:
    - allow flow_tasks logs at the configured console level
    - suppress Python warnings (captured as 'py.warnings') unless ERROR+
    - suppress any third-party logger unless ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name == "flow_tasks" or name.startswith("flow_tasks."):
            return True

        # py.warnings and third-party loggers
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Configure logging with:
    - Console handler: stderr, filtered, so log lines don't drown the task list
    - File handler: full logs for debugging

    Call this ONCE, very early. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILENAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)

    return log_file
