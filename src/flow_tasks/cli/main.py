# src/flow_tasks/cli/main.py

"""
CLI entrypoint.

Initializes logging, opens the task store, then runs the console loop.
A store that cannot be opened or migrated is fatal: the process exits
with status 1 rather than run against an inconsistent schema.
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import NoReturn

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..errors import StorageError
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.store.close()
    except Exception:
        logger.debug("TaskStore close failed.", exc_info=True)


def _fatal(settings, err: StorageError) -> NoReturn:
    logger.critical("Cannot open task database %s: %s", settings.db_path, err)
    print(f"{settings.app_name}: cannot open task database: {err}", file=sys.stderr)
    sys.exit(1)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    console_level = getattr(logging, level_name, logging.WARNING)
    try:
        setup_logging(log_dir=settings.log_dir, console_level=console_level)
    except OSError as e:
        print(f"{settings.app_name}: cannot write logs to {settings.log_dir}: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("Starting %s...", settings.app_name)

    try:
        state = create_initial_state(settings=settings)
    except StorageError as e:
        _fatal(settings, e)

    def _handle_sigterm(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        raise KeyboardInterrupt

    try:
        signal.signal(signal.SIGTERM, _handle_sigterm)
    except (AttributeError, ValueError):
        # Some platforms don't have SIGTERM; not in main thread raises ValueError.
        pass

    try:
        run_console_loop(state)
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
