# src/flow_tasks/connectors/console_connector.py

from __future__ import annotations

import logging

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..errors import FlowError

logger = logging.getLogger(__name__)

PROMPT = "flow> "


def _handle_line(state: AppState, line: str) -> str:
    """
    Run one input line. Plain text (no leading slash) is shorthand for /add.

    Errors from the store are shown to the user; nothing here ends the loop.
    """
    if not line.startswith("/"):
        line = f"/add {line}"

    try:
        reply = command_registry.handle(state, line, emit=print)
    except FlowError as e:
        logger.info("Command failed: %s (%s)", line, e)
        return f"Error: {e}"
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."

    return reply or ""


def run_console_loop(state: AppState) -> None:
    logger.info("Console started (db=%s).", state.store.db_path)
    print(command_registry.handle(state, "/list"))
    print("\nType a title to add a task. Use /help for commands, /exit to quit.\n")

    while True:
        try:
            user_input = input(PROMPT).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            print()
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit", "/q"):
            logger.info("Console exit command received.")
            break

        print(_handle_line(state, user_input))
        print()

    logger.info("Console finished.")
