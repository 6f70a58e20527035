# src/duetrack/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console connector with the
reminder ticker in the background.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import ConsoleConfirmer, ConsoleNotifier, run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(state: AppState) -> None:
    try:
        await run_console_loop(state)
    finally:
        await state.store.aclose()


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = settings.log_level.upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (log file: %s)...", settings.app_name, log_file)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(
        settings=settings,
        notifier=ConsoleNotifier(),
        confirmer=ConsoleConfirmer(),
    )

    try:
        asyncio.run(_run(state))
    except KeyboardInterrupt:
        logger.info("Console KeyboardInterrupt, exiting.")
        print()

    logger.info("Bye.")


if __name__ == "__main__":
    main()
