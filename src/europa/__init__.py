"""Space Dystopia: The Last Frontier, a terminal adventure on Europa."""

import sys

from rich.console import Console

from .cli import TerminalUI, run
from .config import Config
from .errors import ConfigError, GameInitError
from .logging import configure_logging, get_logger
from .session import GameSession

__all__ = ["main", "Config", "GameSession", "GameInitError"]


def main() -> None:
    """Entry point for the europa console script."""
    try:
        config = Config.from_env()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(2)

    configure_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        json_logs=config.json_logs,
    )

    logger = get_logger(__name__)
    logger.info(
        "application_starting",
        log_level=config.log_level,
        seed=config.seed,
        text_delay=config.text_delay,
    )

    ui = TerminalUI(Console(no_color=not config.color), text_delay=config.text_delay)
    sys.exit(run(ui, seed=config.seed))
