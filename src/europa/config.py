"""Configuration for Europa."""

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError


def _parse(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} has an invalid value: {raw!r}") from exc


@dataclass
class Config:
    """Application configuration."""

    log_level: str = "WARNING"
    log_file: Path | None = None
    json_logs: bool = False
    seed: int | None = None
    # Seconds per character for the typewriter effect; 0 prints instantly.
    text_delay: float = 0.03
    color: bool = True

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        log_file = os.getenv("EUROPA_LOG_FILE")

        return cls(
            log_level=os.getenv("EUROPA_LOG_LEVEL", cls.log_level),
            log_file=Path(log_file) if log_file else None,
            json_logs=os.getenv("EUROPA_JSON_LOGS", "").lower()
            in ("true", "1", "yes"),
            seed=_parse("EUROPA_SEED", None, int),
            text_delay=max(0.0, _parse("EUROPA_TEXT_DELAY", cls.text_delay, float)),
            color=os.getenv("EUROPA_COLOR", "true").lower()
            not in ("false", "0", "no"),
        )
