"""Exceptions raised by the Europa game."""


class EuropaError(Exception):
    """Base class for game errors."""


class GameInitError(EuropaError):
    """Raised when a game session cannot be started (e.g. an empty name)."""


class ConfigError(EuropaError):
    """Raised when the environment holds an unusable configuration value."""
