"""Bounded numeric gauges used for health and energy."""

from dataclasses import dataclass


@dataclass
class Stat:
    """A gauge whose current value is clamped to ``[0, maximum]``.

    A gauge created without an explicit ``current`` starts full.
    """

    name: str
    maximum: int
    current: int | None = None

    def __post_init__(self) -> None:
        if self.maximum < 0:
            raise ValueError(f"{self.name} maximum must be non-negative")
        if self.current is None:
            self.current = self.maximum
        self.current = max(0, min(self.maximum, self.current))

    def modify(self, delta: int) -> int:
        """Apply ``delta`` and return the new current value."""
        self.current = max(0, min(self.maximum, self.current + delta))
        return self.current

    @property
    def is_empty(self) -> bool:
        return self.current == 0

    def __str__(self) -> str:
        return f"{self.name}: {self.current}/{self.maximum}"
