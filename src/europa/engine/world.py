"""Data structures for the station: items, locations and quests.

Locations and quests are built once per session by ``station.build_world``
and live until the session ends. Items move between a location and the
player's inventory but are never destroyed.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

# Response for interaction keys a location does not know about.
DEFAULT_RESPONSE = "Nothing interesting happens."

# An item effect takes no arguments, mutates game state through its closure
# and may return a line of text describing what happened.
Effect = Callable[[], str | None]


@dataclass(eq=False)
class Item:
    """An object that can sit in a location or in the player's inventory."""

    name: str
    description: str
    is_usable: bool = False
    is_pickable: bool = True
    use_description: str = "No specific use instructions."
    effect: Effect | None = field(default=None, repr=False)

    def set_use_effect(self, effect: Effect, use_description: str) -> None:
        """Attach an effect; an item with an effect is usable."""
        self.effect = effect
        self.use_description = use_description
        self.is_usable = True

    def can_use(self) -> bool:
        return self.is_usable

    def can_pickup(self) -> bool:
        return self.is_pickable

    def use(self) -> str | None:
        """Run the attached effect. Unusable or effect-less items do nothing."""
        if not self.is_usable or self.effect is None:
            return None
        return self.effect()


@dataclass(eq=False)
class Location:
    """A place on the station."""

    name: str
    description: str
    # Interaction key -> response text, kept in insertion order.
    interactions: dict[str, str] = field(default_factory=dict)
    items: list[Item] = field(default_factory=list)

    def add_interaction(self, key: str, response: str) -> None:
        self.interactions[key] = response

    @property
    def available_interactions(self) -> list[str]:
        """Interaction keys in the order they were added."""
        return list(self.interactions)

    def interact(self, key: str) -> str:
        """Return the response for ``key``, or the default response."""
        return self.interactions.get(key, DEFAULT_RESPONSE)

    def add_item(self, item: Item) -> None:
        self.items.append(item)

    def get_item(self, name: str) -> Item | None:
        for item in self.items:
            if item.name == name:
                return item
        return None

    def remove_item(self, name: str) -> Item | None:
        """Remove the named item and return it; absent names are ignored."""
        item = self.get_item(name)
        if item is not None:
            self.items.remove(item)
        return item


@dataclass
class QuestObjective:
    """A single step of a quest with a numeric target."""

    description: str
    target: int
    progress: int = 0

    @property
    def is_completed(self) -> bool:
        return self.progress >= self.target


@dataclass
class Quest:
    """A named objective tracker."""

    name: str
    description: str
    objectives: list[QuestObjective] = field(default_factory=list)

    def add_objective(self, description: str, target: int) -> QuestObjective:
        objective = QuestObjective(description, target)
        self.objectives.append(objective)
        return objective

    def update_objective(self, index: int, value: int) -> bool:
        """Set absolute progress for one objective.

        Returns False (and changes nothing) when ``index`` is out of range.
        """
        if not 0 <= index < len(self.objectives):
            return False
        self.objectives[index].progress = value
        return True

    @property
    def is_completed(self) -> bool:
        return all(objective.is_completed for objective in self.objectives)


@dataclass
class Inventory:
    """Items carried by an actor, in pickup order."""

    items: list[Item] = field(default_factory=list)

    def add(self, item: Item) -> None:
        self.items.append(item)

    def get(self, name: str) -> Item | None:
        for item in self.items:
            if item.name == name:
                return item
        return None

    def __contains__(self, name: object) -> bool:
        return any(item.name == name for item in self.items)

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> Item:
        return self.items[index]
