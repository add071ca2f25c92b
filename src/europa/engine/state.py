"""Mutable per-session game state.

Holds the persistent player, the station locations, the quest list and the
enemy roster. A fresh state is built by ``station.new_game_state``.
"""

from dataclasses import dataclass, field

from ..errors import GameInitError
from ..logging import get_logger
from .combat import Combatant
from .stats import Stat
from .world import Inventory, Item, Location, Quest

logger = get_logger(__name__)

# Location indices
MAINTENANCE_BAY = 0
TERMINAL_ROOM = 1
SECURITY_POST = 2
AIRLOCK = 3

START_LOCATION = MAINTENANCE_BAY

# Enemy roster indices
SECURITY_BOT = 0
ELITE_GUARD = 1

# Quest flags
READ_CLASSIFIED_INFO = "read_classified_info"
TERMINAL_ACCESS_GRANTED = "terminal_access_granted"
TERMINAL_HACKED = "terminal_hacked"
SECURITY_DEFEATED = "security_defeated"
GUARD_DEFEATED = "guard_defeated"
SPACESUIT_EQUIPPED = "spacesuit_equipped"
AIRLOCK_ACTIVATED = "airlock_activated"
SEARCHED_WORKBENCH = "searched_workbench"
FOUND_EMERGENCY_GEAR = "found_emergency_gear"

# All of these must hold for the player to escape.
WIN_FLAGS = (
    READ_CLASSIFIED_INFO,
    SECURITY_DEFEATED,
    SPACESUIT_EQUIPPED,
    AIRLOCK_ACTIVATED,
)

# Item names
DATAPAD = "Datapad"
KEYCARD = "Keycard"
SPACESUIT = "Spacesuit"
EMP_DEVICE = "EMP Device"

# Rewards and penalties
PICKUP_XP = 5
USE_ITEM_XP = 10
DISCOVERY_XP = 10
VICTORY_XP = 50
DEFEAT_HEALTH_PENALTY = 50
EMP_ENERGY_COST = 25

PLAYER_MAX_HEALTH = 100
PLAYER_MAX_ENERGY = 100


@dataclass
class Player:
    """The protagonist. Lives for the whole session."""

    name: str
    description: str = "A maintenance worker on Europa"
    health: Stat = field(default_factory=lambda: Stat("Health", PLAYER_MAX_HEALTH))
    energy: Stat = field(default_factory=lambda: Stat("Energy", PLAYER_MAX_ENERGY))
    inventory: Inventory = field(default_factory=Inventory)
    flags: set[str] = field(default_factory=set)
    experience: int = 0
    steps: int = 0
    items_collected: int = 0
    discovered_interactions: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise GameInitError("Name cannot be empty!")
        self.name = self.name.strip()

    def take_damage(self, damage: int) -> None:
        if damage < 0:
            logger.warning("negative_damage_rejected", player=self.name, damage=damage)
            return
        self.health.modify(-damage)

    def gain_experience(self, amount: int) -> int:
        """Add experience and return the amount actually granted."""
        if amount < 0:
            logger.warning("negative_experience_rejected", player=self.name, amount=amount)
            return 0
        self.experience += amount
        return amount

    def has_flag(self, flag: str) -> bool:
        return flag in self.flags

    def set_flag(self, flag: str) -> bool:
        """Set a quest flag. Returns False if it was already set."""
        if flag in self.flags:
            return False
        self.flags.add(flag)
        logger.info("flag_set", player=self.name, flag=flag)
        return True

    def award_flag(self, flag: str, experience: int) -> bool:
        """Set a flag and grant its reward, only the first time."""
        if not self.set_flag(flag):
            return False
        self.gain_experience(experience)
        return True

    def add_item(self, item: Item) -> None:
        self.inventory.add(item)

    def discover(self, interaction: str) -> None:
        if interaction not in self.discovered_interactions:
            self.discovered_interactions.append(interaction)


@dataclass
class GameState:
    """All state owned by one game session."""

    player: Player
    locations: list[Location] = field(default_factory=list)
    quests: list[Quest] = field(default_factory=list)
    enemies: list[Combatant] = field(default_factory=list)
    current_location: int = START_LOCATION
    visited_locations: set[int] = field(default_factory=lambda: {START_LOCATION})
    turns: int = 0
    is_over: bool = False
    has_escaped: bool = False

    @property
    def location(self) -> Location:
        return self.locations[self.current_location]

    def has_won(self) -> bool:
        """True when every escape flag is set."""
        return all(self.player.has_flag(flag) for flag in WIN_FLAGS)
