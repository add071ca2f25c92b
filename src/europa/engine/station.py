"""The fixed content of Europa station and fresh-game construction.

Item effects are closures over the session's GameState so that using an
item can read the current location and set quest flags on the player.
"""

from .combat import enemy
from .state import (
    AIRLOCK,
    DATAPAD,
    EMP_DEVICE,
    GUARD_DEFEATED,
    KEYCARD,
    MAINTENANCE_BAY,
    READ_CLASSIFIED_INFO,
    SECURITY_DEFEATED,
    SECURITY_POST,
    SPACESUIT,
    SPACESUIT_EQUIPPED,
    TERMINAL_ACCESS_GRANTED,
    TERMINAL_ROOM,
    VICTORY_XP,
    GameState,
    Player,
)
from .world import Item, Location, Quest

TITLE = "SPACE DYSTOPIA: THE LAST FRONTIER"
INTRO = (
    "Welcome to Space Station Europa. "
    "Your mission: Escape and reveal the truth."
)
VICTORY_TEXT = "Congratulations! You've successfully escaped and can now reveal the truth!"

MAIN_QUEST = 0
SURVEY_QUEST = 1


def _build_locations() -> list[Location]:
    bay = Location(
        "Maintenance Bay",
        "A sterile white room filled with repair equipment.",
    )
    bay.add_interaction(
        "examine workbench",
        "You find various repair tools and a hidden datapad.",
    )
    bay.add_interaction(
        "look under desk",
        "You find some old maintenance logs. The last entry mentions a "
        "keycard left in the terminal room.",
    )

    terminal = Location(
        "Terminal Room",
        "A quiet room with a terminal. Red light pulses steadily.",
    )
    terminal.add_interaction(
        "examine terminal",
        "The terminal displays various system diagnostics.",
    )
    terminal.add_interaction(
        "check cables",
        "The cables seem to lead to a hidden compartment behind the terminal.",
    )
    terminal.add_interaction(
        "hack terminal",
        "You begin hacking the terminal... Security has been alerted!",
    )

    post = Location(
        "Security Post",
        "A heavily guarded area with advanced security bots.",
    )
    post.add_interaction(
        "examine security",
        "The security systems are active but might be vulnerable to EMPs.",
    )
    post.add_interaction(
        "disable security",
        "You reach for the security console. An Elite Guard Bot swivels "
        "toward you!",
    )

    airlock = Location(
        "Airlock",
        "The gateway between the station and the void of space.",
    )
    airlock.add_interaction(
        "check airlock",
        "The airlock appears functional. A spacesuit would be required for EVA.",
    )
    airlock.add_interaction(
        "inspect emergency gear",
        "The emergency gear station contains a spacesuit and other EVA equipment.",
    )
    airlock.add_interaction(
        "activate airlock",
        "The airlock cycles... This is your chance to escape!",
    )

    return [bay, terminal, post, airlock]


def _build_items(state: GameState) -> dict[str, Item]:
    player = state.player

    datapad = Item(DATAPAD, "A tablet containing classified information")
    keycard = Item(KEYCARD, "A security keycard")
    spacesuit = Item(SPACESUIT, "Required for space travel")
    emp = Item(
        EMP_DEVICE,
        "Can disable security systems",
        use_description="Deploy during combat for a boosted strike.",
    )

    def read_datapad() -> str:
        player.award_flag(READ_CLASSIFIED_INFO, 20)
        return (
            "You carefully read through the classified information...\n"
            "The data reveals coordinates for a potentially habitable "
            "planet beyond Pluto."
        )

    def swipe_keycard() -> str:
        if state.current_location != TERMINAL_ROOM:
            return "There's nowhere to use the keycard here."
        player.award_flag(TERMINAL_ACCESS_GRANTED, 15)
        return "You swipe the keycard through the terminal..."

    def wear_spacesuit() -> str:
        if state.current_location != AIRLOCK:
            return "You should wait until you're at the airlock."
        player.award_flag(SPACESUIT_EQUIPPED, 10)
        return "You put on the spacesuit, checking all seals..."

    datapad.set_use_effect(
        read_datapad, "Access classified information about the mysterious signals"
    )
    keycard.set_use_effect(swipe_keycard, "Use at terminals to gain access")
    spacesuit.set_use_effect(wear_spacesuit, "Required for EVA activities")

    return {item.name: item for item in (datapad, keycard, spacesuit, emp)}


def _build_quests(location_count: int) -> list[Quest]:
    main = Quest("Escape Europa", "Find a way to escape and reveal the truth")
    main.add_objective("Access classified data", 1)
    main.add_objective("Bypass security", 1)
    main.add_objective("Escape via airlock", 1)

    survey = Quest("Survey the station", "Learn the layout of every section")
    survey.add_objective("Visit every section", location_count)
    return [main, survey]


def _build_enemies():
    return [
        enemy("Security Bot", 50, 10, 3, SECURITY_DEFEATED, VICTORY_XP),
        enemy("Elite Guard Bot", 75, 15, 5, GUARD_DEFEATED, VICTORY_XP),
    ]


def build_world(state: GameState) -> None:
    """Populate a state with locations, items, quests and enemies."""
    state.locations = _build_locations()
    items = _build_items(state)

    state.locations[MAINTENANCE_BAY].add_item(items[DATAPAD])
    state.locations[TERMINAL_ROOM].add_item(items[KEYCARD])
    state.locations[SECURITY_POST].add_item(items[EMP_DEVICE])
    state.locations[AIRLOCK].add_item(items[SPACESUIT])

    state.quests = _build_quests(len(state.locations))
    state.enemies = _build_enemies()


def new_game_state(player_name: str) -> GameState:
    """Create a fresh game for ``player_name``.

    Raises:
        GameInitError: If the name is empty.
    """
    state = GameState(player=Player(player_name))
    build_world(state)
    return state
