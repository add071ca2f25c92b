"""Action dispatch and handler functions.

perform(state, action, *args) -> ActionResult is the main entry point.
Handlers mutate state in place and return descriptive text plus any
sub-flow they trigger (currently only combat). After every action the
ambient rules run: quest progress is recomputed and the win condition is
checked.

All indices are zero-based; the boundary layer translates menu numbers.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from ..logging import get_logger
from .combat import CombatPhase, Encounter
from .state import (
    AIRLOCK_ACTIVATED,
    DEFEAT_HEALTH_PENALTY,
    DISCOVERY_XP,
    ELITE_GUARD,
    EMP_DEVICE,
    EMP_ENERGY_COST,
    FOUND_EMERGENCY_GEAR,
    GUARD_DEFEATED,
    PICKUP_XP,
    READ_CLASSIFIED_INFO,
    SEARCHED_WORKBENCH,
    SECURITY_BOT,
    SECURITY_DEFEATED,
    SPACESUIT_EQUIPPED,
    TERMINAL_ACCESS_GRANTED,
    TERMINAL_HACKED,
    TERMINAL_ROOM,
    USE_ITEM_XP,
    GameState,
)
from .station import MAIN_QUEST, SURVEY_QUEST, VICTORY_TEXT

logger = get_logger(__name__)


@dataclass
class ActionResult:
    """Outcome of a single player action."""

    message: str
    ok: bool = True
    # Roster index of an enemy the action provoked, if any.
    enemy: int | None = None
    escaped: bool = False

    def add(self, line: str) -> None:
        self.message = f"{self.message}\n{line}" if self.message else line


def _rejected(message: str, **context) -> ActionResult:
    logger.warning("invalid_selection", reason=message, **context)
    return ActionResult(message, ok=False)


# --- Movement ---


def move(state: GameState, index: int) -> ActionResult:
    """Move to the location at ``index``."""
    if not 0 <= index < len(state.locations):
        return _rejected("You can't go there.", location=index)

    state.current_location = index
    state.visited_locations.add(index)
    state.player.steps += 1
    location = state.location
    logger.info("player_moved", player=state.player.name, location=location.name)

    result = ActionResult(f"You make your way to the {location.name}.")
    _check_ambush(state, result)
    return result


def _check_ambush(state: GameState, result: ActionResult) -> None:
    """A guarded terminal room attacks anyone who has access but hasn't won."""
    player = state.player
    if (
        state.current_location == TERMINAL_ROOM
        and player.has_flag(TERMINAL_ACCESS_GRANTED)
        and not player.has_flag(SECURITY_DEFEATED)
        and result.enemy is None
    ):
        result.add("A Security Bot has detected your presence!")
        result.enemy = SECURITY_BOT


# --- Interactions ---


def _examine_workbench(state: GameState, result: ActionResult) -> None:
    state.player.award_flag(SEARCHED_WORKBENCH, DISCOVERY_XP)


def _inspect_emergency_gear(state: GameState, result: ActionResult) -> None:
    state.player.award_flag(FOUND_EMERGENCY_GEAR, DISCOVERY_XP)


def _hack_terminal(state: GameState, result: ActionResult) -> None:
    state.player.set_flag(TERMINAL_HACKED)
    if state.player.has_flag(SECURITY_DEFEATED):
        result.add("With security down, the terminal offers no resistance.")
        return
    result.enemy = SECURITY_BOT


def _disable_security(state: GameState, result: ActionResult) -> None:
    if state.player.has_flag(GUARD_DEFEATED):
        result.add("The security post is already offline.")
        return
    result.enemy = ELITE_GUARD


def _activate_airlock(state: GameState, result: ActionResult) -> None:
    if not state.player.has_flag(SPACESUIT_EQUIPPED):
        result.add("The outer door refuses to open. You need a sealed spacesuit.")
        return
    state.player.set_flag(AIRLOCK_ACTIVATED)


_INTERACTION_EFFECTS: dict[str, Callable[[GameState, ActionResult], None]] = {
    "examine workbench": _examine_workbench,
    "inspect emergency gear": _inspect_emergency_gear,
    "hack terminal": _hack_terminal,
    "disable security": _disable_security,
    "activate airlock": _activate_airlock,
}


def interact(state: GameState, key: str) -> ActionResult:
    """Interact with the current location using ``key``.

    Keys the location does not offer get the default response and no side
    effects.
    """
    location = state.location
    result = ActionResult(location.interact(key))
    if key not in location.interactions:
        return result

    state.player.discover(key)
    effect = _INTERACTION_EFFECTS.get(key)
    if effect is not None:
        effect(state, result)
    logger.info(
        "interaction",
        player=state.player.name,
        location=location.name,
        key=key,
        enemy=result.enemy,
    )
    return result


def interact_by_index(state: GameState, index: int) -> ActionResult:
    """Interact using the ``index``-th available interaction."""
    keys = state.location.available_interactions
    if not keys:
        return ActionResult("No interactions available here.", ok=False)
    if not 0 <= index < len(keys):
        return _rejected("Invalid interaction choice.", interaction=index)
    return interact(state, keys[index])


# --- Items ---


def pickup_item(state: GameState, index: int) -> ActionResult:
    """Move the ``index``-th item here into the player's inventory."""
    location = state.location
    if not location.items:
        return ActionResult("There are no items to pick up here.", ok=False)
    if not 0 <= index < len(location.items):
        return _rejected("Invalid item choice.", item=index)

    item = location.items[index]
    if not item.can_pickup():
        return ActionResult("This item cannot be picked up.", ok=False)

    location.remove_item(item.name)
    state.player.add_item(item)
    state.player.items_collected += 1
    state.player.gain_experience(PICKUP_XP)
    logger.info("item_picked_up", player=state.player.name, item=item.name)
    return ActionResult(f"Picked up {item.name}")


def use_item(state: GameState, index: int) -> ActionResult:
    """Use the ``index``-th item in the player's inventory."""
    inventory = state.player.inventory
    if not len(inventory):
        return ActionResult("You don't have any items to use.", ok=False)
    if not 0 <= index < len(inventory):
        return _rejected("Invalid item choice.", item=index)

    item = inventory[index]
    if not item.can_use():
        return ActionResult("This item cannot be used.", ok=False)

    message = item.use() or f"You use the {item.name}."
    state.player.gain_experience(USE_ITEM_XP)
    logger.info("item_used", player=state.player.name, item=item.name)

    result = ActionResult(message)
    _check_ambush(state, result)
    return result


# --- Combat ---


def can_use_special(state: GameState) -> bool:
    """The EMP strike needs the device and enough energy."""
    player = state.player
    return EMP_DEVICE in player.inventory and player.energy.current >= EMP_ENERGY_COST


def spend_special(state: GameState) -> bool:
    """Pay for one EMP strike. Returns False if it isn't available."""
    if not can_use_special(state):
        return False
    state.player.energy.modify(-EMP_ENERGY_COST)
    return True


def resolve_combat(state: GameState, encounter: Encounter) -> ActionResult:
    """Write a finished encounter's outcome back to the persistent player."""
    player = state.player
    experience = player.experience
    foe = encounter.enemy

    if encounter.phase == CombatPhase.VICTORY:
        result = ActionResult(f"{foe.name} is offline.")
        if foe.defeat_flag:
            player.award_flag(foe.defeat_flag, foe.reward)
    elif encounter.phase == CombatPhase.DEFEAT:
        player.take_damage(DEFEAT_HEALTH_PENALTY)
        result = ActionResult(
            f"You limp away from the {foe.name}. "
            f"Health: {player.health.current}/{player.health.maximum}",
            ok=False,
        )
    else:
        raise ValueError(f"Encounter is still {encounter.phase.value}")

    logger.info(
        "combat_finished",
        player=player.name,
        enemy=foe.name,
        outcome=encounter.phase.value,
        rounds=encounter.rounds,
    )
    _after_action(state, result, experience)
    return result


# --- Ambient rules ---


def update_quests(state: GameState) -> None:
    """Recompute quest progress from flags and visited locations."""
    player = state.player
    main = state.quests[MAIN_QUEST]
    for index, flag in enumerate(
        (READ_CLASSIFIED_INFO, SECURITY_DEFEATED, AIRLOCK_ACTIVATED)
    ):
        main.update_objective(index, int(player.has_flag(flag)))
    state.quests[SURVEY_QUEST].update_objective(0, len(state.visited_locations))


def check_win(state: GameState) -> bool:
    """End the game if every escape flag is set. Returns True on the winning turn."""
    if state.is_over or not state.has_won():
        return False
    state.has_escaped = True
    state.is_over = True
    logger.info(
        "game_won",
        player=state.player.name,
        turns=state.turns,
        experience=state.player.experience,
    )
    return True


def _after_action(state: GameState, result: ActionResult, experience_before: int) -> None:
    gained = state.player.experience - experience_before
    if gained > 0:
        result.add(f"Gained {gained} experience!")
    update_quests(state)
    if check_win(state):
        result.escaped = True
        result.add(VICTORY_TEXT)


_ACTIONS: dict[str, Callable[..., ActionResult]] = {
    "move": move,
    "interact": interact,
    "interact_index": interact_by_index,
    "pickup": pickup_item,
    "use": use_item,
}


def perform(state: GameState, action: str, *args) -> ActionResult:
    """Run one player action and the rules that follow every action."""
    if state.is_over:
        return ActionResult("The game is over.", ok=False)

    handler = _ACTIONS.get(action)
    if handler is None:
        return _rejected("Invalid choice.", action=action)

    state.turns += 1
    experience = state.player.experience
    result = handler(state, *args)
    _after_action(state, result, experience)
    return result


# --- Views ---


@dataclass
class LocationView:
    name: str
    description: str
    # (name, description) of each item lying here.
    items: list[tuple[str, str]]
    interactions: list[str]


@dataclass
class StatusReport:
    name: str
    description: str
    health: str
    energy: str
    experience: int
    steps: int
    items_collected: int
    location: str
    flags: list[str] = field(default_factory=list)
    inventory: list[str] = field(default_factory=list)
    locations_explored: str = ""
    discovered_interactions: list[str] = field(default_factory=list)


@dataclass
class ObjectiveView:
    description: str
    progress: int
    target: int
    completed: bool


@dataclass
class QuestView:
    name: str
    description: str
    completed: bool
    objectives: list[ObjectiveView]


def describe_location(state: GameState) -> LocationView:
    location = state.location
    return LocationView(
        name=location.name,
        description=location.description,
        items=[(item.name, item.description) for item in location.items],
        interactions=location.available_interactions,
    )


def get_location_names(state: GameState) -> list[str]:
    return [location.name for location in state.locations]


def get_inventory(state: GameState) -> list[tuple[str, str]]:
    """(name, use description) for each carried item."""
    return [(item.name, item.use_description) for item in state.player.inventory]


def get_status(state: GameState) -> StatusReport:
    player = state.player
    return StatusReport(
        name=player.name,
        description=player.description,
        health=str(player.health),
        energy=str(player.energy),
        experience=player.experience,
        steps=player.steps,
        items_collected=player.items_collected,
        location=state.location.name,
        flags=sorted(player.flags),
        inventory=[item.name for item in player.inventory],
        locations_explored=f"{len(state.visited_locations)}/{len(state.locations)}",
        discovered_interactions=list(player.discovered_interactions),
    )


def get_quests(state: GameState) -> list[QuestView]:
    return [
        QuestView(
            name=quest.name,
            description=quest.description,
            completed=quest.is_completed,
            objectives=[
                ObjectiveView(
                    objective.description,
                    objective.progress,
                    objective.target,
                    objective.is_completed,
                )
                for objective in quest.objectives
            ],
        )
        for quest in state.quests
    ]
