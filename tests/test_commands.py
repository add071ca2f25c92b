"""Tests for the action handlers and ambient rules."""

import pytest
from structlog.testing import capture_logs

from europa.engine.combat import CombatPhase, Encounter, player_combatant
from europa.engine.commands import (
    can_use_special,
    describe_location,
    get_inventory,
    get_quests,
    get_status,
    perform,
    resolve_combat,
    spend_special,
    update_quests,
)
from europa.engine.state import (
    AIRLOCK,
    AIRLOCK_ACTIVATED,
    DATAPAD,
    ELITE_GUARD,
    EMP_DEVICE,
    EMP_ENERGY_COST,
    FOUND_EMERGENCY_GEAR,
    GUARD_DEFEATED,
    MAINTENANCE_BAY,
    READ_CLASSIFIED_INFO,
    SEARCHED_WORKBENCH,
    SECURITY_BOT,
    SECURITY_DEFEATED,
    SECURITY_POST,
    SPACESUIT_EQUIPPED,
    TERMINAL_ACCESS_GRANTED,
    TERMINAL_HACKED,
    TERMINAL_ROOM,
    GameState,
)
from europa.engine.station import VICTORY_TEXT
from europa.engine.world import DEFAULT_RESPONSE, Item


def _pick_up_everything_at(state: GameState, index: int) -> None:
    state.current_location = index
    while state.location.items:
        perform(state, "pickup", 0)


# --- Movement ---


def test_move_updates_location_and_steps(state: GameState):
    result = perform(state, "move", TERMINAL_ROOM)
    assert result.ok
    assert state.current_location == TERMINAL_ROOM
    assert state.player.steps == 1
    assert TERMINAL_ROOM in state.visited_locations
    assert "Terminal Room" in result.message


@pytest.mark.parametrize("index", [-1, 4, 99])
def test_move_out_of_range_is_rejected(state: GameState, index: int):
    with capture_logs() as logs:
        result = perform(state, "move", index)
    assert not result.ok
    assert state.current_location == MAINTENANCE_BAY
    assert state.player.steps == 0
    assert any(log["event"] == "invalid_selection" for log in logs)


def test_unknown_action_is_rejected(state: GameState):
    result = perform(state, "teleport", 3)
    assert not result.ok
    assert state.turns == 0


# --- Interactions ---


def test_unknown_interaction_does_nothing(state: GameState):
    result = perform(state, "interact", "dance")
    assert result.message == DEFAULT_RESPONSE
    assert state.player.flags == set()
    assert result.enemy is None


def test_interaction_from_another_location_does_nothing(state: GameState):
    result = perform(state, "interact", "hack terminal")
    assert result.message == DEFAULT_RESPONSE
    assert not state.player.has_flag(TERMINAL_HACKED)


def test_discovery_reward_is_granted_once(state: GameState):
    first = perform(state, "interact", "examine workbench")
    second = perform(state, "interact", "examine workbench")
    assert "hidden datapad" in first.message
    assert "Gained 10 experience!" in first.message
    assert "experience" not in second.message
    assert state.player.has_flag(SEARCHED_WORKBENCH)
    assert state.player.experience == 10


def test_inspecting_emergency_gear(state: GameState):
    state.current_location = AIRLOCK
    perform(state, "interact", "inspect emergency gear")
    assert state.player.has_flag(FOUND_EMERGENCY_GEAR)


def test_interact_by_index(state: GameState):
    result = perform(state, "interact_index", 0)
    assert "hidden datapad" in result.message
    assert state.player.discovered_interactions == ["examine workbench"]
    assert get_status(state).discovered_interactions == ["examine workbench"]


def test_interact_by_bad_index_is_rejected(state: GameState):
    result = perform(state, "interact_index", 7)
    assert not result.ok


def test_hack_terminal_triggers_security_bot(state: GameState):
    state.current_location = TERMINAL_ROOM
    result = perform(state, "interact", "hack terminal")
    assert result.message.startswith("You begin hacking the terminal")
    assert state.player.has_flag(TERMINAL_HACKED)
    assert result.enemy == SECURITY_BOT


def test_hack_terminal_after_security_defeated(state: GameState):
    state.current_location = TERMINAL_ROOM
    state.player.set_flag(SECURITY_DEFEATED)
    result = perform(state, "interact", "hack terminal")
    assert result.enemy is None


def test_disable_security_triggers_elite_guard(state: GameState):
    state.current_location = SECURITY_POST
    assert perform(state, "interact", "disable security").enemy == ELITE_GUARD
    state.player.set_flag(GUARD_DEFEATED)
    assert perform(state, "interact", "disable security").enemy is None


def test_airlock_needs_a_spacesuit(state: GameState):
    state.current_location = AIRLOCK
    result = perform(state, "interact", "activate airlock")
    assert "sealed spacesuit" in result.message
    assert not state.player.has_flag(AIRLOCK_ACTIVATED)

    state.player.set_flag(SPACESUIT_EQUIPPED)
    perform(state, "interact", "activate airlock")
    assert state.player.has_flag(AIRLOCK_ACTIVATED)


# --- Items ---


def test_pickup_moves_item_to_inventory(state: GameState):
    datapad = state.location.items[0]
    result = perform(state, "pickup", 0)
    assert result.message.startswith(f"Picked up {DATAPAD}")
    assert state.location.get_item(DATAPAD) is None
    assert list(state.player.inventory) == [datapad]
    assert state.player.items_collected == 1
    assert state.player.experience == 5


def test_pickup_with_no_items_changes_nothing(state: GameState):
    perform(state, "pickup", 0)
    experience = state.player.experience
    result = perform(state, "pickup", 0)
    assert not result.ok
    assert result.message == "There are no items to pick up here."
    assert len(state.player.inventory) == 1
    assert state.player.items_collected == 1
    assert state.player.experience == experience


def test_pickup_bad_index_is_rejected(state: GameState):
    result = perform(state, "pickup", 3)
    assert not result.ok
    assert len(state.location.items) == 1


def test_fixed_items_cannot_be_picked_up(state: GameState):
    state.location.items.insert(0, Item("Workbench", "Bolted", is_pickable=False))
    result = perform(state, "pickup", 0)
    assert result.message == "This item cannot be picked up."
    assert len(state.player.inventory) == 0


def test_use_with_empty_inventory(state: GameState):
    result = perform(state, "use", 0)
    assert result.message == "You don't have any items to use."


def test_reading_the_datapad(state: GameState):
    perform(state, "pickup", 0)
    result = perform(state, "use", 0)
    assert "habitable planet" in result.message
    assert state.player.has_flag(READ_CLASSIFIED_INFO)
    # 5 pickup + 20 first read + 10 use
    assert state.player.experience == 35

    perform(state, "use", 0)
    assert state.player.experience == 45


def test_keycard_only_works_at_the_terminal(state: GameState):
    _pick_up_everything_at(state, TERMINAL_ROOM)
    state.current_location = MAINTENANCE_BAY
    result = perform(state, "use", 0)
    assert result.message.startswith("There's nowhere to use the keycard here.")
    assert not state.player.has_flag(TERMINAL_ACCESS_GRANTED)
    assert result.enemy is None


def test_keycard_at_terminal_draws_security(state: GameState):
    _pick_up_everything_at(state, TERMINAL_ROOM)
    result = perform(state, "use", 0)
    assert state.player.has_flag(TERMINAL_ACCESS_GRANTED)
    assert "Security Bot has detected your presence" in result.message
    assert result.enemy == SECURITY_BOT


def test_entering_guarded_terminal_room_triggers_ambush(state: GameState):
    state.player.set_flag(TERMINAL_ACCESS_GRANTED)
    assert perform(state, "move", TERMINAL_ROOM).enemy == SECURITY_BOT

    state.player.set_flag(SECURITY_DEFEATED)
    perform(state, "move", MAINTENANCE_BAY)
    assert perform(state, "move", TERMINAL_ROOM).enemy is None


def test_spacesuit_only_works_at_the_airlock(state: GameState):
    _pick_up_everything_at(state, AIRLOCK)
    state.current_location = SECURITY_POST
    perform(state, "use", 0)
    assert not state.player.has_flag(SPACESUIT_EQUIPPED)
    state.current_location = AIRLOCK
    perform(state, "use", 0)
    assert state.player.has_flag(SPACESUIT_EQUIPPED)


def test_emp_cannot_be_used_outside_combat(state: GameState):
    _pick_up_everything_at(state, SECURITY_POST)
    result = perform(state, "use", 0)
    assert result.message == "This item cannot be used."
    assert state.player.experience == 5


# --- Combat outcomes ---


def _finished(state: GameState, enemy_index: int, phase: CombatPhase) -> Encounter:
    encounter = Encounter(
        player_combatant(state.player.name), state.enemies[enemy_index], rng=None
    )
    encounter.phase = phase
    return encounter


def test_victory_sets_defeat_flag_and_grants_experience(state: GameState):
    result = resolve_combat(state, _finished(state, SECURITY_BOT, CombatPhase.VICTORY))
    assert state.player.has_flag(SECURITY_DEFEATED)
    assert state.player.experience == 50
    assert "Gained 50 experience!" in result.message


def test_victory_reward_is_not_repeated(state: GameState):
    resolve_combat(state, _finished(state, SECURITY_BOT, CombatPhase.VICTORY))
    resolve_combat(state, _finished(state, SECURITY_BOT, CombatPhase.VICTORY))
    assert state.player.experience == 50


def test_defeat_costs_health_but_not_the_game(state: GameState):
    result = resolve_combat(state, _finished(state, ELITE_GUARD, CombatPhase.DEFEAT))
    assert not result.ok
    assert state.player.health.current == 50
    assert not state.player.has_flag(GUARD_DEFEATED)
    assert not state.is_over


def test_resolving_an_active_encounter_fails(state: GameState):
    with pytest.raises(ValueError):
        resolve_combat(state, _finished(state, SECURITY_BOT, CombatPhase.IN_COMBAT))


def test_special_needs_emp_and_energy(state: GameState):
    assert not can_use_special(state)
    _pick_up_everything_at(state, SECURITY_POST)
    assert can_use_special(state)

    uses = 0
    while spend_special(state):
        uses += 1
    assert uses == 100 // EMP_ENERGY_COST
    assert state.player.energy.current == 0
    assert not can_use_special(state)


# --- Ambient rules ---


def test_quest_progress_follows_flags(state: GameState):
    state.player.set_flag(READ_CLASSIFIED_INFO)
    update_quests(state)
    main, survey = state.quests
    assert [o.progress for o in main.objectives] == [1, 0, 0]
    assert survey.objectives[0].progress == 1


def test_survey_quest_completes_after_visiting_everywhere(state: GameState):
    for index in range(len(state.locations)):
        perform(state, "move", index)
    quests = get_quests(state)
    assert quests[1].completed
    assert not quests[0].completed


def test_winning_ends_the_game(state: GameState):
    for flag in (READ_CLASSIFIED_INFO, SECURITY_DEFEATED, SPACESUIT_EQUIPPED):
        state.player.set_flag(flag)
    state.current_location = AIRLOCK

    result = perform(state, "interact", "activate airlock")
    assert result.escaped
    assert VICTORY_TEXT in result.message
    assert state.has_escaped and state.is_over
    assert get_quests(state)[0].completed

    after = perform(state, "move", MAINTENANCE_BAY)
    assert not after.ok
    assert state.current_location == AIRLOCK


def test_missing_flag_does_not_win(state: GameState):
    state.player.set_flag(READ_CLASSIFIED_INFO)
    state.player.set_flag(SPACESUIT_EQUIPPED)
    state.current_location = AIRLOCK
    result = perform(state, "interact", "activate airlock")
    assert not result.escaped
    assert not state.is_over


# --- Views ---


def test_describe_location(state: GameState):
    view = describe_location(state)
    assert view.name == "Maintenance Bay"
    assert view.items == [(DATAPAD, "A tablet containing classified information")]
    assert view.interactions == ["examine workbench", "look under desk"]


def test_status_and_inventory(state: GameState):
    _pick_up_everything_at(state, SECURITY_POST)
    report = get_status(state)
    assert report.name == "Riley"
    assert report.health == "Health: 100/100"
    assert report.inventory == [EMP_DEVICE]
    assert report.items_collected == 1
    assert report.locations_explored == "1/4"
    assert get_inventory(state) == [
        (EMP_DEVICE, "Deploy during combat for a boosted strike.")
    ]
