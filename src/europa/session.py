"""Session layer bridging the game engine and the terminal boundary."""

import random

import structlog

from .engine.combat import CombatPhase, Encounter, RoundResult, player_combatant
from .engine.commands import (
    ActionResult,
    LocationView,
    QuestView,
    StatusReport,
    can_use_special,
    describe_location,
    get_inventory,
    get_location_names,
    get_quests,
    get_status,
    perform,
    resolve_combat,
    spend_special,
)
from .engine.state import GameState
from .engine.station import new_game_state
from .logging import get_logger

logger = get_logger(__name__)


class GameSession:
    """Owns one GameState, its random source and the active encounter.

    Every state transition goes through this object. While an encounter is
    active only combat rounds are accepted.
    """

    def __init__(self, state: GameState, rng: random.Random):
        self.state = state
        self.rng = rng
        self.encounter: Encounter | None = None

    @classmethod
    def new(
        cls,
        player_name: str,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> "GameSession":
        """Start a fresh game.

        Raises:
            GameInitError: If ``player_name`` is empty.
        """
        state = new_game_state(player_name)
        structlog.contextvars.bind_contextvars(player=state.player.name)
        logger.info("new_game_started", seed=seed)
        return cls(state, rng or random.Random(seed))

    @property
    def phase(self) -> CombatPhase:
        if self.encounter is None:
            return CombatPhase.NOT_IN_COMBAT
        return self.encounter.phase

    @property
    def in_combat(self) -> bool:
        return self.phase == CombatPhase.IN_COMBAT

    @property
    def is_over(self) -> bool:
        return self.state.is_over

    @property
    def has_escaped(self) -> bool:
        return self.state.has_escaped

    # --- Actions ---

    def _act(self, action: str, *args) -> ActionResult:
        if self.in_combat:
            logger.warning("action_during_combat", action=action)
            return ActionResult("You're in the middle of a fight!", ok=False)
        result = perform(self.state, action, *args)
        if result.enemy is not None:
            self._start_combat(result.enemy)
        return result

    def move(self, index: int) -> ActionResult:
        return self._act("move", index)

    def interact(self, key: str) -> ActionResult:
        return self._act("interact", key)

    def interact_choice(self, index: int) -> ActionResult:
        return self._act("interact_index", index)

    def pickup(self, index: int) -> ActionResult:
        return self._act("pickup", index)

    def use(self, index: int) -> ActionResult:
        return self._act("use", index)

    def quit(self) -> None:
        self.state.is_over = True
        logger.info("game_quit", turns=self.state.turns)

    # --- Combat ---

    def _start_combat(self, enemy_index: int) -> None:
        enemy = self.state.enemies[enemy_index]
        self.encounter = Encounter(
            player=player_combatant(self.state.player.name),
            enemy=enemy,
            rng=self.rng,
        )
        logger.info("combat_started", enemy=enemy.name, enemy_health=enemy.health)

    def can_use_special(self) -> bool:
        return can_use_special(self.state)

    def combat_round(self, special: bool = False) -> RoundResult:
        """Play one round of the active encounter.

        Outside combat nothing happens and the returned round carries the
        ``NOT_IN_COMBAT`` phase.
        """
        if not self.in_combat:
            logger.warning("combat_round_outside_combat")
            return RoundResult(
                round_number=0,
                player_damage=0,
                boosted=False,
                enemy_damage=None,
                player_health=self.state.player.health.current,
                enemy_health=0,
                phase=CombatPhase.NOT_IN_COMBAT,
                messages=["There is nothing to fight here."],
            )

        fallback = special and not spend_special(self.state)
        outcome = self.encounter.play_round(boosted=special and not fallback)
        if fallback:
            outcome.messages.insert(0, "No EMP available. You attack normally.")
        logger.debug(
            "combat_round",
            round=outcome.round_number,
            player_damage=outcome.player_damage,
            enemy_damage=outcome.enemy_damage,
            phase=outcome.phase.value,
        )

        if not self.encounter.is_active:
            resolved = resolve_combat(self.state, self.encounter)
            outcome.messages.extend(resolved.message.splitlines())
            self.encounter = None
        return outcome

    # --- Views ---

    def describe_location(self) -> LocationView:
        return describe_location(self.state)

    def location_names(self) -> list[str]:
        return get_location_names(self.state)

    def inventory(self) -> list[tuple[str, str]]:
        return get_inventory(self.state)

    def status(self) -> StatusReport:
        return get_status(self.state)

    def quests(self) -> list[QuestView]:
        return get_quests(self.state)
