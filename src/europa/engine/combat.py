"""Turn-based combat between the player and a scripted enemy.

A fresh player combatant is built for each encounter from the player's
name; enemies come from the session's fixed roster and keep whatever
health they have left between encounters. Outcomes are written back to the
persistent player by the session, never through the combatant.

Each round the player strikes first. Victory is checked before the enemy
retaliates, and the encounter ends as soon as either side reaches zero.
"""

import random
from dataclasses import dataclass, field
from enum import Enum

from ..logging import get_logger

logger = get_logger(__name__)

# Inclusive jitter bands added to a combatant's base attack.
PLAYER_JITTER = (-2, 2)
ENEMY_JITTER = (-1, 1)

# Damage multiplier for the boosted special action.
SPECIAL_MULTIPLIER = 2

# Base profile of the stand-in built for the player at each encounter.
PLAYER_HEALTH = 100
PLAYER_ATTACK = 15
PLAYER_DEFENSE = 5

# Rounds after which the player is forced to retreat from a stalemate.
MAX_ROUNDS = 100


class CombatantKind(str, Enum):
    PLAYER = "player"
    ENEMY = "enemy"


JITTER_BANDS = {
    CombatantKind.PLAYER: PLAYER_JITTER,
    CombatantKind.ENEMY: ENEMY_JITTER,
}


class CombatPhase(str, Enum):
    """Encounter state as seen by the session."""

    NOT_IN_COMBAT = "not_in_combat"
    IN_COMBAT = "in_combat"
    VICTORY = "victory"
    DEFEAT = "defeat"


@dataclass(eq=False)
class Combatant:
    """A participant in an encounter."""

    name: str
    kind: CombatantKind
    health: int
    attack: int
    defense: int
    # Quest flag set on the player when this enemy is beaten.
    defeat_flag: str | None = None
    reward: int = 0

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def jitter(self) -> tuple[int, int]:
        return JITTER_BANDS[self.kind]

    def roll_damage(self, rng: random.Random, boosted: bool = False) -> int:
        """Roll raw outgoing damage: base attack plus jitter, never negative."""
        low, high = self.jitter
        damage = max(0, self.attack + rng.randint(low, high))
        if boosted:
            damage *= SPECIAL_MULTIPLIER
        return damage

    def take_damage(self, damage: int) -> int:
        """Apply ``damage`` reduced by defense and return what got through."""
        if damage < 0:
            logger.warning(
                "negative_damage_rejected", combatant=self.name, damage=damage
            )
            return 0
        dealt = max(0, damage - self.defense)
        self.health = max(0, self.health - dealt)
        return dealt


def player_combatant(name: str) -> Combatant:
    """Build the transient combat stand-in for the player."""
    return Combatant(
        name=name,
        kind=CombatantKind.PLAYER,
        health=PLAYER_HEALTH,
        attack=PLAYER_ATTACK,
        defense=PLAYER_DEFENSE,
    )


def enemy(
    name: str,
    health: int,
    attack: int,
    defense: int,
    defeat_flag: str,
    reward: int,
) -> Combatant:
    """Build a roster enemy."""
    return Combatant(
        name=name,
        kind=CombatantKind.ENEMY,
        health=health,
        attack=attack,
        defense=defense,
        defeat_flag=defeat_flag,
        reward=reward,
    )


@dataclass
class RoundResult:
    """What happened during one round, for the boundary to render."""

    round_number: int
    player_damage: int
    boosted: bool
    # None when the enemy was beaten before it could retaliate.
    enemy_damage: int | None
    player_health: int
    enemy_health: int
    phase: CombatPhase
    messages: list[str] = field(default_factory=list)


@dataclass
class Encounter:
    """A single fight. Driven one round at a time by ``play_round``."""

    player: Combatant
    enemy: Combatant
    rng: random.Random
    phase: CombatPhase = CombatPhase.IN_COMBAT
    rounds: int = 0

    @property
    def is_active(self) -> bool:
        return self.phase == CombatPhase.IN_COMBAT

    def play_round(self, boosted: bool = False) -> RoundResult:
        """Play one round: player strike, victory check, enemy retaliation."""
        if not self.is_active:
            raise RuntimeError(f"Encounter already finished ({self.phase.value})")

        self.rounds += 1
        messages = []

        raw = self.player.roll_damage(self.rng, boosted=boosted)
        dealt = self.enemy.take_damage(raw)
        if boosted:
            messages.append("EMP deployed successfully!")
        messages.append(f"You deal {dealt} damage!")

        if not self.enemy.is_alive:
            self.phase = CombatPhase.VICTORY
            messages.append(f"You defeated {self.enemy.name}!")
            return self._result(dealt, boosted, None, messages)

        taken = self.player.take_damage(self.enemy.roll_damage(self.rng))
        messages.append(f"{self.enemy.name} deals {taken} damage!")

        if not self.player.is_alive:
            self.phase = CombatPhase.DEFEAT
            messages.append("You were defeated! But you manage to escape...")
        elif self.rounds >= MAX_ROUNDS:
            self.phase = CombatPhase.DEFEAT
            messages.append("Exhausted, you break off the fight and retreat.")

        return self._result(dealt, boosted, taken, messages)

    def _result(
        self,
        dealt: int,
        boosted: bool,
        taken: int | None,
        messages: list[str],
    ) -> RoundResult:
        return RoundResult(
            round_number=self.rounds,
            player_damage=dealt,
            boosted=boosted,
            enemy_damage=taken,
            player_health=self.player.health,
            enemy_health=self.enemy.health,
            phase=self.phase,
            messages=messages,
        )
