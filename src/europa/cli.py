"""Terminal front end for Europa using rich.

This is the presentation boundary: it prints menus and results, paces text
like a typewriter and reads the player's choices. All game rules live in
``GameSession``.
"""

import time
from collections.abc import Callable

from rich.console import Console
from rich.markup import escape

from .engine.combat import CombatPhase, RoundResult
from .engine.commands import ActionResult, LocationView, QuestView, StatusReport
from .engine.station import INTRO, TITLE
from .errors import GameInitError
from .logging import get_logger
from .session import GameSession

logger = get_logger(__name__)

STATION_ART = r"""
     _____
    /=====/\
   /=====/  \
  /=====/    \
 /=====/      \
(=================)
 \====/        /
  \==/        /
   \/________/
"""

MAIN_MENU = [
    "Move to another location",
    "Interact with environment",
    "Pick up item",
    "Use item",
    "Check inventory",
    "Check status",
    "View quests",
    "Quit",
]


class TerminalUI:
    """Rich console renderer and input reader."""

    def __init__(
        self,
        console: Console | None = None,
        input_func: Callable[[str], str] | None = None,
        text_delay: float = 0.03,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.console = console or Console()
        self.input_func = input_func or self.console.input
        self.text_delay = text_delay
        self.sleep = sleep

    # --- Input ---

    def request_text(self, prompt: str) -> str:
        return self.input_func(f"\n[bold yellow]{prompt}: [/]")

    def request_choice(
        self, title: str, options: list[str], allow_cancel: bool = False
    ) -> int:
        """Show a numbered menu and return the number typed.

        Non-numeric input is re-prompted; range checks are left to the caller.
        """
        self.console.print(f"\n{title}:", style="bold green")
        for number, option in enumerate(options, 1):
            self.console.print(f"{number}. {escape(option)}", style="green")
        hint = f"1-{len(options)}"
        if allow_cancel:
            hint += ", 0 to cancel"

        while True:
            raw = self.input_func(f"[bold yellow]Enter your choice ({hint}): [/]")
            try:
                return int(raw.strip())
            except ValueError:
                logger.debug("non_numeric_choice", raw=raw)
                self.render_error("Please enter a valid number")

    def confirm(self, prompt: str) -> bool:
        answer = self.input_func(f"\n[bold yellow]{prompt} (y/n): [/]")
        return answer.strip().lower().startswith("y")

    # --- Output ---

    def typewrite(self, text: str, style: str | None = None) -> None:
        """Print text one character at a time."""
        if self.text_delay <= 0:
            self.console.print(escape(text), style=style)
            return
        for char in text:
            self.console.print(escape(char), style=style, end="")
            self.sleep(self.text_delay)
        self.console.print()

    def render_title(self) -> None:
        self.console.print("=" * 34, justify="center", style="blue")
        self.console.print(TITLE, justify="center", style="bold blue")
        self.console.print("=" * 34, justify="center", style="blue")
        self.console.print(STATION_ART, style="blue", highlight=False)

    def render_error(self, message: str) -> None:
        self.console.print(f"\n{escape(message)}", style="red bold")

    def render_result(self, result: ActionResult) -> None:
        if result.ok:
            self.typewrite(result.message)
        else:
            self.console.print(escape(result.message), style="red")

    def render_location(self, view: LocationView) -> None:
        self.console.print(f"\nLocation: {escape(view.name)}", style="bold blue")
        self.console.print(escape(view.description))
        if view.items:
            self.console.print("\nYou see:")
            for name, description in view.items:
                self.console.print(f"- {escape(name)}: {escape(description)}")
        self.console.print("\nPossible interactions:")
        for key in view.interactions:
            self.console.print(f"- {escape(key)}")

    def render_inventory(self, items: list[tuple[str, str]]) -> None:
        self.console.print("\nInventory:", style="bold")
        if not items:
            self.console.print("Empty")
        for name, use_description in items:
            self.console.print(f"- {escape(name)}")
            self.console.print(f"  {escape(use_description)}", style="dim")

    def render_status(self, report: StatusReport) -> None:
        self.console.print(f"\nName: {escape(report.name)}", style="green")
        self.console.print(report.health)
        self.console.print(report.energy)
        self.console.print(f"Description: {escape(report.description)}")
        self.console.print(f"\nExperience: {report.experience}")
        self.console.print(f"Total steps taken: {report.steps}")
        self.console.print(f"Items collected: {report.items_collected}")
        self.console.print(f"Location: {escape(report.location)}")
        self.console.print(f"Locations explored: {report.locations_explored}")
        discovered = ", ".join(report.discovered_interactions) or "none"
        self.console.print(f"Discovered interactions: {escape(discovered)}")
        flags = ", ".join(report.flags) if report.flags else "none"
        self.console.print(f"Progress flags: {flags}", style="dim")

    def render_quests(self, quests: list[QuestView]) -> None:
        self.console.print("\nActive Quests:", style="bold")
        for quest in quests:
            state = "Completed!" if quest.completed else "In Progress"
            self.console.print(f"- {escape(quest.name)}: {state}")
            for objective in quest.objectives:
                mark = "x" if objective.completed else " "
                self.console.print(
                    f"  \\[{mark}] {escape(objective.description)} "
                    f"({objective.progress}/{objective.target})"
                )

    def render_combat_start(self, enemy_name: str) -> None:
        self.console.print(
            f"\nCombat with {escape(enemy_name)} initiated!", style="bold red"
        )

    def render_round(self, outcome: RoundResult, enemy_name: str) -> None:
        for message in outcome.messages:
            self.typewrite(message)
        if outcome.phase == CombatPhase.IN_COMBAT:
            self.console.print(f"\nYour Health: {outcome.player_health}")
            self.console.print(f"{escape(enemy_name)}'s Health: {outcome.enemy_health}")

    def render_victory(self, report: StatusReport) -> None:
        self.console.print("\nVICTORY!", style="bold green")
        self.console.print("\n=== Final Statistics ===", style="yellow")
        self.render_status(report)

    def render_goodbye(self, report: StatusReport | None = None) -> None:
        if report is not None:
            self.console.print("\n=== Final Statistics ===", style="yellow")
            self.render_status(report)
        self.console.print("\nThanks for playing.", style="bold")


def _fight(ui: TerminalUI, session: GameSession) -> None:
    enemy_name = session.encounter.enemy.name
    ui.render_combat_start(enemy_name)
    while session.in_combat:
        emp = "Use EMP" if session.can_use_special() else "Use EMP (unavailable)"
        choice = ui.request_choice("Combat", ["Attack", emp])
        if choice not in (1, 2):
            ui.render_error("Invalid choice.")
            continue
        outcome = session.combat_round(special=choice == 2)
        ui.render_round(outcome, enemy_name)


def _choose_index(
    ui: TerminalUI, title: str, options: list[str]
) -> int | None:
    """Ask for a 1-based pick; returns a zero-based index, None on cancel."""
    choice = ui.request_choice(title, options, allow_cancel=True)
    if choice == 0:
        return None
    return choice - 1


def play_turn(ui: TerminalUI, session: GameSession, choice: int) -> None:
    """Dispatch one main-menu choice."""
    result = None
    if choice == 1:
        index = _choose_index(ui, "Available locations", session.location_names())
        if index is not None:
            result = session.move(index)
    elif choice == 2:
        keys = session.describe_location().interactions
        index = _choose_index(ui, "Available interactions", keys)
        if index is not None:
            result = session.interact_choice(index)
    elif choice == 3:
        items = session.describe_location().items
        if not items:
            result = session.pickup(0)
        else:
            labels = [f"{name}: {description}" for name, description in items]
            index = _choose_index(ui, "Available items to pick up", labels)
            if index is not None:
                result = session.pickup(index)
    elif choice == 4:
        items = session.inventory()
        if not items:
            result = session.use(0)
        else:
            labels = [f"{name} - {usage}" for name, usage in items]
            index = _choose_index(ui, "Your items", labels)
            if index is not None:
                result = session.use(index)
    elif choice == 5:
        ui.render_inventory(session.inventory())
    elif choice == 6:
        ui.render_status(session.status())
    elif choice == 7:
        ui.render_quests(session.quests())
    elif choice == 8:
        if ui.confirm("Are you sure you want to quit?"):
            session.quit()
            ui.render_goodbye(session.status())
    else:
        ui.render_error("Invalid choice.")

    if result is not None:
        ui.render_result(result)
    if session.in_combat:
        _fight(ui, session)


def run(ui: TerminalUI, seed: int | None = None) -> int:
    """Play a full game. Returns the process exit status."""
    ui.render_title()
    try:
        name = ui.request_text("Enter your name")
        session = GameSession.new(name, seed=seed)
    except GameInitError as exc:
        logger.error("game_init_failed", error=str(exc))
        ui.render_error(f"Fatal error: {exc}")
        return 1
    except (EOFError, KeyboardInterrupt):
        ui.render_goodbye()
        return 0

    ui.typewrite(INTRO)
    try:
        while not session.is_over:
            ui.render_location(session.describe_location())
            choice = ui.request_choice("Options", MAIN_MENU)
            play_turn(ui, session, choice)
    except (EOFError, KeyboardInterrupt):
        logger.info("game_interrupted", turns=session.state.turns)
        ui.render_goodbye(session.status())
        return 0

    if session.has_escaped:
        ui.render_victory(session.status())
    return 0
