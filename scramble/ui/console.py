"""Terminal front end: hot-seat play on a Rich-rendered board.

Commands (rack tiles are addressed by their 1-based slot):

    place <slot> <row> <col> [letter]   put a tile (letter for blanks)
    move <row> <col> <row> <col>        reposition a tile placed this turn
    back <row> <col>                    return one placed tile to the rack
    recall | submit | pass
    exchange <slot> [<slot> ...]        swap tiles with the bag
    challenge | accept                  tournament only
    rack                                show the rack when tiles are hidden
    bag | new | help | quit
"""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..core.board import BOARD_SIZE
from ..core.game import MSG_NO_GAME, ActionResult, TurnController, TurnPhase
from ..core.settings import color_for_player
from ..core.state import GameState
from ..core.types import BonusType, GameMessage, MessageKind

log = logging.getLogger("scramble.ui")

_BONUS_STYLE = {
    BonusType.NONE: ("·", "dim"),
    BonusType.DOUBLE_LETTER: ("2L", "cyan"),
    BonusType.TRIPLE_LETTER: ("3L", "blue"),
    BonusType.DOUBLE_WORD: ("2W", "magenta"),
    BonusType.TRIPLE_WORD: ("3W", "red"),
    BonusType.CENTER: ("★", "magenta"),
}

_MESSAGE_STYLE = {
    MessageKind.ERROR: "bold red",
    MessageKind.INFO: "yellow",
    MessageKind.SUCCESS: "bold green",
}


class CommandError(ValueError):
    """Unparseable console command."""


@dataclass
class Command:
    name: str
    args: list[str]


def parse_command(line: str) -> Command | None:
    """Split an input line; None for an empty line."""
    try:
        parts = shlex.split(line)
    except ValueError as exc:
        raise CommandError(str(exc)) from exc
    if not parts:
        return None
    return Command(parts[0].lower(), parts[1:])


def _ints(args: list[str], count: int) -> list[int]:
    if len(args) < count:
        raise CommandError(f"Expected {count} numbers")
    try:
        return [int(a) for a in args[:count]]
    except ValueError as exc:
        raise CommandError("Coordinates and slots must be numbers") from exc


def _slot_id(state: GameState, slot: int) -> str:
    rack = state.current_player.rack
    if not 1 <= slot <= len(rack):
        raise CommandError(f"Rack slot must be between 1 and {len(rack)}")
    return rack[slot - 1].id


def render_board(state: GameState, controller: TurnController) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, box=None)
    table.add_column("", justify="right", style="dim")
    for c in range(BOARD_SIZE):
        table.add_column(str(c), justify="center", min_width=2)
    show_colors = controller.settings.show_player_color_on_tiles
    for r, row in enumerate(state.board.rows()):
        cells: list[Text] = []
        for cell in row:
            if cell.tile is None:
                label, style = _BONUS_STYLE[cell.bonus]
                cells.append(Text(label, style=style))
                continue
            style = "bold black on bright_yellow" if cell.newly_placed else "bold"
            if show_colors and cell.placed_by is not None and not cell.newly_placed:
                name = state.players[cell.placed_by].name
                style = f"bold black on {color_for_player(controller.players, name)}"
            letter = cell.tile.letter.lower() if cell.tile.is_blank else cell.tile.letter
            cells.append(Text(letter, style=style))
        table.add_row(str(r), *cells)
    return table


def render_rack(state: GameState, *, hidden: bool = False) -> Text:
    text = Text()
    for i, tile in enumerate(state.current_player.rack, start=1):
        if hidden:
            text.append(f" {i}:■ ", style="dim")
            continue
        letter = "?" if tile.is_blank else tile.letter
        text.append(f" {i}:{letter}", style="bold")
        text.append(f"{tile.score} ", style="dim")
    return text


def render_status(state: GameState) -> Text:
    text = Text()
    for idx, player in enumerate(state.players):
        marker = "▶ " if idx == state.current_player_index and not state.game_over else "  "
        text.append(f"{marker}{player.name}: {player.score}   ")
    text.append(f"| turn {state.turn_number} | bag {len(state.tile_bag)} | {state.mode.display_name}")
    if state.game_over and state.winner is not None:
        text.append(f"\nGame over, {state.players[state.winner].name} wins!", style="bold green")
    return text


class ConsoleApp:
    """Reads commands, forwards them to the controller, redraws."""

    def __init__(self, controller: TurnController, console: Console | None = None) -> None:
        self.controller = controller
        self.console = console or Console()

    def show(self, result: ActionResult | None = None) -> None:
        state = self.controller.state
        if state is not None:
            self.console.print(render_board(state, self.controller))
            self.console.print(render_status(state))
            if not state.game_over:
                hidden = self.controller.settings.hide_player_tiles
                self.console.print(render_rack(state, hidden=hidden))
            if self.controller.phase is TurnPhase.CHALLENGE_WINDOW:
                self.console.print("Type 'challenge' or 'accept' for the last move.", style="yellow")
        if result is not None and result.message is not None:
            self.console.print(result.message.text, style=_MESSAGE_STYLE[result.message.kind])

    def execute(self, command: Command) -> ActionResult | None:
        """Run one command; returns None for purely local commands."""
        c = self.controller
        name, args = command.name, command.args
        if name == "new":
            return c.start_new_game(*(args[:2]))
        if name == "help":
            self.console.print(__doc__, markup=False)
            return None
        if name == "rack" and c.state is not None:
            self.console.print(render_rack(c.state))
            return None
        if name == "bag":
            counts = c.remaining_tile_counts()
            self.console.print(" ".join(f"{k}:{v}" for k, v in counts.items()) or "empty")
            return None
        simple = {
            "recall": c.recall,
            "submit": c.submit,
            "pass": c.pass_turn,
            "challenge": c.challenge,
            "accept": c.accept_move,
        }
        if name in simple:
            return simple[name]()
        state = c.state
        if state is None:
            return ActionResult(state=None, message=GameMessage(MSG_NO_GAME, MessageKind.ERROR))
        if name == "place":
            slot, row, col = _ints(args, 3)
            letter = args[3] if len(args) > 3 else None
            return c.place_tile(_slot_id(state, slot), row, col, letter)
        if name == "move":
            r1, c1, r2, c2 = _ints(args, 4)
            return c.move_placed_tile((r1, c1), (r2, c2))
        if name == "back":
            row, col = _ints(args, 2)
            return c.return_placed_tile(row, col)
        if name == "exchange":
            slots = _ints(args, max(1, len(args)))
            ids = [_slot_id(state, s) for s in slots]
            started = c.begin_exchange()
            if not started.ok:
                return started
            for tile_id in dict.fromkeys(ids):
                c.toggle_exchange_selection(tile_id)
            result = c.confirm_exchange()
            if not result.ok:
                c.cancel_exchange()
            return result
        raise CommandError(f"Unknown command: {name}")

    def run(self) -> None:
        if self.controller.state is None:
            self.controller.start_new_game()
        self.show()
        while True:
            try:
                line = self.console.input("[bold]> [/bold]")
            except (EOFError, KeyboardInterrupt):
                break
            try:
                command = parse_command(line)
                if command is None:
                    continue
                if command.name in ("quit", "exit"):
                    break
                result = self.execute(command)
            except CommandError as exc:
                self.console.print(str(exc), style="bold red")
                continue
            if result is not None:
                self.show(result)
        log.info("console_closed")
