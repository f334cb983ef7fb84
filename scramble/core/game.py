from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Sequence

from ..logging_setup import TURN_ID_VAR
from .board import Board
from .dictionary import WordDictionary
from .modes import GameMode
from .rack import find_tile, refill_rack, return_to_rack, take_from_rack
from .rules import NoWordError, check_placement, extract_words
from .scoring import face_value_score, score_move
from .settings import GameSettings, PlayersSettings
from .state import GameState, LastMove, Player
from .storage import GameRepository, MemoryStore
from .tiles import ExchangeError, count_tiles_by_letter, create_bag, draw, exchange
from .types import (
    GameMessage,
    MessageKind,
    PlacedTile,
    Position,
    ScoreBreakdown,
    TileSpec,
)

log = logging.getLogger("scramble.core.game")

MSG_NO_GAME = "No game in progress"
MSG_GAME_OVER = "The game is over"
MSG_DICTIONARY_LOADING = "Dictionary is still loading..."
MSG_OFF_BOARD = "That square is off the board"
MSG_OCCUPIED = "That square is already occupied"
MSG_NOT_ON_RACK = "That tile is not on your rack"
MSG_NOT_PLACED = "No tile placed this turn on that square"
MSG_BLANK_LETTER = "Choose a letter for the blank tile"
MSG_EXCHANGE_ACTIVE = "Finish or cancel the exchange first"
MSG_RECALL_FIRST = "Recall your tiles before exchanging"
MSG_NOT_EXCHANGING = "Start an exchange first"
MSG_SELECT_TILES = "Select tiles to exchange"
MSG_NO_CHALLENGE = "There is no move to challenge"


class TurnPhase(Enum):
    """Where the turn state machine currently stands."""

    AWAITING_PLACEMENT = auto()
    SUBMITTED = auto()
    RESOLVED = auto()
    REJECTED = auto()
    CHALLENGE_WINDOW = auto()
    GAME_OVER = auto()


@dataclass
class ActionResult:
    """Outcome of one controller operation."""

    state: GameState | None
    message: GameMessage | None = None
    words: list[str] = field(default_factory=list)
    breakdowns: list[ScoreBreakdown] = field(default_factory=list)
    phase: TurnPhase = TurnPhase.AWAITING_PLACEMENT

    @property
    def ok(self) -> bool:
        return self.message is None or self.message.kind != MessageKind.ERROR


def _error(text: str) -> GameMessage:
    return GameMessage(text, MessageKind.ERROR)


def _info(text: str) -> GameMessage:
    return GameMessage(text, MessageKind.INFO)


def _success(text: str) -> GameMessage:
    return GameMessage(text, MessageKind.SUCCESS)


def _advance(state: GameState) -> None:
    state.current_player_index = state.opponent_index
    state.turn_number += 1


def _check_game_over(state: GameState, mover_index: int) -> None:
    """Game ends once the mover has an empty rack and the bag is empty."""
    if state.players[mover_index].rack or state.tile_bag:
        return
    state.game_over = True
    # ties go to player 0
    state.winner = 0 if state.players[0].score >= state.players[1].score else 1


def _withdraw_placed(state: GameState) -> None:
    """Take this turn's tiles off the board and back onto the current rack."""
    tiles = []
    for placed in state.placed_this_turn:
        state.board.clear_tile(placed.row, placed.col)
        tiles.append(placed.tile)
    player = state.current_player
    player.rack = return_to_rack(player.rack, tiles)
    state.placed_this_turn = []


class TurnController:
    """Single writer of the game state.

    Every operation snapshots the state, mutates the copy, persists it and
    then publishes it; a state handed out earlier is never modified.
    """

    def __init__(
        self,
        *,
        settings: GameSettings | None = None,
        players: PlayersSettings | None = None,
        dictionary: WordDictionary | None = None,
        repository: GameRepository | None = None,
        rng: random.Random | None = None,
        distribution: Sequence[TileSpec] | None = None,
        state: GameState | None = None,
    ) -> None:
        self.repository = repository or GameRepository(MemoryStore())
        self.settings = settings or self.repository.load_settings()
        self.players = players or self.repository.load_players()
        self.dictionary = dictionary or WordDictionary()
        self.rng = rng or random.Random()
        self.distribution = distribution
        self._state = state if state is not None else self.repository.load_game()
        self._game_id = uuid.uuid4().hex[:8]
        self._exchange_mode = False
        self._exchange_selection: list[str] = []
        self._phase = self._settled_phase()
        if self._state is not None:
            log.info(
                "game_restored turn=%s mode=%s", self._state.turn_number, self._state.mode.value
            )

    @classmethod
    def from_environment(cls) -> TurnController:
        """Controller wired from `scramble.config` (store, word list, seed)."""
        from .. import config
        from .storage import JsonFileStore

        store = JsonFileStore(config.data_dir()) if config.persistence_enabled() else MemoryStore()
        repository = GameRepository(store)
        dictionary = WordDictionary()
        path = config.dictionary_path()
        if path is not None and path.exists():
            dictionary.load(path)
        elif path is not None:
            log.warning("dictionary_missing path=%s", path)
        return cls(
            settings=repository.load_settings(config.default_game_mode()),
            repository=repository,
            dictionary=dictionary,
            rng=config.make_rng(),
        )

    # --- read side --------------------------------------------------------

    @property
    def state(self) -> GameState | None:
        return self._state

    @property
    def phase(self) -> TurnPhase:
        return self._phase

    @property
    def exchange_mode(self) -> bool:
        return self._exchange_mode

    @property
    def exchange_selection(self) -> list[str]:
        return list(self._exchange_selection)

    def remaining_tile_counts(self) -> dict[str, int]:
        """Letters still in the bag (blanks under `?`)."""
        if self._state is None:
            return {}
        return count_tiles_by_letter(self._state.tile_bag)

    # --- plumbing ---------------------------------------------------------

    def _settled_phase(self) -> TurnPhase:
        if self._state is None:
            return TurnPhase.AWAITING_PLACEMENT
        if self._state.game_over:
            return TurnPhase.GAME_OVER
        if self._state.challenge_available:
            return TurnPhase.CHALLENGE_WINDOW
        return TurnPhase.AWAITING_PLACEMENT

    def _mark_turn(self) -> None:
        turn = self._state.turn_number if self._state else 0
        TURN_ID_VAR.set(f"{self._game_id}-t{turn}")

    def _result(
        self,
        message: GameMessage | None = None,
        *,
        phase: TurnPhase | None = None,
        words: list[str] | None = None,
        breakdowns: list[ScoreBreakdown] | None = None,
    ) -> ActionResult:
        return ActionResult(
            state=self._state,
            message=message,
            words=words or [],
            breakdowns=breakdowns or [],
            phase=phase or self._phase,
        )

    def _commit(
        self,
        new_state: GameState,
        message: GameMessage | None = None,
        *,
        phase: TurnPhase | None = None,
        words: list[str] | None = None,
        breakdowns: list[ScoreBreakdown] | None = None,
    ) -> ActionResult:
        self._state = new_state
        self.repository.save_game(new_state)
        self._phase = self._settled_phase()
        if self._phase is TurnPhase.GAME_OVER:
            phase = TurnPhase.GAME_OVER
        self._mark_turn()
        return self._result(message, phase=phase, words=words, breakdowns=breakdowns)

    def _guard(self) -> ActionResult | None:
        """Rejection result when no move can be made right now."""
        self._mark_turn()
        if self._state is None:
            return self._result(_error(MSG_NO_GAME))
        if self._state.game_over:
            return self._result(_error(MSG_GAME_OVER))
        return None

    def _close_challenge_window(self, state: GameState) -> None:
        """Accept the pending tournament move: the mover draws now."""
        if not state.challenge_available or state.last_move is None:
            state.challenge_available = False
            return
        lm = state.last_move
        mover = state.players[lm.player_index]
        mover.rack, state.tile_bag = refill_rack(mover.rack, state.tile_bag)
        lm.tiles_need_drawing = False
        state.challenge_available = False
        log.info("challenge_window_closed mover=%s rack=%s", lm.player_index, len(mover.rack))
        _check_game_over(state, lm.player_index)

    def _leave_exchange(self) -> None:
        self._exchange_mode = False
        self._exchange_selection = []

    # --- game lifecycle ---------------------------------------------------

    def start_new_game(
        self,
        player1: str | None = None,
        player2: str | None = None,
    ) -> ActionResult:
        """Fresh shuffled bag, 7 tiles each, player 0 to move."""
        seats = self.players
        if player1 is not None:
            seats.player1.name = player1.strip() or seats.player1.name
        if player2 is not None:
            seats.player2.name = player2.strip() or seats.player2.name
        if self.settings.randomize_player1 and self.rng.random() < 0.5:
            seats = seats.swapped()
        self.players = seats
        self.repository.save_players(seats)
        self.repository.save_settings(self.settings)
        self.repository.clear_game()

        bag = create_bag(self.distribution, self.rng)
        rack1, bag = draw(bag, 7)
        rack2, bag = draw(bag, 7)
        state = GameState(
            board=Board(),
            players=[
                Player(id=1, name=seats.player1.name, rack=rack1),
                Player(id=2, name=seats.player2.name, rack=rack2),
            ],
            tile_bag=bag,
            mode=self.settings.mode,
        )
        self._game_id = uuid.uuid4().hex[:8]
        self._leave_exchange()
        log.info(
            "game_started mode=%s players=%s,%s bag=%s",
            state.mode.value,
            seats.player1.name,
            seats.player2.name,
            len(bag),
        )
        return self._commit(state)

    def reset_game(self) -> ActionResult:
        """Discard the current game entirely."""
        self.repository.clear_game()
        self._state = None
        self._leave_exchange()
        self._phase = self._settled_phase()
        log.info("game_reset")
        return self._result(_info("Game reset"))

    # --- placement --------------------------------------------------------

    def place_tile(
        self,
        tile_id: str,
        row: int,
        col: int,
        blank_letter: str | None = None,
    ) -> ActionResult:
        """Put a rack tile on the board (or reposition one placed this turn)."""
        blocked = self._guard()
        if blocked:
            return blocked
        assert self._state is not None
        if self._exchange_mode:
            return self._result(_error(MSG_EXCHANGE_ACTIVE))

        placed = next((p for p in self._state.placed_this_turn if p.tile.id == tile_id), None)
        if placed is not None:
            return self.move_placed_tile(placed.pos, (row, col))

        tile = find_tile(self._state.current_player.rack, tile_id)
        if tile is None:
            return self._result(_error(MSG_NOT_ON_RACK))
        if not Board.inside(row, col):
            return self._result(_error(MSG_OFF_BOARD))
        if self._state.board.is_occupied(row, col):
            return self._result(_error(MSG_OCCUPIED))
        if tile.is_blank:
            letter = (blank_letter or "").strip().upper()
            if len(letter) != 1 or not ("A" <= letter <= "Z"):
                return self._result(_error(MSG_BLANK_LETTER))
            tile = tile.with_letter(letter)

        state = self._state.copy()
        self._close_challenge_window(state)
        if state.game_over:
            return self._commit(state, _info(MSG_GAME_OVER))
        player = state.current_player
        _, player.rack = take_from_rack(player.rack, tile_id)
        state.board.set_tile(row, col, tile)
        state.placed_this_turn.append(PlacedTile(row, col, tile))
        log.debug("tile_placed id=%s pos=%s,%s letter=%s", tile.id, row, col, tile.letter)
        return self._commit(state)

    def move_placed_tile(self, from_pos: Position, to_pos: Position) -> ActionResult:
        """Reposition a tile placed this turn; no-op onto its own square."""
        blocked = self._guard()
        if blocked:
            return blocked
        assert self._state is not None
        placed = next((p for p in self._state.placed_this_turn if p.pos == tuple(from_pos)), None)
        if placed is None:
            return self._result(_error(MSG_NOT_PLACED))
        to_row, to_col = to_pos
        if placed.pos == (to_row, to_col):
            return self._result()
        if not Board.inside(to_row, to_col):
            return self._result(_error(MSG_OFF_BOARD))
        if self._state.board.is_occupied(to_row, to_col):
            return self._result(_error(MSG_OCCUPIED))

        state = self._state.copy()
        state.board.clear_tile(placed.row, placed.col)
        state.board.set_tile(to_row, to_col, placed.tile)
        state.placed_this_turn = [
            PlacedTile(to_row, to_col, p.tile) if p.tile.id == placed.tile.id else p
            for p in state.placed_this_turn
        ]
        return self._commit(state)

    def return_placed_tile(self, row: int, col: int) -> ActionResult:
        """Drop one tile placed this turn back onto the rack."""
        blocked = self._guard()
        if blocked:
            return blocked
        assert self._state is not None
        placed = next((p for p in self._state.placed_this_turn if p.pos == (row, col)), None)
        if placed is None:
            return self._result(_error(MSG_NOT_PLACED))

        state = self._state.copy()
        state.board.clear_tile(row, col)
        player = state.current_player
        player.rack = return_to_rack(player.rack, [placed.tile])
        state.placed_this_turn = [
            p for p in state.placed_this_turn if p.tile.id != placed.tile.id
        ]
        return self._commit(state)

    def recall(self) -> ActionResult:
        """All tiles placed this turn go back to the rack."""
        blocked = self._guard()
        if blocked:
            return blocked
        assert self._state is not None
        if not self._state.placed_this_turn:
            return self._result()
        state = self._state.copy()
        _withdraw_placed(state)
        return self._commit(state)

    # --- turn-ending actions ---------------------------------------------

    def pass_turn(self) -> ActionResult:
        """Recall and hand the turn over without scoring."""
        blocked = self._guard()
        if blocked:
            return blocked
        assert self._state is not None
        state = self._state.copy()
        self._close_challenge_window(state)
        if state.game_over:
            return self._commit(state, _info(MSG_GAME_OVER))
        _withdraw_placed(state)
        _advance(state)
        self._leave_exchange()
        log.info("turn_passed next=%s", state.current_player_index)
        return self._commit(state, _info("Turn passed"))

    def begin_exchange(self) -> ActionResult:
        blocked = self._guard()
        if blocked:
            return blocked
        assert self._state is not None
        if self._state.placed_this_turn:
            return self._result(_error(MSG_RECALL_FIRST))
        if not self._state.tile_bag:
            return self._result(_error("Not enough tiles in the bag"))
        self._exchange_mode = True
        self._exchange_selection = []
        return self._result()

    def cancel_exchange(self) -> ActionResult:
        self._leave_exchange()
        return self._result()

    def toggle_exchange_selection(self, tile_id: str) -> ActionResult:
        blocked = self._guard()
        if blocked:
            return blocked
        assert self._state is not None
        if not self._exchange_mode:
            return self._result(_error(MSG_NOT_EXCHANGING))
        if find_tile(self._state.current_player.rack, tile_id) is None:
            return self._result(_error(MSG_NOT_ON_RACK))
        if tile_id in self._exchange_selection:
            self._exchange_selection.remove(tile_id)
        else:
            self._exchange_selection.append(tile_id)
        return self._result()

    def confirm_exchange(self) -> ActionResult:
        """Swap the selected tiles with the bag; consumes the turn."""
        blocked = self._guard()
        if blocked:
            return blocked
        assert self._state is not None
        if not self._exchange_mode:
            return self._result(_error(MSG_NOT_EXCHANGING))
        if not self._exchange_selection:
            return self._result(_info(MSG_SELECT_TILES))
        if self._state.placed_this_turn:
            return self._result(_error(MSG_RECALL_FIRST))

        state = self._state.copy()
        self._close_challenge_window(state)
        if state.game_over:
            self._leave_exchange()
            return self._commit(state, _info(MSG_GAME_OVER))
        player = state.current_player
        count = len(self._exchange_selection)
        try:
            player.rack, state.tile_bag = exchange(
                player.rack, self._exchange_selection, state.tile_bag, self.rng
            )
        except ExchangeError as exc:
            log.info("exchange_rejected reason=%s", exc)
            return self._result(_error(str(exc)))
        _advance(state)
        self._leave_exchange()
        log.info("tiles_exchanged count=%s next=%s", count, state.current_player_index)
        return self._commit(state, _info(f"Exchanged {count} tile(s)"))

    def submit(self) -> ActionResult:
        """Validate, judge and score the tiles placed this turn."""
        blocked = self._guard()
        if blocked:
            return blocked
        assert self._state is not None
        mode = self._state.mode
        if mode.checks_dictionary_on_submit and not self.dictionary.is_ready:
            return self._result(_info(MSG_DICTIONARY_LOADING))

        self._phase = TurnPhase.SUBMITTED
        current = self._state
        positions = [p.pos for p in current.placed_this_turn]
        check = check_placement(current.board, positions, current.is_first_move)
        if not check.valid or check.direction is None:
            return self._reject(check.first_error or "Invalid placement")
        try:
            found = extract_words(current.board, positions, check.direction)
        except NoWordError as exc:
            return self._reject(str(exc))
        words = [wf.word for wf in found]

        if mode.checks_dictionary_on_submit:
            invalid = self.dictionary.invalid_words(words)
            if invalid:
                text = (
                    "Cannot form valid words with this placement: "
                    + ", ".join(w.upper() for w in words)
                )
                log.info("words_rejected mode=%s invalid=%s", mode.value, ",".join(invalid))
                if mode is GameMode.EXPERT:
                    return self._forfeit(text, words)
                return self._reject(text, words)

        breakdowns: list[ScoreBreakdown] = []
        if mode is GameMode.FREE_PLAY:
            score = face_value_score(current.board, found)
        else:
            score, breakdowns = score_move(current.board, positions, found)
        return self._accept(score, words, breakdowns)

    def _reject(self, text: str, words: list[str] | None = None) -> ActionResult:
        """Submission refused; the tiles stay where they are."""
        self._phase = self._settled_phase()
        log.info("submit_rejected reason=%s", text)
        return self._result(_error(text), phase=TurnPhase.REJECTED, words=words)

    def _forfeit(self, text: str, words: list[str]) -> ActionResult:
        """Expert mode: an invalid word costs the whole turn."""
        assert self._state is not None
        state = self._state.copy()
        _withdraw_placed(state)
        _advance(state)
        log.info("turn_forfeited next=%s", state.current_player_index)
        return self._commit(
            state, _error(f"{text} - Turn lost!"), phase=TurnPhase.REJECTED, words=words
        )

    def _accept(
        self,
        score: int,
        words: list[str],
        breakdowns: list[ScoreBreakdown],
    ) -> ActionResult:
        assert self._state is not None
        state = self._state.copy()
        mover_index = state.current_player_index
        mover = state.current_player
        mover.score += score
        tiles = state.board.commit_newly_placed(mover_index)
        state.placed_this_turn = []
        state.is_first_move = False
        deferred = state.mode is GameMode.TOURNAMENT
        state.last_move = LastMove(
            player_index=mover_index,
            words=list(words),
            tiles=tiles,
            score=score,
            turn_number=state.turn_number,
            tiles_need_drawing=deferred,
        )
        state.challenge_available = deferred
        if not deferred:
            mover.rack, state.tile_bag = refill_rack(mover.rack, state.tile_bag)
            _check_game_over(state, mover_index)
        _advance(state)
        log.info(
            "move_accepted player=%s score=%s words=%s deferred=%s",
            mover_index,
            score,
            ",".join(words),
            deferred,
        )
        if state.game_over:
            log.info("game_over winner=%s", state.winner)
        message = _success(f"+{score} points! Words: {', '.join(w.upper() for w in words)}")
        return self._commit(
            state, message, phase=TurnPhase.RESOLVED, words=words, breakdowns=breakdowns
        )

    # --- tournament challenge --------------------------------------------

    def accept_move(self) -> ActionResult:
        """Opponent lets the pending tournament move stand."""
        blocked = self._guard()
        if blocked:
            return blocked
        assert self._state is not None
        if not self._state.challenge_available:
            return self._result(_error(MSG_NO_CHALLENGE))
        state = self._state.copy()
        self._close_challenge_window(state)
        return self._commit(state, _info("Move accepted"))

    def challenge(self) -> ActionResult:
        """Opponent disputes the pending tournament move.

        Upheld (some word invalid): the move is taken back and the challenger
        keeps the turn. Failed: the mover draws and the challenger loses the
        turn.
        """
        blocked = self._guard()
        if blocked:
            return blocked
        assert self._state is not None
        lm = self._state.last_move
        if not self._state.challenge_available or lm is None:
            return self._result(_error(MSG_NO_CHALLENGE))
        if not self.dictionary.is_ready:
            return self._result(_info(MSG_DICTIONARY_LOADING))
        if self._state.placed_this_turn:
            return self._result(_error("Recall your tiles before challenging"))

        invalid = self.dictionary.invalid_words(lm.words)
        state = self._state.copy()
        lm = state.last_move
        assert lm is not None
        mover = state.players[lm.player_index]
        challenger = state.current_player

        if invalid:
            withdrawn = [state.board.clear_tile(r, c) for r, c in lm.tiles]
            mover.rack = return_to_rack(mover.rack, [t for t in withdrawn if t is not None])
            mover.score -= lm.score
            state.is_first_move = state.board.is_empty()
            state.last_move = None
            state.challenge_available = False
            log.info("challenge_upheld invalid=%s penalty=%s", ",".join(invalid), lm.score)
            text = (
                f"Challenge upheld! {', '.join(w.upper() for w in invalid)} not valid. "
                f"{mover.name} loses {lm.score} points"
            )
            return self._commit(state, _success(text), words=invalid)

        self._close_challenge_window(state)
        if not state.game_over:
            _advance(state)
        log.info("challenge_failed challenger=%s", challenger.name)
        text = f"Challenge failed: all words are valid. {challenger.name} loses the turn"
        return self._commit(state, _info(text), words=list(lm.words))
