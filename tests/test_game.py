from __future__ import annotations

from conftest import new_controller, place_word, rig_racks
from scramble.core.dictionary import WordDictionary
from scramble.core.game import TurnController, TurnPhase
from scramble.core.modes import GameMode
from scramble.core.rules import ERR_CENTER, ERR_NOT_IN_LINE
from scramble.core.storage import GameRepository, MemoryStore
from scramble.core.types import MessageKind


def test_new_game_deals_seven_each() -> None:
    controller = new_controller()
    state = controller.state
    assert [p.name for p in state.players] == ["Alice", "Bob"]
    assert all(len(p.rack) == 7 for p in state.players)
    assert len(state.tile_bag) == 86
    assert state.current_player_index == 0
    assert state.turn_number == 1
    assert state.is_first_move
    assert controller.phase is TurnPhase.AWAITING_PLACEMENT
    assert sum(controller.remaining_tile_counts().values()) == 86


def test_valid_submission_flips_turn() -> None:
    controller = new_controller()
    rig_racks(controller, "CATXYZQ", "BATSAAA")
    place_word(controller, "CAT", (7, 7))
    result = controller.submit()

    assert result.ok
    assert result.phase is TurnPhase.RESOLVED
    assert result.message.text == "+10 points! Words: CAT"
    assert result.words == ["CAT"]
    state = controller.state
    assert state.current_player_index == 1
    assert state.turn_number == 2
    assert state.players[0].score == 10
    assert len(state.players[0].rack) == 7
    assert not state.is_first_move
    assert state.placed_this_turn == []
    assert all(not cell.newly_placed for cell in state.board)
    assert state.board.cell(7, 8).placed_by == 0
    assert state.last_move.words == ["CAT"]
    assert state.total_tiles() == 100


def test_diagonal_placement_rejected() -> None:
    controller = new_controller()
    rig_racks(controller, "CATXYZQ", "BATSAAA")
    rack = controller.state.current_player.rack
    controller.place_tile(rack[0].id, 7, 7)
    controller.place_tile(rack[1].id, 8, 8)
    result = controller.submit()

    assert not result.ok
    assert result.message.text == ERR_NOT_IN_LINE
    assert result.phase is TurnPhase.REJECTED
    assert len(controller.state.placed_this_turn) == 2
    assert controller.state.current_player_index == 0
    assert controller.phase is TurnPhase.AWAITING_PLACEMENT


def test_first_move_off_center_rejected() -> None:
    controller = new_controller()
    rig_racks(controller, "CATXYZQ", "BATSAAA")
    place_word(controller, "CAT", (3, 3))
    result = controller.submit()
    assert result.message.text == ERR_CENTER
    assert controller.state.turn_number == 1


def test_invalid_word_blocks_standard_submission() -> None:
    controller = new_controller()
    rig_racks(controller, "BACXYZQ", "BATSAAA")
    place_word(controller, "BAC", (7, 7))
    result = controller.submit()

    assert result.message.kind is MessageKind.ERROR
    assert result.message.text == "Cannot form valid words with this placement: BAC"
    assert controller.state.current_player_index == 0
    assert len(controller.state.placed_this_turn) == 3


def test_expert_mode_invalid_word_loses_turn() -> None:
    controller = new_controller(GameMode.EXPERT)
    rig_racks(controller, "BACXYZQ", "BATSAAA")
    place_word(controller, "BAC", (7, 7))
    result = controller.submit()

    assert result.message.text.endswith(" - Turn lost!")
    state = controller.state
    assert state.current_player_index == 1
    assert state.turn_number == 2
    assert state.board.is_empty()
    assert state.is_first_move
    assert len(state.players[0].rack) == 7
    assert state.players[0].score == 0


def test_expert_mode_structural_failure_keeps_turn() -> None:
    controller = new_controller(GameMode.EXPERT)
    rig_racks(controller, "CATXYZQ", "BATSAAA")
    rack = controller.state.current_player.rack
    controller.place_tile(rack[0].id, 7, 7)
    controller.place_tile(rack[1].id, 8, 8)
    result = controller.submit()

    assert result.message.text == ERR_NOT_IN_LINE
    assert result.phase is TurnPhase.REJECTED
    state = controller.state
    assert len(state.placed_this_turn) == 2
    assert state.board.tile_at(8, 8) is not None
    assert state.current_player_index == 0
    assert state.turn_number == 1


def test_expert_mode_off_center_first_move_keeps_turn() -> None:
    controller = new_controller(GameMode.EXPERT)
    rig_racks(controller, "CATXYZQ", "BATSAAA")
    place_word(controller, "CAT", (3, 3))
    result = controller.submit()

    assert result.message.text == ERR_CENTER
    assert not result.message.text.endswith("Turn lost!")
    state = controller.state
    assert len(state.placed_this_turn) == 3
    assert state.current_player_index == 0
    assert state.turn_number == 1

def test_free_play_scores_face_value() -> None:
    controller = new_controller(GameMode.FREE_PLAY, words=[])
    rig_racks(controller, "AAAAAAA", "BATSAAA")
    place_word(controller, "AAAAAAA", (7, 4))
    result = controller.submit()
    assert result.ok
    assert controller.state.players[0].score == 7


def test_blank_tile_scores_zero() -> None:
    controller = new_controller()
    rig_racks(controller, "C?TXYZQ", "BATSAAA")
    place_word(controller, "CAT", (7, 7), blanks={1: "a"})
    assert controller.state.board.tile_at(7, 8).letter == "A"
    result = controller.submit()
    assert controller.state.players[0].score == 8
    assert result.breakdowns[0].total == 8


def test_blank_needs_a_letter() -> None:
    controller = new_controller()
    rig_racks(controller, "?ATXYZQ", "BATSAAA")
    blank = controller.state.current_player.rack[0]
    result = controller.place_tile(blank.id, 7, 7)
    assert not result.ok
    assert controller.state.board.is_empty()


def test_recall_is_idempotent() -> None:
    controller = new_controller()
    rig_racks(controller, "C?TXYZQ", "BATSAAA")
    rack_before = sorted(t.id for t in controller.state.current_player.rack)
    place_word(controller, "CAT", (7, 7), blanks={1: "E"})
    controller.recall()
    after_first = controller.state
    controller.recall()

    assert controller.state is after_first
    assert after_first.board.is_empty()
    assert sorted(t.id for t in after_first.current_player.rack) == rack_before
    assert all(t.letter == "" for t in after_first.current_player.rack if t.is_blank)
    assert after_first.placed_this_turn == []


def test_published_state_is_never_mutated() -> None:
    controller = new_controller()
    before = controller.state
    tile = before.current_player.rack[0]
    controller.place_tile(tile.id, 7, 7)
    assert before.board.is_empty()
    assert len(before.current_player.rack) == 7
    assert controller.state is not before


def test_place_on_occupied_or_off_board() -> None:
    controller = new_controller()
    rack = controller.state.current_player.rack
    controller.place_tile(rack[0].id, 7, 7)
    assert controller.place_tile(rack[1].id, 7, 7).message.text == "That square is already occupied"
    assert controller.place_tile(rack[1].id, 15, 0).message.text == "That square is off the board"
    assert controller.place_tile("nope", 0, 0).message.text == "That tile is not on your rack"


def test_move_and_return_placed_tile() -> None:
    controller = new_controller()
    tile = controller.state.current_player.rack[0]
    controller.place_tile(tile.id, 7, 7)
    controller.move_placed_tile((7, 7), (7, 8))
    state = controller.state
    assert state.board.tile_at(7, 7) is None
    assert state.board.tile_at(7, 8).id == tile.id
    assert state.placed_this_turn[0].pos == (7, 8)

    # placing an already placed tile moves it
    controller.place_tile(tile.id, 6, 8)
    assert controller.state.placed_this_turn[0].pos == (6, 8)

    controller.return_placed_tile(6, 8)
    assert controller.state.board.is_empty()
    assert len(controller.state.current_player.rack) == 7
    assert not controller.return_placed_tile(6, 8).ok


def test_pass_turn_recalls_tiles() -> None:
    controller = new_controller()
    controller.place_tile(controller.state.current_player.rack[0].id, 7, 7)
    result = controller.pass_turn()
    assert result.message.text == "Turn passed"
    state = controller.state
    assert state.board.is_empty()
    assert len(state.players[0].rack) == 7
    assert state.current_player_index == 1
    assert state.turn_number == 2


def test_exchange_flow() -> None:
    controller = new_controller()
    rack = controller.state.current_player.rack
    assert controller.confirm_exchange().message.text == "Start an exchange first"

    controller.begin_exchange()
    assert controller.exchange_mode
    assert controller.confirm_exchange().message.text == "Select tiles to exchange"
    controller.toggle_exchange_selection(rack[0].id)
    controller.toggle_exchange_selection(rack[1].id)
    controller.toggle_exchange_selection(rack[1].id)
    controller.toggle_exchange_selection(rack[2].id)
    assert controller.exchange_selection == [rack[0].id, rack[2].id]

    result = controller.confirm_exchange()
    assert result.message.text == "Exchanged 2 tile(s)"
    state = controller.state
    assert not controller.exchange_mode
    assert state.current_player_index == 1
    assert len(state.players[0].rack) == 7
    assert len(state.tile_bag) == 86
    assert rack[0].id not in {t.id for t in state.players[0].rack}
    assert state.total_tiles() == 100


def test_exchange_cancel_and_guard() -> None:
    controller = new_controller()
    controller.begin_exchange()
    assert not controller.place_tile(controller.state.current_player.rack[0].id, 7, 7).ok
    controller.cancel_exchange()
    assert not controller.exchange_mode
    controller.place_tile(controller.state.current_player.rack[0].id, 7, 7)
    assert controller.begin_exchange().message.text == "Recall your tiles before exchanging"


def test_exchange_with_short_bag_keeps_turn() -> None:
    controller = new_controller()
    state = controller.state
    state.tile_bag = state.tile_bag[:1]
    rack = state.current_player.rack
    controller.begin_exchange()
    controller.toggle_exchange_selection(rack[0].id)
    controller.toggle_exchange_selection(rack[1].id)
    result = controller.confirm_exchange()
    assert result.message.text == "Not enough tiles in the bag"
    assert controller.state.current_player_index == 0


def test_submit_waits_for_dictionary() -> None:
    controller = TurnController(dictionary=WordDictionary())
    controller.start_new_game()
    controller.place_tile(controller.state.current_player.rack[0].id, 7, 7)
    before = controller.state
    result = controller.submit()
    assert result.message.text == "Dictionary is still loading..."
    assert result.message.kind is MessageKind.INFO
    assert controller.state is before


def test_no_game_in_progress() -> None:
    controller = TurnController(repository=GameRepository(MemoryStore()))
    assert controller.state is None
    assert controller.submit().message.text == "No game in progress"
    assert controller.remaining_tile_counts() == {}


def test_game_restored_from_repository() -> None:
    repo = GameRepository(MemoryStore())
    controller = new_controller(repository=repo)
    tile = controller.state.current_player.rack[0]
    controller.place_tile(tile.id, 7, 7)

    restored = TurnController(repository=repo, dictionary=WordDictionary([]))
    assert restored.state.to_dict() == controller.state.to_dict()

    restored.reset_game()
    assert restored.state is None
    assert repo.load_game() is None


def test_settings_mode_applies_to_new_game() -> None:
    controller = new_controller(GameMode.TOURNAMENT)
    assert controller.state.mode is GameMode.TOURNAMENT
