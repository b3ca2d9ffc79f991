import logging
import random

from gemfall.components.game_session import SessionState
from gemfall.config import GameConfig
from gemfall.events.bus import (
    EventBus,
    EVENT_CASCADE_STEP,
    EVENT_GAME_OVER,
    EVENT_LOGIC_TICK,
    EVENT_MOVE_RESOLVED,
    EVENT_NEW_GAME_REQUEST,
    EVENT_SCORE_CHANGED,
    EVENT_SELECTION_REJECTED,
    EVENT_SWAP_VALID,
    EVENT_TILE_CLICK,
    EVENT_TILE_SELECTED,
    EVENT_TIMER_TICK,
)
from gemfall.persistence.high_scores import HighScoreStore
from gemfall.systems.board_ops import SelectionOutcome, detect_matches
from gemfall.systems.session import NO_MOVES_MESSAGE, OUT_OF_TIME_MESSAGE, GameSessionSystem
from gemfall.systems.session_utils import get_board, get_schedule, get_session
from gemfall.world import create_world
from tests.helpers import DEADLOCK_ROWS, ONE_MOVE_ROWS, board_from_rows, install_board


def make_game(tmp_path, *, timed=False, seed=7, store=None):
    bus = EventBus()
    config = GameConfig(high_scores_path=tmp_path / "scores.txt")
    world = create_world(bus, config, rng=random.Random(seed))
    system = GameSessionSystem(world, bus, store or HighScoreStore(config.high_scores_path), timed=timed)
    return bus, world, system


def record(bus, name):
    events = []
    bus.subscribe(name, lambda sender, **payload: events.append(payload))
    return events


def test_new_game_starts_untimed_with_stable_board(tmp_path):
    _, world, _ = make_game(tmp_path)
    session = get_session(world)
    board = get_board(world)
    schedule = get_schedule(world)
    assert session.state is SessionState.ACTIVE_UNTIMED
    assert session.score == 0
    assert session.time_remaining is None
    assert not detect_matches(board)
    assert (schedule.render, schedule.logic, schedule.timer) == (True, True, False)


def test_new_timed_game_arms_timer(tmp_path):
    _, world, _ = make_game(tmp_path, timed=True)
    session = get_session(world)
    assert session.state is SessionState.ACTIVE_TIMED
    assert session.time_remaining == 30
    assert get_schedule(world).timer


def test_new_game_loads_persisted_high_scores(tmp_path):
    (tmp_path / "scores.txt").write_text("40,25", encoding="utf-8")
    _, world, _ = make_game(tmp_path)
    session = get_session(world)
    assert (session.high_score, session.timed_high_score) == (40, 25)


def test_adjust_score_adds_pieces_plus_ten(tmp_path):
    _, world, system = make_game(tmp_path)
    system.adjust_score(4)
    assert get_session(world).score == 14


def test_settled_move_scores_and_releases_lock(tmp_path):
    bus, world, system = make_game(tmp_path)
    resolved = record(bus, EVENT_MOVE_RESOLVED)
    board = install_board(world, board_from_rows(ONE_MOVE_ROWS))
    board.pending_removal_count = 4
    system.update()
    assert get_session(world).score == 14
    assert board.pending_removal_count == 0
    assert resolved == [{"pieces": 4}]
    assert not get_session(world).game_over


def test_timed_move_adds_seconds_per_piece(tmp_path):
    _, world, system = make_game(tmp_path, timed=True)
    board = install_board(world, board_from_rows(ONE_MOVE_ROWS))
    board.pending_removal_count = 4
    system.update()
    session = get_session(world)
    assert session.score == 14
    assert session.time_remaining == 34


def test_swap_cascades_to_score_over_ticks(tmp_path):
    bus, world, system = make_game(tmp_path)
    resolved = record(bus, EVENT_MOVE_RESOLVED)
    board = install_board(world, board_from_rows(ONE_MOVE_ROWS, rng=random.Random(2)))
    assert system.select_cell(0, 2) is SelectionOutcome.SELECTED
    assert system.select_cell(1, 2) is SelectionOutcome.SWAPPED
    ticks = 0
    while not resolved:
        bus.emit(EVENT_LOGIC_TICK)
        ticks += 1
        assert ticks < 200
    assert ticks > 1
    pieces = resolved[0]["pieces"]
    assert pieces >= 3
    assert get_session(world).score == pieces + 10
    assert board.pending_removal_count == 0
    assert all(piece is not None for column in board.grid for piece in column)


def test_high_score_buckets_are_isolated(tmp_path):
    store = HighScoreStore(tmp_path / "scores.txt")
    _, world, system = make_game(tmp_path, store=store)
    session = get_session(world)

    system.adjust_score(5)
    assert (session.high_score, session.timed_high_score) == (15, 0)
    assert store.load() == (15, 0)

    system.new_game(timed=True)
    system.adjust_score(20)
    assert session.score == 30
    assert (session.high_score, session.timed_high_score) == (15, 30)
    assert store.load() == (15, 30)

    system.new_game(timed=False)
    system.adjust_score(100)
    assert (session.high_score, session.timed_high_score) == (110, 30)
    assert store.load() == (110, 30)


def test_scores_below_high_score_leave_it_alone(tmp_path):
    (tmp_path / "scores.txt").write_text("500,0", encoding="utf-8")
    _, world, system = make_game(tmp_path)
    system.adjust_score(3)
    assert get_session(world).high_score == 500
    assert (tmp_path / "scores.txt").read_text(encoding="utf-8") == "500,0"


def test_deadlock_after_move_ends_game(tmp_path):
    bus, world, system = make_game(tmp_path)
    over = record(bus, EVENT_GAME_OVER)
    board = install_board(world, board_from_rows(DEADLOCK_ROWS))
    board.pending_removal_count = 3
    system.update()
    session = get_session(world)
    assert session.score == 13
    assert session.state is SessionState.GAME_OVER
    assert session.message == NO_MOVES_MESSAGE
    assert over == [{"message": NO_MOVES_MESSAGE, "reason": "no_moves"}]
    schedule = get_schedule(world)
    assert (schedule.render, schedule.logic, schedule.timer) == (False, False, False)


def test_running_out_of_time_ends_game_on_same_update(tmp_path):
    bus, world, system = make_game(tmp_path, timed=True)
    over = record(bus, EVENT_GAME_OVER)
    install_board(world, board_from_rows(ONE_MOVE_ROWS))
    session = get_session(world)
    session.time_remaining = 0
    system.update()
    assert not session.game_over

    bus.emit(EVENT_TIMER_TICK)
    assert session.time_remaining == -1
    system.update()
    assert session.game_over
    assert over == [{"message": OUT_OF_TIME_MESSAGE, "reason": "out_of_time"}]

    for _ in range(3):
        system.update()
        bus.emit(EVENT_TIMER_TICK)
        bus.emit(EVENT_LOGIC_TICK)
    assert session.game_over
    assert session.time_remaining == -1
    assert len(over) == 1


def test_both_game_over_checks_fire_in_one_tick(tmp_path):
    bus, world, system = make_game(tmp_path, timed=True)
    over = record(bus, EVENT_GAME_OVER)
    board = install_board(world, board_from_rows(DEADLOCK_ROWS))
    board.pending_removal_count = 3
    get_session(world).time_remaining = -5
    system.update()
    assert [event["reason"] for event in over] == ["no_moves", "out_of_time"]
    assert get_session(world).game_over


def test_timer_tick_ignored_in_untimed_game(tmp_path):
    bus, world, _ = make_game(tmp_path)
    bus.emit(EVENT_TIMER_TICK)
    assert get_session(world).time_remaining is None


def test_logic_tick_does_nothing_once_disarmed(tmp_path):
    bus, world, _ = make_game(tmp_path)
    board = install_board(world, board_from_rows(ONE_MOVE_ROWS))
    get_schedule(world).disarm()
    board.pending_removal_count = 4
    bus.emit(EVENT_LOGIC_TICK)
    assert board.pending_removal_count == 4
    assert get_session(world).score == 0


def test_tile_click_event_selects_cell(tmp_path):
    bus, world, _ = make_game(tmp_path)
    selected = record(bus, EVENT_TILE_SELECTED)
    bus.emit(EVENT_TILE_CLICK, x=2, y=5)
    assert get_board(world).selected == (2, 5)
    assert selected == [{"x": 2, "y": 5}]


def test_swap_and_lock_events(tmp_path):
    bus, world, system = make_game(tmp_path)
    valid = record(bus, EVENT_SWAP_VALID)
    rejected = record(bus, EVENT_SELECTION_REJECTED)
    install_board(world, board_from_rows(ONE_MOVE_ROWS))
    system.select_cell(0, 2)
    system.select_cell(1, 2)
    assert valid == [{"src": (0, 2), "dst": (1, 2)}]
    assert system.select_cell(3, 3) is SelectionOutcome.REJECTED
    assert rejected and rejected[0]["reason"] == "move_in_progress"
    assert get_board(world).selected is None


def test_clicks_ignored_after_game_over(tmp_path):
    _, world, system = make_game(tmp_path)
    board = install_board(world, board_from_rows(DEADLOCK_ROWS))
    board.pending_removal_count = 3
    system.update()
    assert system.select_cell(1, 1) is None
    assert board.selected is None


def test_new_game_request_replaces_board_and_rearms(tmp_path):
    bus, world, system = make_game(tmp_path)
    old_board = install_board(world, board_from_rows(DEADLOCK_ROWS))
    old_board.pending_removal_count = 3
    system.update()
    assert get_session(world).game_over

    bus.emit(EVENT_NEW_GAME_REQUEST, timed=True)
    session = get_session(world)
    board = get_board(world)
    assert board is not old_board
    assert (board.width, board.height) == (8, 8)
    assert not session.game_over
    assert session.message is None
    assert session.score == 0
    assert session.time_remaining == 30
    schedule = get_schedule(world)
    assert (schedule.render, schedule.logic, schedule.timer) == (True, True, True)


class _BrokenStore(HighScoreStore):
    def save(self, high_score, timed_high_score):
        raise OSError("disk full")


def test_failed_save_is_logged_and_play_continues(tmp_path, caplog):
    store = _BrokenStore(tmp_path / "scores.txt")
    _, world, system = make_game(tmp_path, store=store)
    with caplog.at_level(logging.WARNING, logger="gemfall.systems.session"):
        system.adjust_score(6)
    assert get_session(world).score == 16
    assert "Could not save high scores" in caplog.text


def test_new_game_over_corrupt_store_starts_from_zero(tmp_path):
    (tmp_path / "scores.txt").write_bytes(b"\xff\xfe12,3")
    _, world, system = make_game(tmp_path)
    session = get_session(world)
    assert (session.high_score, session.timed_high_score) == (0, 0)
    assert not session.game_over
    system.adjust_score(2)
    assert (tmp_path / "scores.txt").read_text(encoding="utf-8") == "12,0"


def test_score_changed_reports_totals_per_settled_move(tmp_path):
    bus, world, system = make_game(tmp_path, timed=True)
    changes = record(bus, EVENT_SCORE_CHANGED)
    board = install_board(world, board_from_rows(ONE_MOVE_ROWS))
    board.pending_removal_count = 4
    system.update()
    board.pending_removal_count = 3
    system.update()
    assert changes == [
        {"score": 14, "high_score": 0, "timed_high_score": 14},
        {"score": 27, "high_score": 0, "timed_high_score": 27},
    ]


def test_cascade_step_reported_on_each_recheck_tick(tmp_path):
    bus, world, system = make_game(tmp_path)
    steps = record(bus, EVENT_CASCADE_STEP)
    resolved = record(bus, EVENT_MOVE_RESOLVED)
    board = install_board(world, board_from_rows(ONE_MOVE_ROWS, rng=random.Random(2)))
    system.select_cell(0, 2)
    system.select_cell(1, 2)
    ticks = 0
    while not resolved:
        bus.emit(EVENT_LOGIC_TICK)
        ticks += 1
        assert ticks < 200
    # every tick before the settling one was a cascade step
    assert len(steps) == ticks - 1
    assert steps[-1]["recheck"] is False
    assert all(step["recheck"] for step in steps[:-1])
    assert all(step["pending"] >= 3 for step in steps)
    assert steps[-1]["pending"] == resolved[0]["pieces"]
