from __future__ import annotations

import logging
from typing import Optional

from esper import World

from gemfall.components.board import Board
from gemfall.components.game_session import GameSession
from gemfall.config import GameConfig
from gemfall.constants import MOVE_BONUS
from gemfall.events.bus import (
    EventBus,
    EVENT_CASCADE_STEP,
    EVENT_GAME_OVER,
    EVENT_GAME_STARTED,
    EVENT_LOGIC_TICK,
    EVENT_MOVE_RESOLVED,
    EVENT_NEW_GAME_REQUEST,
    EVENT_SCORE_CHANGED,
    EVENT_SELECTION_REJECTED,
    EVENT_SWAP_INVALID,
    EVENT_SWAP_VALID,
    EVENT_TILE_CLICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_SELECTED,
    EVENT_TIMER_TICK,
)
from gemfall.persistence.high_scores import HighScoreStore
from gemfall.systems.board_ops import (
    SelectionOutcome,
    has_legal_move,
    resolve_step,
    select_piece,
    setup_board,
)
from gemfall.systems.session_utils import get_session_entity, get_session_state

logger = logging.getLogger(__name__)

NO_MOVES_MESSAGE = "Game over: no more moves"
OUT_OF_TIME_MESSAGE = "Game over: out of time"


class GameSessionSystem:
    """Drives the board through each move and turns the outcome into score, time and game over.

    States: active untimed, active timed, game over (terminal until ``new_game``).
    Host callbacks arrive as ``EVENT_LOGIC_TICK`` / ``EVENT_TIMER_TICK`` and only act
    while armed in the session's ``TickSchedule``.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        store: HighScoreStore | None = None,
        *,
        start: bool = True,
        timed: bool = False,
    ):
        self.world = world
        self.event_bus = event_bus
        self.config: GameConfig = getattr(world, "config", None) or GameConfig()
        self.store = store or HighScoreStore(self.config.high_scores_path)
        self.event_bus.subscribe(EVENT_LOGIC_TICK, self.on_logic_tick)
        self.event_bus.subscribe(EVENT_TIMER_TICK, self.on_timer_tick)
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_NEW_GAME_REQUEST, self.on_new_game_request)
        if start:
            self.new_game(timed)

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------
    def new_game(self, timed: bool = False) -> None:
        session, _, schedule = get_session_state(self.world)
        # Stop every callback before the board is swapped out.
        schedule.disarm()
        high_score, timed_high_score = self.store.load()
        board = Board(width=self.config.width, height=self.config.height, rng=self.world.random)
        setup_board(board)
        self.world.add_component(get_session_entity(self.world), board)
        session.score = 0
        session.high_score = high_score
        session.timed_high_score = timed_high_score
        session.game_over = False
        session.message = None
        session.time_remaining = self.config.time_allowed if timed else None
        schedule.arm(timed=timed)
        logger.info("New %s game started", "timed" if timed else "untimed")
        self.event_bus.emit(EVENT_GAME_STARTED, timed=timed)

    def adjust_score(self, pieces_removed: int) -> None:
        session, _, _ = get_session_state(self.world)
        session.score += pieces_removed + MOVE_BONUS
        if session.timed:
            session.time_remaining += pieces_removed * self.config.time_gain_per_piece
            if session.score > session.timed_high_score:
                session.timed_high_score = session.score
        elif session.score > session.high_score:
            session.high_score = session.score
        self._save_high_scores(session)
        self.event_bus.emit(
            EVENT_SCORE_CHANGED,
            score=session.score,
            high_score=session.high_score,
            timed_high_score=session.timed_high_score,
        )

    def update(self) -> None:
        session, board, _ = get_session_state(self.world)
        if session.game_over:
            return
        if board.needs_recheck:
            resolve_step(board)
            self.event_bus.emit(
                EVENT_CASCADE_STEP,
                pending=board.pending_removal_count,
                recheck=board.needs_recheck,
            )
        elif board.pending_removal_count != 0:
            pieces = board.pending_removal_count
            self.adjust_score(pieces)
            board.pending_removal_count = 0
            self.event_bus.emit(EVENT_MOVE_RESOLVED, pieces=pieces)
            if not has_legal_move(board):
                self._end_game(NO_MOVES_MESSAGE, reason="no_moves")
        if session.timed and session.time_remaining < 0:
            self._end_game(OUT_OF_TIME_MESSAGE, reason="out_of_time")

    def select_cell(self, x: int, y: int) -> Optional[SelectionOutcome]:
        session, board, _ = get_session_state(self.world)
        if session.game_over:
            return None
        previous = board.selected
        outcome = select_piece(board, x, y)
        if outcome is SelectionOutcome.REJECTED:
            self.event_bus.emit(EVENT_SELECTION_REJECTED, x=x, y=y, reason="move_in_progress")
        elif outcome is SelectionOutcome.SELECTED:
            self.event_bus.emit(EVENT_TILE_SELECTED, x=x, y=y)
        elif outcome is SelectionOutcome.DESELECTED:
            self.event_bus.emit(EVENT_TILE_DESELECTED, x=previous[0], y=previous[1], reason="not_adjacent")
        elif outcome is SelectionOutcome.SWAPPED:
            self.event_bus.emit(EVENT_SWAP_VALID, src=previous, dst=(x, y))
        else:
            self.event_bus.emit(EVENT_SWAP_INVALID, src=previous, dst=(x, y))
        return outcome

    def _end_game(self, message: str, *, reason: str) -> None:
        session, _, schedule = get_session_state(self.world)
        schedule.disarm()
        session.game_over = True
        session.message = message
        logger.info("%s (score %d)", message, session.score)
        self.event_bus.emit(EVENT_GAME_OVER, message=message, reason=reason)

    def _save_high_scores(self, session: GameSession) -> None:
        try:
            self.store.save(session.high_score, session.timed_high_score)
        except OSError as exc:
            logger.warning("Could not save high scores to %s: %s", self.store.path, exc)

    # ------------------------------------------------------------------
    # Host callbacks
    # ------------------------------------------------------------------
    def on_logic_tick(self, sender, **kwargs):
        _, _, schedule = get_session_state(self.world)
        if schedule.logic:
            self.update()

    def on_timer_tick(self, sender, **kwargs):
        session, _, schedule = get_session_state(self.world)
        if schedule.timer and session.timed and not session.game_over:
            session.time_remaining -= 1

    def on_tile_click(self, sender, **kwargs):
        x = kwargs.get('x')
        y = kwargs.get('y')
        if x is None or y is None:
            return
        self.select_cell(x, y)

    def on_new_game_request(self, sender, **kwargs):
        self.new_game(bool(kwargs.get('timed', False)))
