"""Score and mode bookkeeping for the running game."""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class SessionState(Enum):
    ACTIVE_UNTIMED = auto()
    ACTIVE_TIMED = auto()
    GAME_OVER = auto()


@dataclass
class GameSession:
    """Singleton component living on the session entity next to the Board."""
    score: int = 0
    high_score: int = 0
    timed_high_score: int = 0
    time_remaining: Optional[int] = None
    game_over: bool = False
    message: Optional[str] = None

    @property
    def timed(self) -> bool:
        return self.time_remaining is not None

    @property
    def state(self) -> SessionState:
        if self.game_over:
            return SessionState.GAME_OVER
        return SessionState.ACTIVE_TIMED if self.timed else SessionState.ACTIVE_UNTIMED

    @property
    def displayed_high_score(self) -> int:
        return self.timed_high_score if self.timed else self.high_score
