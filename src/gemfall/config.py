"""Host/engine agreement on board size, timing and storage location."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from gemfall.constants import (
    ANIMATE_SPEED,
    BOARD_HEIGHT,
    BOARD_WIDTH,
    HIGH_SCORES_FILE,
    TIME_ALLOWED,
    TIME_GAIN_PER_PIECE,
    TIMER_SPEED,
    UPDATE_SPEED,
)


@dataclass(slots=True)
class GameConfig:
    width: int = BOARD_WIDTH
    height: int = BOARD_HEIGHT
    time_allowed: int = TIME_ALLOWED
    time_gain_per_piece: int = TIME_GAIN_PER_PIECE
    update_speed: float = UPDATE_SPEED
    animate_speed: float = ANIMATE_SPEED
    timer_speed: float = TIMER_SPEED
    high_scores_path: Path = Path(HIGH_SCORES_FILE)

    def __post_init__(self) -> None:
        if self.width < 3 or self.height < 3:
            raise ValueError(f"Board must be at least 3x3, got {self.width}x{self.height}")
        self.high_scores_path = Path(self.high_scores_path)
