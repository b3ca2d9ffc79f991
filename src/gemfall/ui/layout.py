from dataclasses import dataclass
from typing import Optional, Tuple

from gemfall.constants import BOARD_HEIGHT, BOARD_WIDTH, PIECE_SIZE

BUTTON_NEW_GAME = "new_game"
BUTTON_NEW_TIMED_GAME = "new_timed_game"


@dataclass(slots=True)
class BoardLayout:
    """Pixel geometry of the window: a one-cell margin around the grid, buttons below it.

    Grid rows count downwards from the top while Arcade's y axis points up, so every
    conversion goes through ``window_height``.
    """
    cols: int = BOARD_WIDTH
    rows: int = BOARD_HEIGHT
    piece_size: int = PIECE_SIZE

    @property
    def window_width(self) -> int:
        return self.piece_size * (self.cols + 2)

    @property
    def window_height(self) -> int:
        return self.piece_size * (self.rows + 3)

    def cell_at(self, x: float, y: float) -> Optional[Tuple[int, int]]:
        """Grid coordinate under a window point, or None outside the grid."""
        from_top = self.window_height - y
        size = self.piece_size
        if not (size < x < size * (self.cols + 1) and size < from_top < size * (self.rows + 1)):
            return None
        return int(x // size) - 1, int(from_top // size) - 1

    def cell_center(self, grid_x: int, grid_y: int) -> Tuple[float, float]:
        size = self.piece_size
        center_x = size * (grid_x + 1) + size / 2
        center_y = self.window_height - (size * (grid_y + 1) + size / 2)
        return center_x, center_y

    def button_at(self, x: float, y: float) -> Optional[str]:
        from_top = self.window_height - y
        if from_top <= self.piece_size * (self.rows + 1.5):
            return None
        if x < self.window_width / 2:
            return BUTTON_NEW_GAME
        return BUTTON_NEW_TIMED_GAME

    def button_origin(self, button: str) -> Tuple[float, float]:
        """Bottom-left text anchor for a button label."""
        top = self.piece_size * (self.rows + 2)
        left = self.piece_size if button == BUTTON_NEW_GAME else self.window_width / 2 + self.piece_size / 2
        return left, self.window_height - top
