import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from gemfall.components.piece import Piece

Position = Tuple[int, int]  # (x, y); y == 0 is the top row


@dataclass(slots=True)
class Board:
    """Grid of piece slots, indexed ``grid[x][y]``.

    A slot is ``None`` only while a removal is being compacted.
    ``pending_removal_count`` doubles as the move lock: selections are refused while it is non-zero.
    """
    width: int
    height: int
    rng: random.Random = field(default_factory=random.Random, repr=False)
    grid: List[List[Optional[Piece]]] = field(default_factory=list)
    selected: Optional[Position] = None
    pending_removal_count: int = 0
    needs_recheck: bool = False

    def __post_init__(self) -> None:
        if not self.grid:
            self.grid = [[None for _ in range(self.height)] for _ in range(self.width)]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def piece_at(self, x: int, y: int) -> Optional[Piece]:
        return self.grid[x][y]

    def colors(self) -> List[List[Optional[str]]]:
        """Color snapshot of the grid, ``None`` for empty slots."""
        return [[piece.color if piece else None for piece in column] for column in self.grid]
